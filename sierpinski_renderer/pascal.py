"""
Pascal Rows - Functional Core

Lazy generators for rows of Pascal's triangle and their parity.

Generators produce one row at a time and are created fresh on every call,
so a consumer never holds more than the current row and can restart
iteration simply by calling the function again.
"""

from typing import Iterator, List

from .exact_math import combination, exact_divide, integer_range


# ============================================================================
# Binomial Rows
# ============================================================================

def binomial_row(n: int) -> List[int]:
    """Coefficients [C(n, 0), C(n, 1), ..., C(n, n)]

    Built left to right with C(n, k) = C(n, k - 1) * (n - k + 1) / k, each
    division checked for exactness. Row n costs n big-integer steps instead
    of n full combination() products.

    Args:
        n: Row index (n >= 0)

    Returns:
        List of n + 1 exact integers
    """
    row = [combination(n, 0)]     # Also validates n
    for k in integer_range(1, n):
        row.append(exact_divide(row[-1] * (n - k + 1), k))
    return row


def pascal_triangle(from_n: int, to_n: int) -> Iterator[List[int]]:
    """Yield binomial rows for every n in [from_n, to_n]

    Args:
        from_n: First row index
        to_n: Last row index (inclusive)

    Yields:
        One coefficient list per row, in increasing n
    """
    for n in integer_range(from_n, to_n):
        yield binomial_row(n)


# ============================================================================
# Parity Rows
# ============================================================================

def is_odd_coefficient(n: int, k: int) -> bool:
    """True if C(n, k) is odd, without computing the coefficient

    By Lucas' theorem C(n, k) is odd exactly when every bit set in k is
    also set in n.
    """
    return (n & k) == k


def parity_row(n: int, use_bitwise: bool = False) -> List[bool]:
    """Parity of each coefficient in row n

    Args:
        n: Row index (n >= 0)
        use_bitwise: Use the (n & k) == k test instead of exact coefficients

    Returns:
        List of n + 1 booleans, True where C(n, k) is odd
    """
    if use_bitwise:
        return [is_odd_coefficient(n, k) for k in integer_range(0, n)]
    return [coefficient % 2 == 1 for coefficient in binomial_row(n)]


def sierpinski_triangle(
    from_n: int,
    to_n: int,
    use_bitwise: bool = False
) -> Iterator[List[bool]]:
    """Yield parity rows for every n in [from_n, to_n]

    Args:
        from_n: First row index
        to_n: Last row index (inclusive)
        use_bitwise: Compute parity without big-integer coefficients

    Yields:
        One boolean list per row, in increasing n
    """
    if use_bitwise:
        for n in integer_range(from_n, to_n):
            yield parity_row(n, use_bitwise=True)
        return

    for row in pascal_triangle(from_n, to_n):
        yield [coefficient % 2 == 1 for coefficient in row]
