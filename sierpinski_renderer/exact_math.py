"""
Exact Arithmetic - Functional Core

Pure functions for arbitrary-precision combinatorics.
No side effects, no floating point - Python ints only.

Rows of a few hundred entries produce coefficients far beyond 64 bits,
so every helper here stays in exact integer arithmetic and checks that
divisions which must be exact really are.
"""

import numbers
from typing import Iterable, Iterator

from .errors import ArithmeticPreconditionError, NonExactDivisionError


# ============================================================================
# Ranges and Products
# ============================================================================

def integer_range(start: int, stop: int) -> Iterator[int]:
    """Lazily iterate integers in [start, stop] (both ends inclusive)

    Args:
        start: First integer
        stop: Last integer (nothing is produced when stop < start)

    Yields:
        start, start + 1, ..., stop
    """
    current = start
    while current <= stop:
        yield current
        current += 1


def multiply(items: Iterable[int], base: int = 1) -> int:
    """Product of all items, starting from base

    Args:
        items: Integers to multiply
        base: Multiplicative starting value

    Returns:
        base * item_1 * item_2 * ...
    """
    result = base
    for item in items:
        result *= item
    return result


def product_of_range(start: int, stop: int) -> int:
    """Product of all integers in [start, stop]

    Empty ranges (start > stop) return the multiplicative identity.

    Examples:
        >>> product_of_range(3, 5)
        60
        >>> product_of_range(5, 3)
        1
    """
    return multiply(integer_range(start, stop))


def factorial(n: int) -> int:
    """n! as product_of_range(2, n); 0! and 1! are 1"""
    return product_of_range(2, n)


# ============================================================================
# Checked Division
# ============================================================================

def exact_divide(numerator: int, denominator: int) -> int:
    """Integer division that must leave no remainder

    Args:
        numerator: Dividend
        denominator: Divisor (non-zero)

    Returns:
        numerator // denominator

    Raises:
        NonExactDivisionError: If the division leaves a remainder
    """
    quotient, remainder = divmod(numerator, denominator)
    if remainder != 0:
        raise NonExactDivisionError(
            f"{numerator} is not divisible by {denominator} (remainder {remainder})"
        )
    return quotient


# ============================================================================
# Binomial Coefficients
# ============================================================================

def _check_combination_args(n, k) -> None:
    for name, value in (('n', n), ('k', k)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ArithmeticPreconditionError(
                f"combination() needs integer arguments, got {name}={value!r}"
            )
    if n < 0 or k < 0:
        raise ArithmeticPreconditionError(
            f"combination() needs non-negative arguments, got n={n}, k={k}"
        )
    if k > n:
        raise ArithmeticPreconditionError(
            f"combination() needs k <= n, got n={n}, k={k}"
        )


def combination(n: int, k: int) -> int:
    """Binomial coefficient C(n, k) without forming n!

    The smaller of k and n - k is the reduction side, so only
    n - max(k, n - k) factors are multiplied before dividing by the
    factorial of the smaller side.

    Args:
        n: Row index (n >= 0)
        k: Cell index (0 <= k <= n)

    Returns:
        C(n, k) as an exact integer

    Raises:
        ArithmeticPreconditionError: If arguments are negative, non-integral
            or k > n
        NonExactDivisionError: If the final division is not exact
    """
    _check_combination_args(n, k)
    n, k = int(n), int(k)

    smaller = min(k, n - k)
    larger = n - smaller
    return exact_divide(product_of_range(larger + 1, n), factorial(smaller))
