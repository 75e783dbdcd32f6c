"""
Tests for exact arithmetic - Functional Core

Pure combinatorics, no drawing. Cross-checks the product formula against
independent identities (symmetry, Pascal's recurrence, math.comb).
"""

import math

import pytest

from .errors import ArithmeticPreconditionError, NonExactDivisionError
from .exact_math import (
    integer_range,
    multiply,
    product_of_range,
    factorial,
    exact_divide,
    combination,
)


class TestRangesAndProducts:
    """Test inclusive ranges and range products"""

    def test_integer_range_is_inclusive(self):
        """Both ends of the range are produced"""
        assert list(integer_range(2, 5)) == [2, 3, 4, 5]
        assert list(integer_range(3, 3)) == [3]

    def test_integer_range_empty_when_reversed(self):
        """start > stop produces nothing"""
        assert list(integer_range(5, 4)) == []

    def test_multiply_with_base(self):
        assert multiply([2, 3, 4]) == 24
        assert multiply([2, 3], base=10) == 60
        assert multiply([]) == 1

    def test_product_of_range(self):
        assert product_of_range(3, 5) == 60
        assert product_of_range(1, 1) == 1
        assert product_of_range(7, 7) == 7

    @pytest.mark.parametrize("start,stop", [(1, 0), (5, 3), (100, 2), (0, -1), (2, -50)])
    def test_empty_range_product_is_one(self, start, stop):
        """Empty ranges return the multiplicative identity"""
        assert product_of_range(start, stop) == 1

    def test_factorial_small_values(self):
        assert factorial(0) == 1
        assert factorial(1) == 1
        assert factorial(5) == 120
        assert factorial(20) == 2432902008176640000

    def test_factorial_exceeds_64_bits(self):
        """Python ints keep full precision past fixed-width limits"""
        assert factorial(30) == math.factorial(30)
        assert factorial(30) > 2 ** 64


class TestExactDivide:
    """Test checked integer division"""

    def test_exact_division(self):
        assert exact_divide(120, 6) == 20
        assert exact_divide(0, 7) == 0

    def test_remainder_raises(self):
        """A remainder is a defect, never rounded away"""
        with pytest.raises(NonExactDivisionError):
            exact_divide(7, 2)

    def test_error_is_arithmetic_error(self):
        with pytest.raises(ArithmeticError):
            exact_divide(10, 3)


class TestCombination:
    """Test binomial coefficients"""

    def test_known_values(self):
        assert combination(4, 2) == 6
        assert combination(5, 2) == 10
        assert combination(10, 3) == 120
        assert combination(52, 5) == 2598960

    def test_matches_math_comb(self):
        """Product formula agrees with the standard library for n <= 60"""
        for n in range(61):
            for k in range(n + 1):
                assert combination(n, k) == math.comb(n, k)

    def test_symmetry_up_to_200(self):
        """C(n, k) == C(n, n - k) for all 0 <= k <= n <= 200"""
        for n in range(201):
            for k in range(n + 1):
                assert combination(n, k) == combination(n, n - k)

    def test_edges_are_one(self):
        """C(n, 0) == C(n, n) == 1"""
        for n in range(150):
            assert combination(n, 0) == 1
            assert combination(n, n) == 1

    def test_pascal_recurrence(self):
        """C(n, k) == C(n-1, k-1) + C(n-1, k) for 0 < k < n"""
        for n in range(1, 121):
            for k in range(1, n):
                assert combination(n, k) == combination(n - 1, k - 1) + combination(n - 1, k)

    def test_large_row_exceeds_64_bits(self):
        """Middle of row 256 needs arbitrary precision"""
        value = combination(256, 128)
        assert value > 2 ** 64
        assert value == math.comb(256, 128)

    def test_k_greater_than_n_raises(self):
        with pytest.raises(ArithmeticPreconditionError):
            combination(3, 4)

    @pytest.mark.parametrize("n,k", [(-1, 0), (5, -1), (-3, -2)])
    def test_negative_arguments_raise(self, n, k):
        with pytest.raises(ArithmeticPreconditionError):
            combination(n, k)

    @pytest.mark.parametrize("n,k", [(4.0, 2), (4, 2.5), ("4", 2), (True, 0)])
    def test_non_integer_arguments_raise(self, n, k):
        with pytest.raises(ArithmeticPreconditionError):
            combination(n, k)

    def test_precondition_error_is_value_error(self):
        """Callers catching ValueError also see precondition failures"""
        with pytest.raises(ValueError):
            combination(2, 3)
