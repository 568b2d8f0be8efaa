# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Unit tests for P-256 field arithmetic.

Tests:
- Modular exponentiation
- Modular square roots for p = 3 mod 4
- Curve equation check
"""

import pytest

from enclave_crypto.curve.field import (
    B,
    GX,
    GY,
    P,
    curve_rhs,
    is_on_curve,
    mod_pow,
    mod_sqrt,
    recover_y,
)
from enclave_crypto.exceptions import NoModularSquareRoot


class TestModPow:
    """Test square-and-multiply exponentiation."""

    def test_matches_builtin_pow(self):
        """Test agreement with Python's three-argument pow."""
        cases = [(2, 10, 1000), (3, 200, 7), (GX, P - 2, P), (123456789, 0, 97)]
        for base, exp, modulus in cases:
            assert mod_pow(base, exp, modulus) == pow(base, exp, modulus)

    def test_modulus_one(self):
        """Test that everything is 0 modulo 1."""
        assert mod_pow(5, 3, 1) == 0

    def test_invalid_arguments(self):
        """Test rejection of non-positive modulus and negative exponent."""
        with pytest.raises(ValueError):
            mod_pow(2, 3, 0)
        with pytest.raises(ValueError):
            mod_pow(2, -1, 7)


class TestModSqrt:
    """Test modular square roots."""

    def test_root_of_square(self):
        """Test that the root squares back to the input."""
        for value in (4, 9, GY, P - 1 - GY):
            square = value * value % P
            root = mod_sqrt(square, P)
            assert root * root % P == square
            assert root in (value % P, (P - value) % P)

    def test_small_prime(self):
        """Test with p = 7 (7 = 3 mod 4)."""
        assert mod_sqrt(2, 7) in (3, 4)

    def test_non_residue(self):
        """Test that a non-residue raises NoModularSquareRoot."""
        # 3 is a non-residue mod 7
        with pytest.raises(NoModularSquareRoot):
            mod_sqrt(3, 7)

    def test_unsupported_modulus(self):
        """Test rejection of primes that are 1 mod 4 and of non-positive p."""
        with pytest.raises(ValueError, match="Unsupported modulus"):
            mod_sqrt(4, 13)
        with pytest.raises(ValueError, match="positive"):
            mod_sqrt(4, -7)


class TestCurveEquation:
    """Test the P-256 curve check."""

    def test_generator_on_curve(self):
        """Test that the base point satisfies the equation."""
        assert is_on_curve(GX, GY)

    def test_negated_generator_on_curve(self):
        """Test that -G is on the curve."""
        assert is_on_curve(GX, P - GY)

    def test_off_curve(self):
        """Test that a perturbed point is rejected."""
        assert not is_on_curve(GX, GY + 1)

    def test_out_of_range(self):
        """Test that unreduced coordinates are rejected."""
        assert not is_on_curve(GX + P, GY)

    def test_rhs_at_zero(self):
        """Test that x = 0 gives b."""
        assert curve_rhs(0) == B

    def test_recover_y_parity(self):
        """Test that recover_y selects the requested parity."""
        odd = recover_y(GX, odd=True)
        even = recover_y(GX, odd=False)
        assert odd & 1 == 1
        assert even & 1 == 0
        assert {odd, even} == {GY, P - GY}
