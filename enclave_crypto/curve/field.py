# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Arithmetic over the P-256 prime field.

These helpers operate on public values only (point coordinates during
decompression and validation). They are not constant-time and must never
be applied to private scalars.
"""

from ..exceptions import NoModularSquareRoot

# NIST P-256 domain parameters (FIPS 186-4, D.1.2.3)
P = 0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFF
A = P - 3
B = 0x5AC635D8AA3A93E7B3EBBD55769886BC651D06B0CC53B0F63BCE3C3E27D2604B
N = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551
GX = 0x6B17D1F2E12C4247F8BCE6E563A440F277037D812DEB33A0F4A13945D898C296
GY = 0x4FE342E2FE1A7F9B8EE7EB4A7C0F9E162BCE33576B315ECECBB6406837BF51F5

FIELD_SIZE = 32


def mod_pow(base: int, exp: int, modulus: int) -> int:
    """
    Compute ``base ** exp % modulus`` by left-to-right square-and-multiply.

    Args:
        base: Non-negative base
        exp: Non-negative exponent
        modulus: Positive modulus

    Returns:
        The modular power

    Example:
        >>> mod_pow(3, 200, 7)
        2
    """
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exp < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0

    result = 1
    base %= modulus
    for bit in bin(exp)[2:]:
        result = result * result % modulus
        if bit == "1":
            result = result * base % modulus
    return result


def mod_sqrt(x: int, p: int = P) -> int:
    """
    Compute a square root of ``x`` modulo a prime ``p`` with p = 3 (mod 4).

    The candidate ``x ** ((p + 1) / 4)`` is squared back and compared with
    ``x``; a mismatch means ``x`` is not a quadratic residue.

    Returns:
        One of the two roots (the caller selects the parity)

    Raises:
        ValueError: If p is not positive or p != 3 (mod 4)
        NoModularSquareRoot: If no root exists
    """
    if p <= 0:
        raise ValueError("p must be positive")
    if p % 4 != 3:
        raise ValueError("Unsupported modulus: p must be 3 mod 4")

    x %= p
    root = mod_pow(x, (p + 1) >> 2, p)
    if root * root % p != x:
        raise NoModularSquareRoot("Value has no square root modulo p")
    return root


def curve_rhs(x: int) -> int:
    """Right-hand side of the curve equation, x^3 - 3x + b mod p."""
    return (x * x * x + A * x + B) % P


def is_on_curve(x: int, y: int) -> bool:
    """
    Check ``y^2 = x^3 - 3x + b (mod p)`` for reduced coordinates.

    Example:
        >>> is_on_curve(GX, GY)
        True
    """
    if not (0 <= x < P and 0 <= y < P):
        return False
    return y * y % P == curve_rhs(x)


def recover_y(x: int, odd: bool) -> int:
    """
    Recover the y coordinate for ``x`` with the requested parity.

    Raises:
        NoModularSquareRoot: If ``x`` is not the abscissa of a curve point
    """
    y = mod_sqrt(curve_rhs(x), P)
    if bool(y & 1) != odd:
        y = (P - y) % P
    return y
