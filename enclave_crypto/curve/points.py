# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
P-256 point encoding and validation.

Wire forms follow SEC 1, section 2.3.3:

    compressed    0x02|0x03 || x          (33 bytes)
    uncompressed  0x04 || x || y          (65 bytes)

Coordinates are always fixed 32-byte big-endian values. Every decode path
ends in an EcPoint, whose constructor enforces the range and curve checks,
so an off-curve point cannot leave this module.
"""

from dataclasses import dataclass
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec

from ..encoding import (
    base64url_decode,
    base64url_encode,
    bytes_to_int,
    hex_to_bytes,
    int_to_bytes,
)
from ..exceptions import (
    CoordinateOutOfRange,
    FormatError,
    InvalidLength,
    InvalidPoint,
    InvalidPrefix,
    NoModularSquareRoot,
)
from .field import FIELD_SIZE, P, is_on_curve, recover_y

COMPRESSED_LENGTH = 1 + FIELD_SIZE
UNCOMPRESSED_LENGTH = 1 + 2 * FIELD_SIZE

PREFIX_EVEN = 0x02
PREFIX_ODD = 0x03
PREFIX_UNCOMPRESSED = 0x04


@dataclass(frozen=True)
class EcPoint:
    """Affine point on P-256. Construction fails for points off the curve."""

    x: int
    y: int

    def __post_init__(self):
        if not (0 <= self.x < P) or not (0 <= self.y < P):
            raise CoordinateOutOfRange("Point coordinate is outside [0, p)")
        if not is_on_curve(self.x, self.y):
            raise InvalidPoint("Point is not on curve P-256")

    def to_uncompressed(self) -> bytes:
        return (
            bytes([PREFIX_UNCOMPRESSED])
            + int_to_bytes(self.x, FIELD_SIZE)
            + int_to_bytes(self.y, FIELD_SIZE)
        )

    def to_compressed(self) -> bytes:
        prefix = PREFIX_ODD if self.y & 1 else PREFIX_EVEN
        return bytes([prefix]) + int_to_bytes(self.x, FIELD_SIZE)

    def to_jwk(self) -> dict:
        """
        Public JWK with fixed-width coordinates.

        Example:
            >>> from enclave_crypto.curve.field import GX, GY
            >>> sorted(EcPoint(GX, GY).to_jwk())
            ['crv', 'ext', 'kty', 'x', 'y']
        """
        return {
            "kty": "EC",
            "crv": "P-256",
            "x": base64url_encode(int_to_bytes(self.x, FIELD_SIZE)),
            "y": base64url_encode(int_to_bytes(self.y, FIELD_SIZE)),
            "ext": True,
        }

    def to_public_key(self) -> ec.EllipticCurvePublicKey:
        return ec.EllipticCurvePublicNumbers(self.x, self.y, ec.SECP256R1()).public_key()

    @classmethod
    def from_public_key(cls, public_key: ec.EllipticCurvePublicKey) -> "EcPoint":
        if not isinstance(public_key.curve, ec.SECP256R1):
            raise InvalidPoint(f"Unsupported curve {public_key.curve.name}")
        numbers = public_key.public_numbers()
        return cls(numbers.x, numbers.y)


@dataclass(frozen=True)
class CompressedPoint:
    """33-byte SEC 1 compressed encoding."""

    raw: bytes

    def __post_init__(self):
        if len(self.raw) != COMPRESSED_LENGTH:
            raise InvalidLength(
                f"Compressed point must be {COMPRESSED_LENGTH} bytes, got {len(self.raw)}"
            )
        if self.raw[0] not in (PREFIX_EVEN, PREFIX_ODD):
            raise InvalidPrefix(f"Invalid compressed point prefix 0x{self.raw[0]:02x}")

    def decode(self) -> EcPoint:
        x = bytes_to_int(self.raw[1:])
        if x >= P:
            raise CoordinateOutOfRange("x coordinate is outside [0, p)")
        try:
            y = recover_y(x, odd=self.raw[0] == PREFIX_ODD)
        except NoModularSquareRoot:
            raise InvalidPoint("x coordinate is not on curve P-256") from None
        return EcPoint(x, y)


@dataclass(frozen=True)
class UncompressedPoint:
    """65-byte SEC 1 uncompressed encoding."""

    raw: bytes

    def __post_init__(self):
        if len(self.raw) != UNCOMPRESSED_LENGTH:
            raise InvalidLength(
                f"Uncompressed point must be {UNCOMPRESSED_LENGTH} bytes, got {len(self.raw)}"
            )
        if self.raw[0] != PREFIX_UNCOMPRESSED:
            raise InvalidPrefix(f"Invalid uncompressed point prefix 0x{self.raw[0]:02x}")

    def decode(self) -> EcPoint:
        x = bytes_to_int(self.raw[1:1 + FIELD_SIZE])
        y = bytes_to_int(self.raw[1 + FIELD_SIZE:])
        return EcPoint(x, y)


EncodedPoint = Union[CompressedPoint, UncompressedPoint]


def parse_encoded_point(data: bytes) -> EncodedPoint:
    """
    Classify a raw encoding by length and wrap it in its tagged variant.

    Raises:
        InvalidLength: If the length is neither 33 nor 65
        InvalidPrefix: If the prefix does not match the length
    """
    data = bytes(data)
    if len(data) == COMPRESSED_LENGTH:
        return CompressedPoint(data)
    if len(data) == UNCOMPRESSED_LENGTH:
        return UncompressedPoint(data)
    raise InvalidLength(
        f"Public key must be {COMPRESSED_LENGTH} or {UNCOMPRESSED_LENGTH} bytes, got {len(data)}"
    )


def decode_point(data: bytes | EncodedPoint) -> EcPoint:
    """
    Decode a compressed or uncompressed point and validate it.

    Args:
        data: Raw encoding or an already classified EncodedPoint

    Returns:
        Validated EcPoint

    Raises:
        InvalidLength, InvalidPrefix: Malformed encoding
        CoordinateOutOfRange: Coordinate not reduced modulo p
        InvalidPoint: Point not on the curve
    """
    if not isinstance(data, (CompressedPoint, UncompressedPoint)):
        data = parse_encoded_point(data)
    return data.decode()


def compress_raw_public_key(raw_public_key: bytes) -> bytes:
    """
    Convert a 65-byte uncompressed point to its 33-byte compressed form.

    The point is validated before compression.
    """
    return UncompressedPoint(bytes(raw_public_key)).decode().to_compressed()


def uncompress_raw_public_key(raw_public_key: bytes) -> bytes:
    """Convert a 33-byte compressed point to its 65-byte uncompressed form."""
    return CompressedPoint(bytes(raw_public_key)).decode().to_uncompressed()


def point_from_jwk(jwk: dict) -> EcPoint:
    """Build a validated point from a public P-256 JWK."""
    if jwk.get("kty") != "EC" or jwk.get("crv") != "P-256":
        raise FormatError("JWK is not a P-256 EC key")
    try:
        x = base64url_decode(jwk["x"])
        y = base64url_decode(jwk["y"])
    except KeyError as e:
        raise FormatError(f"JWK is missing member {e.args[0]!r}") from None
    if len(x) != FIELD_SIZE or len(y) != FIELD_SIZE:
        raise InvalidLength("JWK coordinates must be 32 bytes")
    return EcPoint(bytes_to_int(x), bytes_to_int(y))


def load_public_key(data: bytes | str) -> ec.EllipticCurvePublicKey:
    """
    Load a P-256 public key from raw bytes or hex, compressed or not.

    The point is validated here rather than left to the backend.
    """
    if isinstance(data, str):
        data = hex_to_bytes(data)
    return decode_point(data).to_public_key()
