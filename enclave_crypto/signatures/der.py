# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
ECDSA signature conversion between IEEE-P1363 and DER.

IEEE-P1363 is the fixed 64-byte ``r || s`` form used by WebCrypto and the
API stamp. DER is ``SEQUENCE { INTEGER r, INTEGER s }`` as produced by most
other platforms.

Only the DER subset needed for P-256 signatures is parsed. Lengths must use
the short form (0x00-0x7F); a long-form length byte is rejected rather than
interpreted, since no valid P-256 signature needs one.
"""

from dataclasses import dataclass

from ..encoding import bytes_to_hex, bytes_to_int, hex_to_bytes, int_to_bytes
from ..exceptions import (
    InsufficientLength,
    InvalidFormat,
    InvalidIntegerTag,
    InvalidPadding,
    UnexpectedIntegerLength,
    UnsupportedLengthEncoding,
)

SCALAR_SIZE = 32
IEEE1363_LENGTH = 2 * SCALAR_SIZE

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02
LONG_FORM_BIT = 0x80


@dataclass(frozen=True)
class Signature:
    """ECDSA signature scalars."""

    r: int
    s: int

    def __post_init__(self):
        for name, value in (("r", self.r), ("s", self.s)):
            if not (0 <= value < 1 << (8 * SCALAR_SIZE)):
                raise InvalidFormat(f"Signature component {name} does not fit 32 bytes")

    @classmethod
    def from_ieee1363(cls, data: bytes) -> "Signature":
        if len(data) != IEEE1363_LENGTH:
            raise InvalidFormat(
                f"IEEE-P1363 signature must be {IEEE1363_LENGTH} bytes, got {len(data)}"
            )
        return cls(bytes_to_int(data[:SCALAR_SIZE]), bytes_to_int(data[SCALAR_SIZE:]))

    @classmethod
    def from_der(cls, der: bytes) -> "Signature":
        return cls.from_ieee1363(der_to_ieee1363(der))

    def to_ieee1363(self) -> bytes:
        return int_to_bytes(self.r, SCALAR_SIZE) + int_to_bytes(self.s, SCALAR_SIZE)

    def to_der(self) -> bytes:
        return ieee1363_to_der(self.to_ieee1363())


def _encode_length(length: int) -> bytes:
    # Short form only; P-256 signatures never exceed 72 bytes
    if length >= LONG_FORM_BIT:
        raise InvalidFormat(f"DER length {length} needs long-form encoding")
    return bytes([length])


def _encode_integer(value: bytes) -> bytes:
    value = value.lstrip(b"\x00") or b"\x00"
    # A set high bit would read as negative
    if value[0] & 0x80:
        value = b"\x00" + value
    return bytes([INTEGER_TAG]) + _encode_length(len(value)) + value


def ieee1363_to_der(signature: bytes) -> bytes:
    """
    Convert a 64-byte ``r || s`` signature to DER.

    Raises:
        InvalidFormat: If the input is not 64 bytes

    Example:
        >>> der = ieee1363_to_der(bytes(31) + b"\\x01" + bytes(31) + b"\\x80")
        >>> der.hex()
        '300702010102020080'
    """
    signature = bytes(signature)
    if len(signature) != IEEE1363_LENGTH:
        raise InvalidFormat(
            f"IEEE-P1363 signature must be {IEEE1363_LENGTH} bytes, got {len(signature)}"
        )
    body = _encode_integer(signature[:SCALAR_SIZE]) + _encode_integer(signature[SCALAR_SIZE:])
    return bytes([SEQUENCE_TAG]) + _encode_length(len(body)) + body


def read_der_length(der: bytes, offset: int) -> tuple[int, int]:
    """
    Read a short-form DER length at ``offset``.

    Returns:
        Tuple of (length, offset of the first content byte)

    Raises:
        InsufficientLength: If ``offset`` is past the end of the buffer
        UnsupportedLengthEncoding: If the length uses the long form
    """
    if offset >= len(der):
        raise InsufficientLength("Signature ends before a length byte")
    length = der[offset]
    if length & LONG_FORM_BIT:
        raise UnsupportedLengthEncoding(
            f"Long-form DER length 0x{length:02x} is not supported"
        )
    return length, offset + 1


def _read_integer(der: bytes, offset: int, end: int) -> tuple[bytes, int]:
    if offset >= end:
        raise InsufficientLength("Signature ends before an INTEGER")
    if der[offset] != INTEGER_TAG:
        raise InvalidIntegerTag(f"Expected INTEGER tag, got 0x{der[offset]:02x}")
    length, offset = read_der_length(der, offset + 1)
    if offset + length > end:
        raise InsufficientLength("INTEGER runs past the end of the signature")
    # 33 bytes means a positive 32-byte scalar with its sign byte. Shorter
    # integers are valid DER for scalars with leading zero bytes.
    if length == 0 or length > SCALAR_SIZE + 1:
        raise UnexpectedIntegerLength(f"Unexpected INTEGER length {length}")
    value = der[offset:offset + length]
    if length == SCALAR_SIZE + 1:
        if value[0] != 0x00:
            raise InvalidPadding("33-byte INTEGER must start with 0x00")
        value = value[1:]
    return value.rjust(SCALAR_SIZE, b"\x00"), offset + length


def der_to_ieee1363(der: bytes) -> bytes:
    """
    Convert a DER signature to the 64-byte ``r || s`` form.

    Args:
        der: DER-encoded signature, with no trailing bytes

    Returns:
        64-byte IEEE-P1363 signature

    Raises:
        InvalidFormat: Not a SEQUENCE, or bytes left after the contents
        InsufficientLength: Buffer shorter than the declared contents
        UnsupportedLengthEncoding: Long-form length byte
        InvalidIntegerTag: Element is not an INTEGER
        UnexpectedIntegerLength: INTEGER empty or longer than 33 bytes
        InvalidPadding: 33-byte INTEGER without a leading zero
    """
    der = bytes(der)
    if len(der) < 2:
        raise InsufficientLength(f"DER signature too short: {len(der)} bytes")
    if der[0] != SEQUENCE_TAG:
        raise InvalidFormat(f"Expected SEQUENCE tag, got 0x{der[0]:02x}")

    length, offset = read_der_length(der, 1)
    end = offset + length
    if end > len(der):
        raise InsufficientLength("SEQUENCE runs past the end of the signature")
    if end != len(der):
        raise InvalidFormat("Unexpected bytes after the DER signature")

    r, offset = _read_integer(der, offset, end)
    s, offset = _read_integer(der, offset, end)
    if offset != end:
        raise InvalidFormat("Unexpected bytes inside the DER SEQUENCE")
    return r + s


def normalize_der_signature(der: bytes) -> bytes:
    """
    Drop zero bytes appended after the declared end of a DER signature.

    Some platform ECDSA implementations return a fixed-size buffer padded with
    zeros. The buffer is only trimmed when every extra byte is zero; anything
    else is returned unchanged and left for the strict parser to reject.
    """
    der = bytes(der)
    if len(der) < 2 or der[0] != SEQUENCE_TAG or der[1] & LONG_FORM_BIT:
        return der
    declared = 2 + der[1]
    if len(der) > declared and not any(der[declared:]):
        return der[:declared]
    return der


def to_der_signature(raw_signature: str) -> str:
    """
    Convert a hex IEEE-P1363 signature to hex DER.

    Example:
        >>> to_der_signature("01" * 64)[:8]
        '30440220'
    """
    return bytes_to_hex(ieee1363_to_der(hex_to_bytes(raw_signature)))


def from_der_signature(der_signature: str) -> bytes:
    """Convert a hex DER signature to 64 raw ``r || s`` bytes."""
    return der_to_ieee1363(normalize_der_signature(hex_to_bytes(der_signature)))
