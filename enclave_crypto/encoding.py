# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Byte encodings used on the wire: hex, base64url, base58check and
fixed-width big-endian integers.

All decoders are strict and raise FormatError (a ValueError) on malformed
input instead of silently dropping characters.
"""

import base64
import binascii
import re

import base58

from .exceptions import FormatError, InvalidLength

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


def hex_to_bytes(value: str) -> bytes:
    """
    Decode a hex string into bytes.

    Args:
        value: Even-length hex string, no ``0x`` prefix

    Returns:
        Decoded bytes

    Raises:
        FormatError: If the string is empty, odd-length or not hex

    Example:
        >>> hex_to_bytes("00ff")
        b'\\x00\\xff'
    """
    if not isinstance(value, str) or not value:
        raise FormatError("Expected a non-empty hex string")
    if len(value) % 2 != 0 or not _HEX_RE.match(value):
        raise FormatError(f"Invalid hex string of length {len(value)}")
    return bytes.fromhex(value)


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex."""
    return bytes(data).hex()


def strip_hex_prefix(value: str) -> str:
    """Remove an optional ``0x`` prefix."""
    return value[2:] if value.startswith(("0x", "0X")) else value


def int_to_bytes(value: int, length: int = 32) -> bytes:
    """
    Encode a non-negative integer as fixed-width big-endian bytes.

    Leading zero bytes are kept so that the result is always ``length`` long.

    Raises:
        InvalidLength: If the value does not fit in ``length`` bytes
    """
    if value < 0:
        raise FormatError("Cannot encode a negative integer")
    try:
        return value.to_bytes(length, byteorder="big")
    except OverflowError:
        raise InvalidLength(f"Integer does not fit in {length} bytes") from None


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, byteorder="big")


def base64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def base64url_decode(value: str) -> bytes:
    """
    Decode unpadded (or padded) base64url.

    Raises:
        FormatError: If the string contains characters outside the alphabet
    """
    stripped = value.rstrip("=")
    if not _BASE64URL_RE.match(stripped) or len(stripped) % 4 == 1:
        raise FormatError("Invalid base64url string")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        raise FormatError("Invalid base64url string") from None


def base58_encode(data: bytes) -> str:
    return base58.b58encode(bytes(data)).decode("ascii")


def base58_decode(value: str) -> bytes:
    try:
        return base58.b58decode(value)
    except ValueError:
        raise FormatError("Invalid base58 string") from None


def base58check_encode(data: bytes) -> str:
    """Encode bytes as base58 with a 4-byte double SHA-256 checksum."""
    return base58.b58encode_check(bytes(data)).decode("ascii")


def base58check_decode(value: str) -> bytes:
    """
    Decode base58check, verifying the trailing checksum.

    Raises:
        FormatError: If the alphabet or the checksum is invalid
    """
    try:
        return base58.b58decode_check(value)
    except ValueError:
        raise FormatError("Invalid base58check string") from None

