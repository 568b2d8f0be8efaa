# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Exception hierarchy for the enclave crypto core.

Every error raised by this package derives from EnclaveCryptoError. Errors
describing malformed input also derive from ValueError so that callers that
only catch ValueError keep working.

Messages never include key material, shared secrets or plaintext.
"""


class EnclaveCryptoError(Exception):
    """Base class for all enclave crypto errors."""


# Malformed bytes, hex, JSON or base58

class FormatError(EnclaveCryptoError, ValueError):
    """Input could not be parsed."""


class InvalidLength(FormatError):
    """Buffer has the wrong length for the requested encoding."""


class InvalidPrefix(FormatError):
    """Point encoding has an unknown leading byte."""


# Elliptic curve validation

class CurveValidationError(EnclaveCryptoError, ValueError):
    """Point or scalar is not valid for P-256."""


class CoordinateOutOfRange(CurveValidationError):
    """Coordinate is negative or not smaller than the field prime."""


class InvalidPoint(CurveValidationError):
    """Point does not satisfy the curve equation."""


class NoModularSquareRoot(CurveValidationError):
    """Value is not a quadratic residue modulo the field prime."""


# Signature encodings

class SignatureFormatError(EnclaveCryptoError, ValueError):
    """Malformed DER or IEEE-P1363 signature."""


class InvalidFormat(SignatureFormatError):
    """Signature does not start with a DER SEQUENCE or has the wrong size."""


class InsufficientLength(SignatureFormatError):
    """Signature ends before its declared contents."""


class UnsupportedLengthEncoding(SignatureFormatError):
    """DER long-form length bytes are not accepted."""


class InvalidIntegerTag(SignatureFormatError):
    """Expected a DER INTEGER tag (0x02)."""


class UnexpectedIntegerLength(SignatureFormatError):
    """DER INTEGER does not fit a P-256 scalar."""


class InvalidPadding(SignatureFormatError):
    """Leading padding byte of a scalar is not zero."""


# Authentication

class AuthenticationError(EnclaveCryptoError):
    """AEAD tag, ECDSA signature or token verification failed."""


class InvalidEnclaveSignature(AuthenticationError):
    """Bundle was not signed by the expected enclave quorum key."""


# Binding checks

class ConsistencyError(EnclaveCryptoError):
    """Bundle is bound to a different principal than expected."""


class OrganizationMismatch(ConsistencyError):
    """Bundle organization id differs from the expected one."""


class UserMismatch(ConsistencyError):
    """Bundle user id differs from the expected one."""


# Misuse

class KeyReuseError(EnclaveCryptoError):
    """Single-use key material was used a second time."""


class ConfigurationError(EnclaveCryptoError):
    """Required key or setting is missing or invalid."""
