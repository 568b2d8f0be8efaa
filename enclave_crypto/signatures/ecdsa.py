# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
ECDSA P-256 signing and the verification entry points used by callers:
API request stamps, session JWTs and enclave verification tokens.
"""

import hashlib
import json
import logging
import time
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from ..config import settings
from ..curve.keys import load_private_key
from ..curve.points import load_public_key
from ..encoding import base64url_decode, bytes_to_hex
from ..exceptions import AuthenticationError, ConfigurationError, FormatError
from .der import IEEE1363_LENGTH, Signature, der_to_ieee1363, from_der_signature

logger = logging.getLogger(__name__)


def _to_bytes(message: str | bytes) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def sign_p256(message: str | bytes, private_key: str) -> str:
    """
    Sign SHA-256(message) with a raw P-256 private key.

    Args:
        message: Message to sign; strings are encoded as UTF-8
        private_key: 32-byte private scalar as hex

    Returns:
        64-byte IEEE-P1363 ``r || s`` signature as hex

    Example:
        >>> sig = sign_p256("hello", "01" * 32)
        >>> len(sig)
        128
    """
    key = load_private_key(private_key)
    der = key.sign(_to_bytes(message), ec.ECDSA(hashes.SHA256()))
    return bytes_to_hex(der_to_ieee1363(der))


def verify_p256(
    message: str | bytes,
    signature: bytes,
    public_key: bytes | str | ec.EllipticCurvePublicKey,
) -> bool:
    """
    Verify a P-256 signature over SHA-256(message).

    Args:
        message: Signed message
        signature: 64-byte ``r || s`` signature
        public_key: Public key object, or compressed/uncompressed point

    Returns:
        True if valid, False otherwise

    Raises:
        InvalidFormat: If the signature is not 64 bytes
    """
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        public_key = load_public_key(public_key)
    der = Signature.from_ieee1363(bytes(signature)).to_der()
    try:
        public_key.verify(der, _to_bytes(message), ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False


def verify_stamp_signature(public_key: str, signature: str, signed_data: str) -> bool:
    """
    Verify an API stamp signature.

    Args:
        public_key: Signer public key as hex (compressed or uncompressed)
        signature: DER signature as hex
        signed_data: The exact request body that was signed

    Returns:
        True if the signature is valid, False otherwise

    Raises:
        FormatError: Malformed key
        SignatureFormatError: Malformed DER
        CurveValidationError: Key is not a valid P-256 point
    """
    key = load_public_key(public_key)
    raw = from_der_signature(signature)
    return verify_p256(signed_data, raw, key)


def _split_jwt(token: str) -> tuple[str, str, str]:
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise FormatError("Invalid JWT: expected three dot-separated parts")
    return parts[0], parts[1], parts[2]


def _jwt_signature(encoded: str) -> bytes:
    signature = base64url_decode(encoded)
    if len(signature) != IEEE1363_LENGTH:
        raise FormatError(
            f"Invalid JWT signature length {len(signature)}, expected {IEEE1363_LENGTH}"
        )
    return Signature.from_ieee1363(signature).to_der()


def verify_session_jwt_signature(jwt: str, notarizer_public_key: Optional[str] = None) -> bool:
    """
    Verify the notarizer signature on a session JWT.

    The notarizer signs ``SHA-256(SHA-256(header.payload))``: the signing
    input is hashed once, then the digest is hashed again by ECDSA.

    Args:
        jwt: Compact session JWT
        notarizer_public_key: Uncompressed notarizer key as hex. Defaults to
            the configured ``notarizer_public_key``.

    Returns:
        True if the signature is valid, False otherwise

    Raises:
        FormatError: Malformed JWT
        ConfigurationError: No notarizer key given or configured
    """
    key_hex = notarizer_public_key or settings.notarizer_public_key
    if not key_hex:
        raise ConfigurationError("No notarizer public key configured")

    header, payload, encoded_signature = _split_jwt(jwt)
    der = _jwt_signature(encoded_signature)
    inner = hashlib.sha256(f"{header}.{payload}".encode("utf-8")).digest()
    digest = hashlib.sha256(inner).digest()

    try:
        load_public_key(key_hex).verify(der, digest, ec.ECDSA(Prehashed(hashes.SHA256())))
        return True
    except InvalidSignature:
        logger.info("Session JWT signature verification failed")
        return False


def _decode_json_segment(segment: str, what: str) -> dict:
    try:
        value = json.loads(base64url_decode(segment))
    except (ValueError, UnicodeDecodeError):
        raise FormatError(f"Invalid JWT {what}: not base64url JSON") from None
    if not isinstance(value, dict):
        raise FormatError(f"Invalid JWT {what}: expected a JSON object")
    return value


def verify_enclave_verification_token(
    token: str,
    verification_public_key: Optional[str] = None,
    now: Optional[float] = None,
) -> dict:
    """
    Verify an ES256 verification token issued by the enclave.

    Args:
        token: Compact JWT
        verification_public_key: Signing key as hex. Defaults to the
            configured ``verification_token_public_key``.
        now: Current UNIX time, for testing

    Returns:
        Decoded claims

    Raises:
        FormatError: Malformed token or unsupported algorithm
        AuthenticationError: Bad signature or expired token
        ConfigurationError: No verification key given or configured
    """
    key_hex = verification_public_key or settings.verification_token_public_key
    if not key_hex:
        raise ConfigurationError("No verification token public key configured")

    header_b64, payload_b64, encoded_signature = _split_jwt(token)
    header = _decode_json_segment(header_b64, "header")
    if header.get("alg") != "ES256":
        raise FormatError(f"Unsupported JWT algorithm {header.get('alg')!r}")
    claims = _decode_json_segment(payload_b64, "payload")
    der = _jwt_signature(encoded_signature)

    try:
        load_public_key(key_hex).verify(
            der, f"{header_b64}.{payload_b64}".encode("utf-8"), ec.ECDSA(hashes.SHA256())
        )
    except InvalidSignature:
        raise AuthenticationError("Verification token signature is invalid") from None

    expires_at = claims.get("exp")
    if expires_at is not None:
        if not isinstance(expires_at, (int, float)):
            raise FormatError("Invalid exp claim")
        current = time.time() if now is None else now
        if expires_at <= current:
            raise AuthenticationError("Verification token has expired")

    return claims
