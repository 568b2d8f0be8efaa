# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
P-256 key pairs.

Private keys travel as 32-byte scalars (hex on the API surface); public keys
as SEC 1 points. Scalars are always checked to lie in [1, n).
"""

from dataclasses import dataclass, field
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..encoding import (
    base64url_encode,
    bytes_to_hex,
    bytes_to_int,
    hex_to_bytes,
    int_to_bytes,
    strip_hex_prefix,
)
from ..exceptions import CurveValidationError, FormatError, InvalidLength, KeyReuseError
from ..memory import SecretBytes
from ..provider import CryptoProvider, SecureRandom, default_provider
from .field import FIELD_SIZE, N
from .points import EcPoint


@dataclass(frozen=True)
class KeyPair:
    """Hex-encoded P-256 key pair."""

    private_key: str = field(repr=False)
    public_key: str
    public_key_uncompressed: str


def _scalar_bytes(private_key: str | bytes | bytearray) -> bytes:
    if isinstance(private_key, str):
        private_key = hex_to_bytes(strip_hex_prefix(private_key))
    if len(private_key) != FIELD_SIZE:
        raise InvalidLength(
            f"Private key must be {FIELD_SIZE} bytes, got {len(private_key)}"
        )
    return bytes(private_key)


def load_private_key(private_key: str | bytes | bytearray) -> ec.EllipticCurvePrivateKey:
    """
    Load a raw P-256 private scalar.

    Args:
        private_key: 32-byte scalar, as bytes or hex

    Returns:
        cryptography private key object

    Raises:
        InvalidLength: If the scalar is not 32 bytes
        CurveValidationError: If the scalar is 0 or not below the group order
    """
    d = bytes_to_int(_scalar_bytes(private_key))
    if not (1 <= d < N):
        raise CurveValidationError("Private key is outside [1, n)")
    return ec.derive_private_key(d, ec.SECP256R1())


def _random_scalar(rng: SecureRandom) -> int:
    # Rejection sampling keeps the distribution uniform over [1, n)
    while True:
        candidate = bytes_to_int(rng.get_random_bytes(FIELD_SIZE))
        if 1 <= candidate < N:
            return candidate


def generate_private_key(provider: Optional[CryptoProvider] = None) -> ec.EllipticCurvePrivateKey:
    """Generate a private key from the provider's random source."""
    provider = provider or default_provider()
    return ec.derive_private_key(_random_scalar(provider.random), ec.SECP256R1())


def generate_p256_key_pair(provider: Optional[CryptoProvider] = None) -> KeyPair:
    """
    Generate a new P-256 key pair.

    Returns:
        KeyPair with the private scalar, the compressed public key and the
        uncompressed public key, all hex encoded

    Example:
        >>> pair = generate_p256_key_pair()
        >>> len(pair.public_key), len(pair.public_key_uncompressed)
        (66, 130)
    """
    private_key = generate_private_key(provider)
    point = EcPoint.from_public_key(private_key.public_key())
    return KeyPair(
        private_key=bytes_to_hex(private_key_to_bytes(private_key)),
        public_key=bytes_to_hex(point.to_compressed()),
        public_key_uncompressed=bytes_to_hex(point.to_uncompressed()),
    )


def get_public_key(private_key: str | bytes | bytearray, compressed: bool = True) -> bytes:
    """
    Derive the public key for a private scalar.

    Args:
        private_key: 32-byte scalar, as bytes or hex
        compressed: Return the 33-byte form instead of the 65-byte form
    """
    point = EcPoint.from_public_key(load_private_key(private_key).public_key())
    return point.to_compressed() if compressed else point.to_uncompressed()


def private_key_to_bytes(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    return int_to_bytes(private_key.private_numbers().private_value, FIELD_SIZE)


def extract_private_key_from_pkcs8_bytes(pkcs8: bytes) -> bytes:
    """
    Return the raw 32-byte scalar held in a PKCS#8 DER P-256 private key.

    Raises:
        FormatError: If the bytes are not a PKCS#8 EC private key on P-256
    """
    try:
        private_key = serialization.load_der_private_key(bytes(pkcs8), password=None)
    except (ValueError, TypeError):
        raise FormatError("Invalid PKCS#8 private key") from None
    if not isinstance(private_key, ec.EllipticCurvePrivateKey) or not isinstance(
        private_key.curve, ec.SECP256R1
    ):
        raise FormatError("PKCS#8 key is not a P-256 private key")
    return private_key_to_bytes(private_key)


def convert_api_key_to_jwk(private_key: str | bytes | bytearray) -> dict:
    """
    Build a private JWK (with ``d``) from a raw API private key.

    Coordinates and scalar are padded to 32 bytes before encoding.
    """
    scalar = _scalar_bytes(private_key)
    point = EcPoint.from_public_key(load_private_key(scalar).public_key())
    jwk = point.to_jwk()
    jwk["d"] = base64url_encode(scalar)
    return jwk


class SenderKey:
    """
    Long-term sender private key that authenticates exactly one encryption.

    Authenticated-mode encryption derives the AEAD key and nonce from the
    static sender/receiver pair, so two encryptions under the same pair would
    reuse a nonce. Each SenderKey can be taken once; a second take raises
    KeyReuseError.
    """

    def __init__(self, private_key: str | bytes | bytearray):
        scalar = _scalar_bytes(private_key)
        # Validate eagerly so a bad key fails at construction
        public = load_private_key(scalar).public_key()
        self._secret: Optional[SecretBytes] = SecretBytes(scalar)
        self.public_key = EcPoint.from_public_key(public).to_uncompressed()

    @property
    def consumed(self) -> bool:
        return self._secret is None

    def take(self) -> SecretBytes:
        """Hand the scalar over to the caller, who becomes responsible for wiping it."""
        if self._secret is None:
            raise KeyReuseError("Sender key has already been used")
        secret, self._secret = self._secret, None
        return secret

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "unused"
        return f"SenderKey(<{state}>)"
