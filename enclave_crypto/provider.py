# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Injected crypto capabilities: randomness, AEAD and KDF.

Operations that need randomness or symmetric primitives take an optional
``provider`` argument. When it is omitted a fresh provider is built for the
call; nothing in this package keeps process-wide crypto state.
"""

import secrets
from dataclasses import dataclass
from typing import Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand

from .exceptions import AuthenticationError, InvalidLength


class SecureRandom(Protocol):
    def get_random_bytes(self, n: int) -> bytes: ...


class Aead(Protocol):
    key_length: int
    nonce_length: int
    tag_length: int

    def seal(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes: ...

    def open(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes: ...


class Kdf(Protocol):
    hash_length: int

    def extract(self, salt: bytes, ikm: bytes) -> bytes: ...

    def expand(self, prk: bytes, info: bytes, length: int) -> bytes: ...


class SystemRandomSource:
    """
    Operating system randomness from the secrets module.

    Example:
        >>> rng = SystemRandomSource()
        >>> len(rng.get_random_bytes(32))
        32
    """

    def get_random_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("Cannot generate a negative number of bytes")
        return secrets.token_bytes(n)


class AesGcmAead:
    """AES-256-GCM with a 12-byte nonce and a 16-byte appended tag."""

    key_length = 32
    nonce_length = 12
    tag_length = 16

    def _check(self, key: bytes, nonce: bytes) -> None:
        if len(key) != self.key_length:
            raise InvalidLength(f"AEAD key must be {self.key_length} bytes, got {len(key)}")
        if len(nonce) != self.nonce_length:
            raise InvalidLength(
                f"AEAD nonce must be {self.nonce_length} bytes, got {len(nonce)}"
            )

    def seal(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes:
        self._check(key, nonce)
        return AESGCM(bytes(key)).encrypt(bytes(nonce), bytes(plaintext), bytes(aad))

    def open(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes:
        """
        Decrypt and authenticate.

        Raises:
            AuthenticationError: On any tag mismatch. The message is the same
                for a wrong key, wrong AAD or modified ciphertext.
        """
        self._check(key, nonce)
        if len(ciphertext) < self.tag_length:
            raise AuthenticationError("Decryption failed")
        try:
            return AESGCM(bytes(key)).decrypt(bytes(nonce), bytes(ciphertext), bytes(aad))
        except InvalidTag:
            raise AuthenticationError("Decryption failed") from None


class HkdfSha256:
    """HKDF-SHA256 split into its extract and expand halves (RFC 5869)."""

    hash_length = 32

    def extract(self, salt: bytes, ikm: bytes) -> bytes:
        # An empty salt is replaced by HashLen zero bytes
        h = hmac.HMAC(bytes(salt) or b"\x00" * self.hash_length, hashes.SHA256())
        h.update(bytes(ikm))
        return h.finalize()

    def expand(self, prk: bytes, info: bytes, length: int) -> bytes:
        return HKDFExpand(algorithm=hashes.SHA256(), length=length, info=bytes(info)).derive(
            bytes(prk)
        )


@dataclass(frozen=True)
class CryptoProvider:
    """Capability bundle passed to every operation that needs one."""

    random: SecureRandom
    aead: Aead
    kdf: Kdf


def default_provider() -> CryptoProvider:
    """Build a provider backed by the OS RNG, AES-256-GCM and HKDF-SHA256."""
    return CryptoProvider(
        random=SystemRandomSource(),
        aead=AesGcmAead(),
        kdf=HkdfSha256(),
    )
