# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
HPKE key schedule (RFC 9180) for the suite

    KEM   DHKEM(P-256, HKDF-SHA256)   0x0010
    KDF   HKDF-SHA256                 0x0001
    AEAD  AES-256-GCM                 0x0002

in base mode with the fixed application info string ``turnkey_hpke``.

Every derived key/nonce pair protects exactly one message: the sequence
number is never advanced, so the message nonce equals the base nonce.
OneShotContext enforces this by refusing a second seal or open.
"""

from ..exceptions import KeyReuseError
from ..memory import wipe
from ..provider import Aead, Kdf

HPKE_VERSION = b"HPKE-v1"

KEM_ID = 0x0010
KDF_ID = 0x0001
AEAD_ID = 0x0002

SUITE_ID_KEM = b"KEM" + KEM_ID.to_bytes(2, "big")
SUITE_ID_HPKE = (
    b"HPKE" + KEM_ID.to_bytes(2, "big") + KDF_ID.to_bytes(2, "big") + AEAD_ID.to_bytes(2, "big")
)

MODE_BASE = 0x00
DEFAULT_INFO = b"turnkey_hpke"

SHARED_SECRET_LENGTH = 32


def labeled_extract(kdf: Kdf, salt: bytes, suite_id: bytes, label: bytes, ikm: bytes) -> bytes:
    """LabeledExtract(salt, label, ikm) from RFC 9180, section 4."""
    return kdf.extract(salt, HPKE_VERSION + suite_id + label + bytes(ikm))


def labeled_expand(
    kdf: Kdf, prk: bytes, suite_id: bytes, label: bytes, info: bytes, length: int
) -> bytes:
    """LabeledExpand(prk, label, info, L) from RFC 9180, section 4."""
    labeled_info = length.to_bytes(2, "big") + HPKE_VERSION + suite_id + label + bytes(info)
    return kdf.expand(prk, labeled_info, length)


def extract_and_expand(kdf: Kdf, dh: bytes, kem_context: bytes) -> bytes:
    """
    Derive the KEM shared secret from the raw ECDH output.

    Args:
        dh: 32-byte x coordinate of the ECDH product
        kem_context: ``enc || pkR``, both uncompressed
    """
    eae_prk = labeled_extract(kdf, b"", SUITE_ID_KEM, b"eae_prk", dh)
    return labeled_expand(
        kdf, eae_prk, SUITE_ID_KEM, b"shared_secret", kem_context, SHARED_SECRET_LENGTH
    )


def key_schedule(
    kdf: Kdf, aead: Aead, shared_secret: bytes, info: bytes = DEFAULT_INFO
) -> tuple[bytearray, bytearray]:
    """
    Run the base-mode key schedule.

    Returns:
        Tuple of (key, base_nonce) as wipeable buffers
    """
    psk_id_hash = labeled_extract(kdf, b"", SUITE_ID_HPKE, b"psk_id_hash", b"")
    info_hash = labeled_extract(kdf, b"", SUITE_ID_HPKE, b"info_hash", info)
    context = bytes([MODE_BASE]) + psk_id_hash + info_hash

    secret = bytearray(labeled_extract(kdf, shared_secret, SUITE_ID_HPKE, b"secret", b""))
    try:
        key = bytearray(
            labeled_expand(kdf, secret, SUITE_ID_HPKE, b"key", context, aead.key_length)
        )
        base_nonce = bytearray(
            labeled_expand(kdf, secret, SUITE_ID_HPKE, b"base_nonce", context, aead.nonce_length)
        )
    finally:
        wipe(secret)
    return key, base_nonce


class OneShotContext:
    """
    AEAD context that can seal or open exactly one message.

    The key and nonce are wiped after the first operation, whether it
    succeeds or not; a second call raises KeyReuseError.
    """

    def __init__(self, aead: Aead, key: bytearray, base_nonce: bytearray):
        self._aead = aead
        self._key = key
        self._base_nonce = base_nonce
        self._used = False

    @property
    def used(self) -> bool:
        return self._used

    def _consume(self) -> None:
        if self._used:
            raise KeyReuseError("HPKE context has already been used")
        self._used = True

    def _nonce(self) -> bytes:
        # Sequence number 0: base_nonce XOR I2OSP(0, Nn) is base_nonce itself
        return bytes(self._base_nonce)

    def seal(self, plaintext: bytes, aad: bytes) -> bytes:
        self._consume()
        try:
            return self._aead.seal(bytes(self._key), self._nonce(), plaintext, aad)
        finally:
            self.wipe()

    def open(self, ciphertext: bytes, aad: bytes) -> bytes:
        self._consume()
        try:
            return self._aead.open(bytes(self._key), self._nonce(), ciphertext, aad)
        finally:
            self.wipe()

    def wipe(self) -> None:
        wipe(self._key)
        wipe(self._base_nonce)

    def __repr__(self) -> str:
        return f"OneShotContext(used={self._used})"


def setup_context(
    kdf: Kdf, aead: Aead, dh: bytes, enc: bytes, pk_r: bytes, info: bytes = DEFAULT_INFO
) -> OneShotContext:
    """
    Build the single-use AEAD context for one sender/receiver exchange.

    Args:
        dh: ECDH x coordinate
        enc: Uncompressed encapsulated (sender) public key
        pk_r: Uncompressed receiver public key
    """
    shared_secret = bytearray(extract_and_expand(kdf, dh, bytes(enc) + bytes(pk_r)))
    try:
        key, base_nonce = key_schedule(kdf, aead, shared_secret, info)
    finally:
        wipe(shared_secret)
    return OneShotContext(aead, key, base_nonce)
