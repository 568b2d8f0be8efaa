# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
HPKE bundle encryption and decryption.

A bundle is the encapsulated sender public key plus the AES-256-GCM
ciphertext (with its 16-byte tag). The AEAD additional data is always

    aad = enc (65 bytes) || pkR (65 bytes)

with both keys uncompressed, in that order.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec

from ..curve.keys import SenderKey, generate_private_key, load_private_key
from ..curve.points import (
    COMPRESSED_LENGTH,
    PREFIX_UNCOMPRESSED,
    UNCOMPRESSED_LENGTH,
    EcPoint,
    decode_point,
)
from ..encoding import bytes_to_hex, hex_to_bytes
from ..exceptions import AuthenticationError, CurveValidationError, FormatError, InvalidLength
from ..memory import wipe
from ..provider import CryptoProvider, default_provider
from .schedule import setup_context

logger = logging.getLogger(__name__)

TAG_LENGTH = 16

_DECRYPTION_FAILED = "Decryption failed"


def _decode_encapped_key(enc: bytes) -> EcPoint:
    # Every malformed or off-curve key fails like a bad tag
    try:
        return decode_point(bytes(enc))
    except (CurveValidationError, FormatError):
        raise AuthenticationError(_DECRYPTION_FAILED) from None


@dataclass(frozen=True)
class EncryptedBundle:
    """
    Encapsulated key and ciphertext.

    ``encapped_public_key`` is kept exactly as received, compressed (33
    bytes) or uncompressed (65 bytes). Only its length is checked here; the
    point is decoded during decryption, so that a tampered key fails the same
    way as a tampered ciphertext.
    """

    encapped_public_key: bytes
    ciphertext: bytes

    def __post_init__(self):
        if len(self.encapped_public_key) not in (COMPRESSED_LENGTH, UNCOMPRESSED_LENGTH):
            raise InvalidLength(
                f"Encapsulated key must be {COMPRESSED_LENGTH} or {UNCOMPRESSED_LENGTH} bytes, "
                f"got {len(self.encapped_public_key)}"
            )
        if len(self.ciphertext) < TAG_LENGTH:
            raise InvalidLength(
                f"Ciphertext must be at least {TAG_LENGTH} bytes, got {len(self.ciphertext)}"
            )

    def encapped_point(self) -> EcPoint:
        """
        Decode the encapsulated key.

        Raises:
            AuthenticationError: If the key is not a valid P-256 point
        """
        return _decode_encapped_key(self.encapped_public_key)

    def to_bytes(self, compressed: bool = True) -> bytes:
        """Serialize as ``enc || ciphertext``, compressing ``enc`` by default."""
        point = self.encapped_point()
        enc = point.to_compressed() if compressed else point.to_uncompressed()
        return enc + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedBundle":
        """
        Parse ``enc || ciphertext`` where ``enc`` is compressed or uncompressed.

        The prefix byte only selects the key length; a prefix that is not
        0x04 is read as a 33-byte key and checked at decryption time.

        Raises:
            InvalidLength: If the buffer is too short
        """
        data = bytes(data)
        if len(data) < COMPRESSED_LENGTH + TAG_LENGTH:
            raise InvalidLength(f"Bundle too short: {len(data)} bytes")
        key_length = COMPRESSED_LENGTH
        if data[0] == PREFIX_UNCOMPRESSED and len(data) >= UNCOMPRESSED_LENGTH + TAG_LENGTH:
            key_length = UNCOMPRESSED_LENGTH
        return cls(encapped_public_key=data[:key_length], ciphertext=data[key_length:])

    def to_json(self) -> str:
        """Serialize as ``{"encappedPublic": hex, "ciphertext": hex}`` with ``enc`` uncompressed."""
        return json.dumps(
            {
                "encappedPublic": bytes_to_hex(self.encapped_point().to_uncompressed()),
                "ciphertext": bytes_to_hex(self.ciphertext),
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, value: str | dict) -> "EncryptedBundle":
        try:
            data = json.loads(value) if isinstance(value, str) else value
            enc = hex_to_bytes(data["encappedPublic"])
            ciphertext = hex_to_bytes(data["ciphertext"])
        except (ValueError, KeyError, TypeError):
            raise FormatError("Invalid encrypted bundle JSON") from None
        return cls(encapped_public_key=enc, ciphertext=ciphertext)


def build_additional_associated_data(sender_public_key: bytes, receiver_public_key: bytes) -> bytes:
    """Concatenate the uncompressed sender and receiver keys."""
    return bytes(sender_public_key) + bytes(receiver_public_key)


def _receiver_point(target_public_key: bytes | str) -> EcPoint:
    if isinstance(target_public_key, str):
        target_public_key = hex_to_bytes(target_public_key)
    return decode_point(target_public_key)


def _seal(
    plaintext: bytes,
    receiver: EcPoint,
    sender: ec.EllipticCurvePrivateKey,
    provider: CryptoProvider,
) -> EncryptedBundle:
    enc = EcPoint.from_public_key(sender.public_key()).to_uncompressed()
    pk_r = receiver.to_uncompressed()
    dh = bytearray(sender.exchange(ec.ECDH(), receiver.to_public_key()))
    try:
        context = setup_context(provider.kdf, provider.aead, dh, enc, pk_r)
    finally:
        wipe(dh)
    ciphertext = context.seal(bytes(plaintext), build_additional_associated_data(enc, pk_r))
    return EncryptedBundle(encapped_public_key=enc, ciphertext=ciphertext)


def hpke_encrypt(
    plaintext: bytes,
    target_public_key: bytes | str,
    provider: Optional[CryptoProvider] = None,
) -> EncryptedBundle:
    """
    Encrypt to a receiver public key with a fresh ephemeral sender key.

    Args:
        plaintext: Data to encrypt
        target_public_key: Receiver key, compressed or uncompressed, bytes or hex
        provider: Crypto capabilities; a default provider is built if omitted

    Returns:
        EncryptedBundle holding the ephemeral public key and the ciphertext

    Example:
        >>> pair = generate_p256_key_pair()  # doctest: +SKIP
        >>> bundle = hpke_encrypt(b"secret", pair.public_key_uncompressed)  # doctest: +SKIP
        >>> bytes(hpke_decrypt(bundle, pair.private_key))  # doctest: +SKIP
        b'secret'
    """
    provider = provider or default_provider()
    receiver = _receiver_point(target_public_key)
    # The ephemeral key goes out of scope when this call returns
    ephemeral = generate_private_key(provider)
    bundle = _seal(plaintext, receiver, ephemeral, provider)
    logger.debug(f"HPKE sealed {len(bundle.ciphertext)} ciphertext bytes")
    return bundle


def hpke_auth_encrypt(
    plaintext: bytes,
    target_public_key: bytes | str,
    sender_key: SenderKey,
    provider: Optional[CryptoProvider] = None,
) -> EncryptedBundle:
    """
    Encrypt with a long-term sender key instead of an ephemeral one.

    The sender public key is used as the encapsulated key, so the receiver
    learns who encrypted the bundle. ``sender_key`` is consumed by this call.

    Raises:
        KeyReuseError: If ``sender_key`` has already been used
    """
    provider = provider or default_provider()
    receiver = _receiver_point(target_public_key)
    with sender_key.take() as secret:
        sender = load_private_key(secret.value)
    return _seal(plaintext, receiver, sender, provider)


def hpke_decrypt(
    bundle: EncryptedBundle | bytes,
    receiver_private_key: str | bytes | bytearray,
    provider: Optional[CryptoProvider] = None,
) -> bytearray:
    """
    Decrypt a bundle with the receiver private key.

    Args:
        bundle: EncryptedBundle, or its ``enc || ciphertext`` serialization
        receiver_private_key: 32-byte scalar as bytes or hex
        provider: Crypto capabilities; a default provider is built if omitted

    Returns:
        Plaintext in a bytearray the caller should wipe after use

    Raises:
        AuthenticationError: Wrong key, modified ciphertext or modified
            encapsulated key. No finer diagnostic is given.
    """
    provider = provider or default_provider()
    if not isinstance(bundle, EncryptedBundle):
        bundle = EncryptedBundle.from_bytes(bundle)

    receiver = load_private_key(receiver_private_key)
    pk_r = EcPoint.from_public_key(receiver.public_key()).to_uncompressed()
    sender_point = bundle.encapped_point()
    enc = sender_point.to_uncompressed()

    dh = bytearray(receiver.exchange(ec.ECDH(), sender_point.to_public_key()))
    try:
        context = setup_context(provider.kdf, provider.aead, dh, enc, pk_r)
    finally:
        wipe(dh)
    plaintext = context.open(bundle.ciphertext, build_additional_associated_data(enc, pk_r))
    return bytearray(plaintext)
