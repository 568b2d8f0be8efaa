# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Credential bundles.

A credential bundle carries a session or recovery credential from the enclave
to an embedded key on the client. It is ``enc || ciphertext`` encoded as
base58check, where ``enc`` is normally the 33-byte compressed encapsulated
key. The 65-byte uncompressed form is accepted as well.
"""

import logging
from typing import Optional

from ..encoding import (
    base58check_decode,
    base58check_encode,
    base64url_decode,
    bytes_to_hex,
)
from ..exceptions import InvalidLength
from ..hpke.bundle import EncryptedBundle, hpke_decrypt
from ..memory import wipe
from ..provider import CryptoProvider

logger = logging.getLogger(__name__)

# Characters outside the base58 alphabet that do occur in base64url
_BASE64URL_ONLY = frozenset("-_0OIl")


def decode_credential_bundle(credential_bundle: str) -> EncryptedBundle:
    """
    Decode a credential bundle string.

    Base58check is expected; a string containing characters that base58
    never uses is decoded as base64url instead.

    Raises:
        FormatError: Bad encoding or checksum
        InvalidLength: Nothing after the encapsulated key
    """
    credential_bundle = credential_bundle.strip()
    if _BASE64URL_ONLY.intersection(credential_bundle):
        raw = base64url_decode(credential_bundle)
        encoding = "base64url"
    else:
        raw = base58check_decode(credential_bundle)
        encoding = "base58check"
    logger.debug(f"Decoded {encoding} credential bundle of {len(raw)} bytes")
    if len(raw) <= 33:
        raise InvalidLength(
            f"Bundle size {len(raw)} is too low. Expecting an encapsulated key "
            "followed by an encrypted credential."
        )
    return EncryptedBundle.from_bytes(raw)


def encode_credential_bundle(bundle: EncryptedBundle) -> str:
    """Encode a bundle as base58check with a compressed encapsulated key."""
    return base58check_encode(bundle.to_bytes(compressed=True))


def decrypt_credential_bundle(
    credential_bundle: str,
    embedded_key: str,
    provider: Optional[CryptoProvider] = None,
) -> str:
    """
    Decrypt a credential bundle with the embedded private key.

    Args:
        credential_bundle: base58check (or base64url) bundle string
        embedded_key: Embedded private key as hex
        provider: Crypto capabilities; a default provider is built if omitted

    Returns:
        Decrypted credential as hex

    Raises:
        FormatError: Malformed bundle
        AuthenticationError: Wrong key or tampered bundle
    """
    bundle = decode_credential_bundle(credential_bundle)
    plaintext = hpke_decrypt(bundle, embedded_key, provider)
    try:
        return bytes_to_hex(plaintext)
    finally:
        wipe(plaintext)
