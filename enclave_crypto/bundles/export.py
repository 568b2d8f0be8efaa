# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Export and import bundles.

Both directions start from an envelope signed by the enclave quorum key:

    1. the envelope signer must be the pinned enclave key and its signature
       over ``data`` must verify,
    2. the signed payload must name the expected organization (and user),
    3. only then is anything decrypted or encrypted.

Export bundles carry key material encrypted to the client's embedded key.
Import bundles carry the enclave target key that client key material is
encrypted to.
"""

import hmac
import logging
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ..config import settings
from ..curve.points import decode_point
from ..encoding import base58_decode, base58_encode, bytes_to_hex, hex_to_bytes, strip_hex_prefix
from ..exceptions import (
    ConfigurationError,
    CurveValidationError,
    FormatError,
    InvalidEnclaveSignature,
    InvalidLength,
    OrganizationMismatch,
    SignatureFormatError,
    UserMismatch,
)
from ..hpke.bundle import EncryptedBundle, hpke_decrypt, hpke_encrypt
from ..memory import wipe
from ..provider import CryptoProvider
from ..signatures.der import from_der_signature
from ..signatures.ecdsa import verify_p256
from .models import (
    ExportBundle,
    ImportBundle,
    KeyFormat,
    SignedEnvelope,
    SignedExportData,
    SignedImportData,
    parse_model,
    parse_signed_data,
)

logger = logging.getLogger(__name__)

SOLANA_SEED_LENGTH = 32
SOLANA_KEYPAIR_LENGTH = 64


def _key_format(value: KeyFormat | str | None) -> KeyFormat:
    if value is None:
        return KeyFormat.HEXADECIMAL
    try:
        return KeyFormat(value)
    except ValueError:
        logger.warning(f"Invalid key format {value!r}, defaulting to HEXADECIMAL")
        return KeyFormat.HEXADECIMAL


def verify_enclave_signature(
    envelope: SignedEnvelope, expected_signer_public_key: Optional[str] = None
) -> None:
    """
    Check that ``envelope`` was signed by the pinned enclave quorum key.

    Args:
        envelope: Parsed export or import bundle
        expected_signer_public_key: Signer key as hex, in either encoding. Defaults
            to the configured ``signer_public_key``.

    Raises:
        ConfigurationError: No signer key given or configured, or the key
            is not a valid P-256 point
        InvalidEnclaveSignature: Signer key differs from the pinned key, or
            the signature does not verify
    """
    expected = expected_signer_public_key or settings.signer_public_key
    if not expected:
        raise ConfigurationError("No enclave signer public key configured")
    # Compared as uncompressed points so either configured encoding matches
    try:
        pinned = decode_point(hex_to_bytes(strip_hex_prefix(expected))).to_uncompressed()
    except (CurveValidationError, FormatError):
        raise ConfigurationError("Enclave signer public key is not a valid P-256 point") from None

    try:
        quorum_point = decode_point(hex_to_bytes(envelope.enclave_quorum_public))
        signature = from_der_signature(envelope.data_signature)
    except (CurveValidationError, SignatureFormatError, FormatError):
        raise InvalidEnclaveSignature("Enclave signature could not be parsed") from None

    if not hmac.compare_digest(quorum_point.to_uncompressed(), pinned):
        raise InvalidEnclaveSignature(
            "Bundle signer key does not match the expected enclave signer key"
        )
    if not verify_p256(envelope.data_bytes, signature, quorum_point.to_public_key()):
        raise InvalidEnclaveSignature("Failed to verify enclave signature")
    logger.debug(f"Verified enclave signature for bundle version {envelope.version}")


def _check_organization(envelope: SignedEnvelope, signed_organization_id: str, expected: str) -> None:
    if signed_organization_id != expected:
        raise OrganizationMismatch(
            f"Organization id does not match expected value. "
            f"Expected: {expected}. Found: {signed_organization_id}."
        )
    # The envelope copy is unsigned; it may only repeat the signed value
    if envelope.organization_id is not None and envelope.organization_id != expected:
        raise OrganizationMismatch("Unsigned bundle organization id disagrees with signed data")


def _solana_keypair(seed: bytes | bytearray) -> str:
    if len(seed) != SOLANA_SEED_LENGTH:
        raise InvalidLength(
            f"Invalid private key length. Expected {SOLANA_SEED_LENGTH} bytes. Got {len(seed)}."
        )
    public = (
        Ed25519PrivateKey.from_private_bytes(bytes(seed))
        .public_key()
        .public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
    )
    return base58_encode(bytes(seed) + public)


def decrypt_export_bundle(
    export_bundle: str | dict | ExportBundle,
    embedded_key: str,
    organization_id: str,
    key_format: KeyFormat | str | None = KeyFormat.HEXADECIMAL,
    return_mnemonic: bool = False,
    expected_signer_public_key: Optional[str] = None,
    provider: Optional[CryptoProvider] = None,
) -> str:
    """
    Verify and decrypt an export bundle.

    Args:
        export_bundle: Bundle JSON as returned by the enclave
        embedded_key: Embedded private key (hex) the bundle was encrypted to
        organization_id: Organization the caller expects the bundle for
        key_format: HEXADECIMAL, or SOLANA to return a base58 Solana keypair
        return_mnemonic: Decode the plaintext as UTF-8 text
        expected_signer_public_key: Pinned enclave signer key (hex)
        provider: Crypto capabilities; a default provider is built if omitted

    Returns:
        The mnemonic, the hex private key or the base58 Solana keypair

    Raises:
        FormatError: Malformed bundle
        InvalidEnclaveSignature: Signature check failed
        OrganizationMismatch: Bundle belongs to another organization
        AuthenticationError: Decryption failed

    Example:
        >>> decrypt_export_bundle(bundle_json, embedded_key, org_id,
        ...                       return_mnemonic=True)  # doctest: +SKIP
        'leaf lady until indicate ...'
    """
    envelope = (
        export_bundle
        if isinstance(export_bundle, ExportBundle)
        else parse_model(ExportBundle, export_bundle)
    )
    verify_enclave_signature(envelope, expected_signer_public_key)

    signed = parse_signed_data(SignedExportData, envelope)
    _check_organization(envelope, signed.organization_id, organization_id)

    bundle = EncryptedBundle.from_json(
        {"encappedPublic": signed.encapped_public, "ciphertext": signed.ciphertext}
    )
    plaintext = hpke_decrypt(bundle, embedded_key, provider)
    try:
        if _key_format(key_format) is KeyFormat.SOLANA and not return_mnemonic:
            return _solana_keypair(plaintext)
        if return_mnemonic:
            try:
                return bytes(plaintext).decode("utf-8")
            except UnicodeDecodeError:
                raise FormatError("Decrypted data is not valid UTF-8") from None
        return bytes_to_hex(plaintext)
    finally:
        wipe(plaintext)


def _verified_import_target(
    import_bundle: str | dict | ImportBundle,
    organization_id: str,
    user_id: str,
    expected_signer_public_key: Optional[str],
) -> bytes:
    envelope = (
        import_bundle
        if isinstance(import_bundle, ImportBundle)
        else parse_model(ImportBundle, import_bundle)
    )
    verify_enclave_signature(envelope, expected_signer_public_key)

    signed = parse_signed_data(SignedImportData, envelope)
    _check_organization(envelope, signed.organization_id, organization_id)
    if signed.user_id != user_id:
        raise UserMismatch(
            f"User id does not match expected value. Expected: {user_id}. Found: {signed.user_id}."
        )
    return hex_to_bytes(signed.target_public)


def decode_private_key(private_key: str, key_format: KeyFormat | str | None) -> bytearray:
    """
    Decode a private key given in the requested format.

    SOLANA keys are base58 of the 64-byte keypair, of which the first 32
    bytes are the seed. HEXADECIMAL keys may carry a ``0x`` prefix.
    """
    if _key_format(key_format) is KeyFormat.SOLANA:
        decoded = bytearray(base58_decode(private_key))
        try:
            if len(decoded) != SOLANA_KEYPAIR_LENGTH:
                raise InvalidLength(
                    f"Invalid key length. Expected {SOLANA_KEYPAIR_LENGTH} bytes. Got {len(decoded)}."
                )
            return decoded[:SOLANA_SEED_LENGTH]
        finally:
            wipe(decoded)
    return bytearray(hex_to_bytes(strip_hex_prefix(private_key)))


def encrypt_private_key_to_bundle(
    private_key: str,
    key_format: KeyFormat | str | None,
    import_bundle: str | dict | ImportBundle,
    user_id: str,
    organization_id: str,
    expected_signer_public_key: Optional[str] = None,
    provider: Optional[CryptoProvider] = None,
) -> str:
    """
    Encrypt a private key to the enclave target key of an import bundle.

    Returns:
        JSON ``{"encappedPublic": hex, "ciphertext": hex}``

    Raises:
        InvalidEnclaveSignature, OrganizationMismatch, UserMismatch: The
            import bundle failed verification
    """
    target = _verified_import_target(
        import_bundle, organization_id, user_id, expected_signer_public_key
    )
    plaintext = decode_private_key(private_key, key_format)
    try:
        return hpke_encrypt(plaintext, target, provider).to_json()
    finally:
        wipe(plaintext)


def encrypt_wallet_to_bundle(
    mnemonic: str,
    import_bundle: str | dict | ImportBundle,
    user_id: str,
    organization_id: str,
    expected_signer_public_key: Optional[str] = None,
    provider: Optional[CryptoProvider] = None,
) -> str:
    """Encrypt a wallet mnemonic to the enclave target key of an import bundle."""
    target = _verified_import_target(
        import_bundle, organization_id, user_id, expected_signer_public_key
    )
    plaintext = bytearray(mnemonic.encode("utf-8"))
    try:
        return hpke_encrypt(plaintext, target, provider).to_json()
    finally:
        wipe(plaintext)
