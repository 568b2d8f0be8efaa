# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Enclave Crypto - P-256 core for request stamping and key transport

This package holds the elliptic-curve code shared by every caller that
signs requests or moves key material to and from the secure enclave:
- P-256 point encoding and validation
- ECDSA signing and IEEE-P1363/DER signature conversion
- HPKE bundle encryption (DHKEM P-256, HKDF-SHA256, AES-256-GCM)
- Credential, export and import bundle handling

Subpackages:
    curve: field arithmetic, point codec, key pairs
    signatures: DER codec, ECDSA, request stamps
    hpke: key schedule and bundle encryption
    bundles: enclave bundle protocol

Example Usage:
    >>> from enclave_crypto import generate_p256_key_pair, hpke_encrypt, hpke_decrypt
    >>> pair = generate_p256_key_pair()
    >>> bundle = hpke_encrypt(b"secret", pair.public_key_uncompressed)
    >>> bytes(hpke_decrypt(bundle, pair.private_key))
    b'secret'
"""

import logging

__version__ = "0.1.0"
__author__ = "The Enclave Crypto Authors"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .exceptions import (  # noqa: E402
    EnclaveCryptoError,
    FormatError,
    CurveValidationError,
    SignatureFormatError,
    AuthenticationError,
    InvalidEnclaveSignature,
    ConsistencyError,
    OrganizationMismatch,
    UserMismatch,
    KeyReuseError,
    ConfigurationError,
)

# Key pairs and points
from .curve import (  # noqa: E402
    KeyPair,
    SenderKey,
    EcPoint,
    decode_point,
    generate_p256_key_pair,
    get_public_key,
    compress_raw_public_key,
    uncompress_raw_public_key,
    extract_private_key_from_pkcs8_bytes,
    convert_api_key_to_jwk,
)

# Signatures
from .signatures import (  # noqa: E402
    to_der_signature,
    from_der_signature,
    sign_p256,
    verify_stamp_signature,
    verify_session_jwt_signature,
    verify_enclave_verification_token,
    stamp_request,
    verify_request_stamp,
)

# Bundle encryption
from .provider import CryptoProvider, default_provider  # noqa: E402
from .hpke import EncryptedBundle, hpke_encrypt, hpke_auth_encrypt, hpke_decrypt  # noqa: E402

# Enclave bundles
from .bundles import (  # noqa: E402
    KeyFormat,
    decrypt_credential_bundle,
    decrypt_export_bundle,
    encrypt_private_key_to_bundle,
    encrypt_wallet_to_bundle,
)

__all__ = [
    # Errors
    "EnclaveCryptoError",
    "FormatError",
    "CurveValidationError",
    "SignatureFormatError",
    "AuthenticationError",
    "InvalidEnclaveSignature",
    "ConsistencyError",
    "OrganizationMismatch",
    "UserMismatch",
    "KeyReuseError",
    "ConfigurationError",
    # Keys
    "KeyPair",
    "SenderKey",
    "EcPoint",
    "decode_point",
    "generate_p256_key_pair",
    "get_public_key",
    "compress_raw_public_key",
    "uncompress_raw_public_key",
    "extract_private_key_from_pkcs8_bytes",
    "convert_api_key_to_jwk",
    # Signatures
    "to_der_signature",
    "from_der_signature",
    "sign_p256",
    "verify_stamp_signature",
    "verify_session_jwt_signature",
    "verify_enclave_verification_token",
    "stamp_request",
    "verify_request_stamp",
    # HPKE
    "CryptoProvider",
    "default_provider",
    "EncryptedBundle",
    "hpke_encrypt",
    "hpke_auth_encrypt",
    "hpke_decrypt",
    # Bundles
    "KeyFormat",
    "decrypt_credential_bundle",
    "decrypt_export_bundle",
    "encrypt_private_key_to_bundle",
    "encrypt_wallet_to_bundle",
]
