# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Enclave bundle protocol: credential, export and import bundles."""

from .models import KeyFormat, ExportBundle, ImportBundle
from .credential import (
    decode_credential_bundle,
    encode_credential_bundle,
    decrypt_credential_bundle,
)
from .export import (
    verify_enclave_signature,
    decrypt_export_bundle,
    encrypt_private_key_to_bundle,
    encrypt_wallet_to_bundle,
)

__all__ = [
    "KeyFormat",
    "ExportBundle",
    "ImportBundle",
    "decode_credential_bundle",
    "encode_credential_bundle",
    "decrypt_credential_bundle",
    "verify_enclave_signature",
    "decrypt_export_bundle",
    "encrypt_private_key_to_bundle",
    "encrypt_wallet_to_bundle",
]
