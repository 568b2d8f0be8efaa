# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""HPKE (RFC 9180) bundle encryption for P-256, HKDF-SHA256 and AES-256-GCM."""

from .schedule import OneShotContext, setup_context
from .bundle import (
    EncryptedBundle,
    build_additional_associated_data,
    hpke_encrypt,
    hpke_auth_encrypt,
    hpke_decrypt,
)

__all__ = [
    "OneShotContext",
    "setup_context",
    "EncryptedBundle",
    "build_additional_associated_data",
    "hpke_encrypt",
    "hpke_auth_encrypt",
    "hpke_decrypt",
]
