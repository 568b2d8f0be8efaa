# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""ECDSA P-256 signatures: DER conversion, signing, verification and request stamps."""

from .der import (
    Signature,
    ieee1363_to_der,
    der_to_ieee1363,
    normalize_der_signature,
    read_der_length,
    to_der_signature,
    from_der_signature,
)
from .ecdsa import (
    sign_p256,
    verify_p256,
    verify_stamp_signature,
    verify_session_jwt_signature,
    verify_enclave_verification_token,
)
from .stamp import Stamp, stamp_request, parse_stamp, verify_request_stamp

__all__ = [
    "Signature",
    "ieee1363_to_der",
    "der_to_ieee1363",
    "normalize_der_signature",
    "read_der_length",
    "to_der_signature",
    "from_der_signature",
    "sign_p256",
    "verify_p256",
    "verify_stamp_signature",
    "verify_session_jwt_signature",
    "verify_enclave_verification_token",
    "Stamp",
    "stamp_request",
    "parse_stamp",
    "verify_request_stamp",
]
