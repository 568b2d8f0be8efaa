# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
P-256 curve arithmetic, point encoding and key handling.

Modules:
    field: prime field arithmetic and curve constants
    points: SEC 1 point encoding with strict validation
    keys: key pair generation and private key helpers
"""

from .field import P, N, mod_pow, mod_sqrt, is_on_curve, recover_y
from .points import (
    EcPoint,
    CompressedPoint,
    UncompressedPoint,
    EncodedPoint,
    parse_encoded_point,
    decode_point,
    compress_raw_public_key,
    uncompress_raw_public_key,
    point_from_jwk,
    load_public_key,
)
from .keys import (
    KeyPair,
    SenderKey,
    generate_p256_key_pair,
    generate_private_key,
    get_public_key,
    load_private_key,
    extract_private_key_from_pkcs8_bytes,
    convert_api_key_to_jwk,
)

__all__ = [
    # Field
    "P",
    "N",
    "mod_pow",
    "mod_sqrt",
    "is_on_curve",
    "recover_y",
    # Points
    "EcPoint",
    "CompressedPoint",
    "UncompressedPoint",
    "EncodedPoint",
    "parse_encoded_point",
    "decode_point",
    "compress_raw_public_key",
    "uncompress_raw_public_key",
    "point_from_jwk",
    "load_public_key",
    # Keys
    "KeyPair",
    "SenderKey",
    "generate_p256_key_pair",
    "generate_private_key",
    "get_public_key",
    "load_private_key",
    "extract_private_key_from_pkcs8_bytes",
    "convert_api_key_to_jwk",
]
