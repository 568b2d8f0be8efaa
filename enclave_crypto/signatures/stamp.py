# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
API key request stamps.

A stamp authenticates an HTTP request body with a P-256 API key. It is sent
as the ``X-Stamp`` header whose value is base64url of

    {"publicKey": <compressed hex>,
     "scheme": "SIGNATURE_SCHEME_TK_API_P256",
     "signature": <DER hex over SHA-256(body)>}
"""

import json
from dataclasses import dataclass
from typing import Optional

from ..curve.keys import get_public_key
from ..encoding import base64url_decode, base64url_encode, bytes_to_hex
from ..exceptions import ConfigurationError, FormatError
from .der import to_der_signature
from .ecdsa import sign_p256, verify_stamp_signature

STAMP_HEADER_NAME = "X-Stamp"
SIGNATURE_SCHEME = "SIGNATURE_SCHEME_TK_API_P256"


@dataclass(frozen=True)
class Stamp:
    """Header to attach to a stamped request."""

    header_name: str
    header_value: str


@dataclass(frozen=True)
class StampContents:
    public_key: str
    scheme: str
    signature: str


def stamp_request(body: str, private_key: str, public_key: Optional[str] = None) -> Stamp:
    """
    Stamp a request body with an API key.

    Args:
        body: Exact request body that will be sent
        private_key: API private key as hex
        public_key: API public key as compressed hex; derived when omitted

    Returns:
        Stamp holding the header name and value

    Raises:
        ConfigurationError: If ``public_key`` does not belong to ``private_key``
    """
    derived = bytes_to_hex(get_public_key(private_key, compressed=True))
    if public_key is not None and public_key.lower() != derived:
        raise ConfigurationError("API public key does not match the private key")

    signature = to_der_signature(sign_p256(body, private_key))
    contents = {
        "publicKey": derived,
        "scheme": SIGNATURE_SCHEME,
        "signature": signature,
    }
    value = base64url_encode(json.dumps(contents, separators=(",", ":")).encode("utf-8"))
    return Stamp(header_name=STAMP_HEADER_NAME, header_value=value)


def parse_stamp(header_value: str) -> StampContents:
    """Decode an ``X-Stamp`` header value without verifying it."""
    try:
        contents = json.loads(base64url_decode(header_value))
        return StampContents(
            public_key=contents["publicKey"],
            scheme=contents["scheme"],
            signature=contents["signature"],
        )
    except (ValueError, UnicodeDecodeError, KeyError, TypeError):
        raise FormatError("Invalid stamp header value") from None


def verify_request_stamp(
    body: str, header_value: str, expected_public_key: Optional[str] = None
) -> bool:
    """
    Verify a stamp against the request body.

    Args:
        body: Request body as received
        header_value: ``X-Stamp`` header value
        expected_public_key: When given, the stamp must carry this key

    Returns:
        True if the stamp is valid for the body, False otherwise
    """
    contents = parse_stamp(header_value)
    if contents.scheme != SIGNATURE_SCHEME:
        raise FormatError(f"Unsupported stamp scheme {contents.scheme!r}")
    if expected_public_key is not None and contents.public_key.lower() != expected_public_key.lower():
        return False
    return verify_stamp_signature(contents.public_key, contents.signature, body)
