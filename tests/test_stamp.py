# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Unit tests for API key request stamps."""

import json

import pytest

from enclave_crypto.curve.keys import generate_p256_key_pair
from enclave_crypto.encoding import base64url_decode, base64url_encode
from enclave_crypto.exceptions import ConfigurationError, FormatError
from enclave_crypto.signatures.stamp import (
    SIGNATURE_SCHEME,
    STAMP_HEADER_NAME,
    parse_stamp,
    stamp_request,
    verify_request_stamp,
)

BODY = json.dumps({"type": "ACTIVITY_TYPE_CREATE_WALLET", "organizationId": "org-1"})


class TestStampRequest:
    """Test stamp creation and verification."""

    def test_stamp_header(self):
        """Test header name and decoded contents."""
        api_key = generate_p256_key_pair()
        stamp = stamp_request(BODY, api_key.private_key, api_key.public_key)
        assert stamp.header_name == STAMP_HEADER_NAME == "X-Stamp"

        contents = json.loads(base64url_decode(stamp.header_value))
        assert list(contents) == ["publicKey", "scheme", "signature"]
        assert contents["publicKey"] == api_key.public_key
        assert contents["scheme"] == SIGNATURE_SCHEME
        assert contents["signature"].startswith("30")

    def test_stamp_verifies(self):
        """Test that a stamp verifies against the same body."""
        api_key = generate_p256_key_pair()
        stamp = stamp_request(BODY, api_key.private_key)
        assert verify_request_stamp(BODY, stamp.header_value)
        assert verify_request_stamp(BODY, stamp.header_value, expected_public_key=api_key.public_key)

    def test_modified_body_fails(self):
        """Test that the stamp is bound to the body."""
        api_key = generate_p256_key_pair()
        stamp = stamp_request(BODY, api_key.private_key)
        assert not verify_request_stamp(BODY + " ", stamp.header_value)

    def test_unexpected_key_fails(self):
        """Test pinning the stamping key."""
        api_key = generate_p256_key_pair()
        other = generate_p256_key_pair()
        stamp = stamp_request(BODY, api_key.private_key)
        assert not verify_request_stamp(BODY, stamp.header_value, expected_public_key=other.public_key)

    def test_mismatched_public_key(self):
        """Test that a public key from another pair is refused."""
        api_key = generate_p256_key_pair()
        other = generate_p256_key_pair()
        with pytest.raises(ConfigurationError):
            stamp_request(BODY, api_key.private_key, other.public_key)

    def test_unknown_scheme(self):
        """Test a stamp with another scheme."""
        api_key = generate_p256_key_pair()
        contents = parse_stamp(stamp_request(BODY, api_key.private_key).header_value)
        forged = base64url_encode(
            json.dumps(
                {
                    "publicKey": contents.public_key,
                    "scheme": "SIGNATURE_SCHEME_TK_API_ED25519",
                    "signature": contents.signature,
                }
            ).encode("utf-8")
        )
        with pytest.raises(FormatError):
            verify_request_stamp(BODY, forged)

    def test_garbage_header(self):
        """Test a header value that is not a stamp."""
        with pytest.raises(FormatError):
            parse_stamp("not-a-stamp")
