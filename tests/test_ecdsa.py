# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Unit tests for ECDSA signing and verification entry points.

Tests:
- sign_p256 / verify_p256
- API stamp signature verification
- Session JWT (double-hashed) verification
- Enclave verification token verification
"""

import hashlib
import json

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from enclave_crypto.config import settings
from enclave_crypto.curve.keys import generate_p256_key_pair, load_private_key
from enclave_crypto.encoding import base64url_encode
from enclave_crypto.exceptions import (
    AuthenticationError,
    ConfigurationError,
    FormatError,
    InvalidFormat,
)
from enclave_crypto.signatures.der import der_to_ieee1363, to_der_signature
from enclave_crypto.signatures.ecdsa import (
    sign_p256,
    verify_enclave_verification_token,
    verify_p256,
    verify_session_jwt_signature,
    verify_stamp_signature,
)


def _segment(obj: dict) -> str:
    return base64url_encode(json.dumps(obj).encode("utf-8"))


def _session_jwt(private_key: str, claims: dict) -> str:
    """Sign a session JWT the way the notarizer does."""
    signing_input = f"{_segment({'alg': 'ES256', 'typ': 'JWT'})}.{_segment(claims)}"
    inner = hashlib.sha256(signing_input.encode("utf-8")).digest()
    der = load_private_key(private_key).sign(inner, ec.ECDSA(hashes.SHA256()))
    return f"{signing_input}.{base64url_encode(der_to_ieee1363(der))}"


def _es256_jwt(private_key: str, claims: dict, alg: str = "ES256") -> str:
    signing_input = f"{_segment({'alg': alg, 'typ': 'JWT'})}.{_segment(claims)}"
    raw = bytes.fromhex(sign_p256(signing_input, private_key))
    return f"{signing_input}.{base64url_encode(raw)}"


class TestSignP256:
    """Test raw ECDSA signing."""

    def test_signature_verifies(self):
        """Test that a fresh signature verifies under the public key."""
        pair = generate_p256_key_pair()
        signature = bytes.fromhex(sign_p256("hello", pair.private_key))
        assert len(signature) == 64
        assert verify_p256("hello", signature, pair.public_key)
        assert verify_p256(b"hello", signature, pair.public_key_uncompressed)

    def test_wrong_message_fails(self):
        """Test that another message does not verify."""
        pair = generate_p256_key_pair()
        signature = bytes.fromhex(sign_p256("hello", pair.private_key))
        assert not verify_p256("hellp", signature, pair.public_key)

    def test_wrong_key_fails(self):
        """Test that another key does not verify."""
        signer = generate_p256_key_pair()
        other = generate_p256_key_pair()
        signature = bytes.fromhex(sign_p256("hello", signer.private_key))
        assert not verify_p256("hello", signature, other.public_key)

    def test_verify_requires_raw_signature(self):
        """Test that only 64-byte signatures are accepted."""
        pair = generate_p256_key_pair()
        with pytest.raises(InvalidFormat):
            verify_p256("hello", b"\x30" * 70, pair.public_key)


class TestStampSignature:
    """Test verify_stamp_signature."""

    def test_valid_stamp_signature(self):
        """Test a DER signature over a request body."""
        pair = generate_p256_key_pair()
        body = json.dumps({"organizationId": "org", "type": "ACTIVITY_TYPE_GET_WHOAMI"})
        der = to_der_signature(sign_p256(body, pair.private_key))
        assert verify_stamp_signature(pair.public_key, der, body)

    def test_modified_body(self):
        """Test that a different body fails."""
        pair = generate_p256_key_pair()
        der = to_der_signature(sign_p256("body", pair.private_key))
        assert not verify_stamp_signature(pair.public_key, der, "body!")

    def test_invalid_public_key(self):
        """Test an off-curve public key."""
        pair = generate_p256_key_pair()
        der = to_der_signature(sign_p256("body", pair.private_key))
        bad_key = pair.public_key_uncompressed[:-2] + (
            "00" if pair.public_key_uncompressed[-2:] != "00" else "01"
        )
        with pytest.raises(ValueError):
            verify_stamp_signature(bad_key, der, "body")


class TestSessionJwt:
    """Test verify_session_jwt_signature."""

    def test_valid_jwt(self):
        """Test a correctly signed session JWT."""
        notarizer = generate_p256_key_pair()
        jwt = _session_jwt(notarizer.private_key, {"exp": 2000000000, "session_type": "READ_WRITE"})
        assert verify_session_jwt_signature(jwt, notarizer.public_key_uncompressed)

    def test_tampered_payload(self):
        """Test a payload changed after signing."""
        notarizer = generate_p256_key_pair()
        jwt = _session_jwt(notarizer.private_key, {"user_id": "a"})
        header, _, signature = jwt.split(".")
        forged = f"{header}.{_segment({'user_id': 'b'})}.{signature}"
        assert not verify_session_jwt_signature(forged, notarizer.public_key_uncompressed)

    def test_single_hash_is_not_accepted(self):
        """Test that a plain ES256 JWT does not pass the double-hash check."""
        notarizer = generate_p256_key_pair()
        jwt = _es256_jwt(notarizer.private_key, {"user_id": "a"})
        assert not verify_session_jwt_signature(jwt, notarizer.public_key_uncompressed)

    def test_configured_key(self, monkeypatch):
        """Test fallback to the configured notarizer key."""
        notarizer = generate_p256_key_pair()
        monkeypatch.setattr(settings, "notarizer_public_key", notarizer.public_key_uncompressed)
        jwt = _session_jwt(notarizer.private_key, {"user_id": "a"})
        assert verify_session_jwt_signature(jwt)

    def test_no_key_configured(self):
        """Test that a missing notarizer key is a configuration error."""
        with pytest.raises(ConfigurationError):
            verify_session_jwt_signature("a.b.c")

    def test_malformed_jwt(self):
        """Test a token without three parts."""
        notarizer = generate_p256_key_pair()
        with pytest.raises(FormatError):
            verify_session_jwt_signature("only.two", notarizer.public_key_uncompressed)


class TestVerificationToken:
    """Test verify_enclave_verification_token."""

    def test_valid_token(self):
        """Test that claims are returned for a valid token."""
        key = generate_p256_key_pair()
        claims = {"id": "token-id", "contact": "user@example.com", "exp": 2000000000}
        token = _es256_jwt(key.private_key, claims)
        result = verify_enclave_verification_token(token, key.public_key_uncompressed, now=1700000000)
        assert result == claims

    def test_bad_signature(self):
        """Test a token signed by another key."""
        key = generate_p256_key_pair()
        other = generate_p256_key_pair()
        token = _es256_jwt(other.private_key, {"id": "x"})
        with pytest.raises(AuthenticationError):
            verify_enclave_verification_token(token, key.public_key_uncompressed)

    def test_expired(self):
        """Test an exp claim in the past."""
        key = generate_p256_key_pair()
        token = _es256_jwt(key.private_key, {"id": "x", "exp": 1000})
        with pytest.raises(AuthenticationError, match="expired"):
            verify_enclave_verification_token(token, key.public_key_uncompressed, now=2000)

    def test_unsupported_algorithm(self):
        """Test a header with another algorithm."""
        key = generate_p256_key_pair()
        token = _es256_jwt(key.private_key, {"id": "x"}, alg="HS256")
        with pytest.raises(FormatError):
            verify_enclave_verification_token(token, key.public_key_uncompressed)

    def test_no_key_configured(self):
        """Test that a missing key is a configuration error."""
        with pytest.raises(ConfigurationError):
            verify_enclave_verification_token("a.b.c")
