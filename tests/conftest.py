# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Shared fixtures for the enclave crypto tests."""

import json

import pytest

from enclave_crypto.config import settings
from enclave_crypto.curve.keys import generate_p256_key_pair
from enclave_crypto.signatures.der import to_der_signature
from enclave_crypto.signatures.ecdsa import sign_p256

# Embedded key and organization used by the export bundle fixture
EMBEDDED_PRIVATE_KEY = "ffc6090f14bcf260e5dfe63f45412e60a477bb905956d7cc90195b71c2a544b3"
ORGANIZATION_ID = "f9a31c64-d604-42e4-9bef-a773096afad7"
USER_ID = "8d7cf3f4-3d2e-4b5e-b0f1-3b3a7c1e9a02"
MNEMONIC = "leaf lady until indicate praise final route toast cake minimum insect unknown"


class FixedRandom:
    """Deterministic random source that replays a fixed byte stream."""

    def __init__(self, stream: bytes):
        self._stream = stream
        self._offset = 0

    def get_random_bytes(self, n: int) -> bytes:
        chunk = self._stream[self._offset:self._offset + n]
        if len(chunk) != n:
            raise RuntimeError("FixedRandom stream exhausted")
        self._offset += n
        return chunk


@pytest.fixture
def receiver_pair():
    """Fresh receiver key pair."""
    return generate_p256_key_pair()


@pytest.fixture
def signer_pair():
    """Key pair standing in for the enclave quorum key."""
    return generate_p256_key_pair()


@pytest.fixture
def sign_envelope(signer_pair):
    """
    Factory building a signed bundle envelope as the enclave would.

    ``payload`` is serialized to JSON, hex encoded as ``data`` and signed
    with the signer key. Keyword overrides replace envelope members.
    """

    def _make(payload: dict, **overrides) -> str:
        data = json.dumps(payload).encode("utf-8")
        envelope = {
            "version": "v1.0.0",
            "data": data.hex(),
            "dataSignature": to_der_signature(sign_p256(data, signer_pair.private_key)),
            "enclaveQuorumPublic": signer_pair.public_key_uncompressed,
        }
        envelope.update(overrides)
        return json.dumps(envelope)

    return _make


@pytest.fixture(autouse=True)
def no_configured_keys(monkeypatch):
    """Keep tests independent of ENCLAVE_CRYPTO_* variables on the host."""
    monkeypatch.setattr(settings, "signer_public_key", None)
    monkeypatch.setattr(settings, "notarizer_public_key", None)
    monkeypatch.setattr(settings, "verification_token_public_key", None)


@pytest.fixture
def embedded_key():
    return EMBEDDED_PRIVATE_KEY


@pytest.fixture
def organization_id():
    return ORGANIZATION_ID


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def mnemonic():
    return MNEMONIC


@pytest.fixture
def fixed_random():
    """Factory for deterministic random sources."""
    return FixedRandom
