# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Unit tests for environment configuration."""

import pytest
from pydantic import ValidationError

from enclave_crypto.config import Settings
from enclave_crypto.curve.keys import generate_p256_key_pair


class TestSettings:
    """Test Settings loading and validation."""

    def test_defaults_empty(self, monkeypatch, tmp_path):
        """Test that no key is trusted unless configured."""
        monkeypatch.chdir(tmp_path)
        for name in ("SIGNER_PUBLIC_KEY", "NOTARIZER_PUBLIC_KEY", "VERIFICATION_TOKEN_PUBLIC_KEY"):
            monkeypatch.delenv(f"ENCLAVE_CRYPTO_{name}", raising=False)
        config = Settings()
        assert config.signer_public_key is None
        assert config.notarizer_public_key is None
        assert config.verification_token_public_key is None

    def test_from_environment(self, monkeypatch, tmp_path):
        """Test the ENCLAVE_CRYPTO_ prefix and lowercasing."""
        monkeypatch.chdir(tmp_path)
        key = generate_p256_key_pair().public_key_uncompressed
        monkeypatch.setenv("ENCLAVE_CRYPTO_SIGNER_PUBLIC_KEY", key.upper())
        assert Settings().signer_public_key == key

    def test_from_env_file(self, monkeypatch, tmp_path):
        """Test loading from a .env file in the working directory."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("ENCLAVE_CRYPTO_NOTARIZER_PUBLIC_KEY", raising=False)
        key = generate_p256_key_pair().public_key
        (tmp_path / ".env").write_text(f"ENCLAVE_CRYPTO_NOTARIZER_PUBLIC_KEY={key}\n")
        assert Settings().notarizer_public_key == key

    def test_empty_value_is_unset(self):
        """Test that an empty string means no key."""
        assert Settings(signer_public_key="").signer_public_key is None

    @pytest.mark.parametrize("value", ["04abcd", "zz" * 65, "04" * 64])
    def test_rejects_invalid_key(self, value):
        """Test wrong lengths and non-hex values."""
        with pytest.raises(ValidationError):
            Settings(signer_public_key=value)
