# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Configuration for the bundle protocol layer."""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Trusted public keys loaded from environment variables.

    Only the protocol entry points fall back to these values, and only when
    the caller does not pass a key explicitly. Primitives never read them.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCLAVE_CRYPTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Enclave quorum key that signs export and import bundles
    signer_public_key: Optional[str] = None

    # Notarizer key that signs session JWTs
    notarizer_public_key: Optional[str] = None

    # Key that signs enclave verification tokens
    verification_token_public_key: Optional[str] = None

    @field_validator(
        "signer_public_key",
        "notarizer_public_key",
        "verification_token_public_key",
    )
    @classmethod
    def validate_public_key_hex(cls, v: Optional[str]) -> Optional[str]:
        """Keys must be uncompressed or compressed P-256 points in hex."""
        if v is None or v == "":
            return None
        v = v.strip().lower()
        if len(v) not in (66, 130):
            raise ValueError("Public key must be 33 or 65 bytes of hex")
        try:
            bytes.fromhex(v)
        except ValueError:
            raise ValueError("Public key must be valid hex") from None
        return v


# Global settings instance
settings = Settings()
