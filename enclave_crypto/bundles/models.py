# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""Pydantic models for the enclave bundle wire formats."""

import json
import re
from enum import Enum
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..encoding import hex_to_bytes
from ..exceptions import FormatError

_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{2})+$")

M = TypeVar("M", bound=BaseModel)


class KeyFormat(str, Enum):
    """Encoding of a raw private key handed to or returned by the enclave."""

    HEXADECIMAL = "HEXADECIMAL"
    SOLANA = "SOLANA"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


def _validate_hex(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not _HEX_RE.match(v):
        raise ValueError("Must be an even-length hexadecimal string")
    return v.lower()


class SignedEnvelope(_WireModel):
    """
    Enclave-signed envelope shared by export and import bundles.

    ``data`` is hex-encoded JSON; ``data_signature`` is a DER ECDSA
    signature over the raw ``data`` bytes by the enclave quorum key.
    """

    version: str = Field(..., min_length=1, description="Bundle format version")
    data: str = Field(..., description="Hex-encoded signed JSON payload")
    data_signature: str = Field(..., alias="dataSignature", description="DER signature (hex)")
    enclave_quorum_public: str = Field(
        ..., alias="enclaveQuorumPublic", description="Uncompressed signer key (hex)"
    )
    organization_id: Optional[str] = Field(None, alias="organizationId")

    @field_validator("data", "data_signature", "enclave_quorum_public")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        """Validate hex encoding."""
        return _validate_hex(v)

    @property
    def data_bytes(self) -> bytes:
        return hex_to_bytes(self.data)


class ExportBundle(SignedEnvelope):
    """Bundle produced by the enclave when exporting a key or wallet."""


class ImportBundle(SignedEnvelope):
    """Bundle produced by the enclave to receive an imported key or wallet."""


class SignedExportData(_WireModel):
    """Payload signed inside an ExportBundle."""

    organization_id: str = Field(..., min_length=1, alias="organizationId")
    encapped_public: str = Field(..., alias="encappedPublic")
    ciphertext: str
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("encapped_public", "ciphertext")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        """Validate hex encoding."""
        return _validate_hex(v)


class SignedImportData(_WireModel):
    """Payload signed inside an ImportBundle."""

    organization_id: str = Field(..., min_length=1, alias="organizationId")
    user_id: str = Field(..., min_length=1, alias="userId")
    target_public: str = Field(..., alias="targetPublic")

    @field_validator("target_public")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        """Validate hex encoding."""
        return _validate_hex(v)


def parse_model(model: Type[M], raw: str | bytes | dict) -> M:
    """
    Validate JSON (or an already decoded dict) into ``model``.

    Raises:
        FormatError: On malformed JSON or failed validation. The message
            names the model and the failing fields only.
    """
    try:
        if isinstance(raw, dict):
            return model.model_validate(raw)
        return model.model_validate_json(raw)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise FormatError(f"Invalid {model.__name__}: {', '.join(fields) or 'malformed JSON'}") from None


def parse_signed_data(model: Type[M], envelope: SignedEnvelope) -> M:
    """Decode the hex ``data`` of an envelope and validate it as ``model``."""
    try:
        payload = json.loads(envelope.data_bytes.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise FormatError("Signed data is not hex-encoded JSON") from None
    if not isinstance(payload, dict):
        raise FormatError("Signed data must be a JSON object")
    return parse_model(model, payload)
