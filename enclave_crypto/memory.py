# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Enclave Crypto Authors

"""
Best-effort zeroing of secret buffers.

Python cannot guarantee that no copy of a secret survives (immutable bytes
objects, interpreter caches), but every buffer this package owns is a
bytearray that is overwritten on all exit paths.
"""

from typing import Optional


def wipe(buffer: Optional[bytearray]) -> None:
    """Overwrite a bytearray with zeros in place."""
    if buffer is None:
        return
    for i in range(len(buffer)):
        buffer[i] = 0


class SecretBytes:
    """
    Mutable secret buffer that is zeroed when the context exits.

    Example:
        >>> with SecretBytes(b"\\x01\\x02") as secret:
        ...     bytes(secret.value)
        b'\\x01\\x02'
    """

    __slots__ = ("_buffer",)

    def __init__(self, data: bytes | bytearray):
        self._buffer = bytearray(data)

    @property
    def value(self) -> bytearray:
        return self._buffer

    def __len__(self) -> int:
        return len(self._buffer)

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

    def __repr__(self) -> str:
        return f"SecretBytes(<{len(self._buffer)} bytes>)"

    def wipe(self) -> None:
        wipe(self._buffer)

    def __enter__(self) -> "SecretBytes":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()
