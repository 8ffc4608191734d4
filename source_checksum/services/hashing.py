"""Hash algorithm selection and field framing for checksum composition."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

from source_checksum.core.exceptions import UnknownHashAlgorithmError

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256")

READ_CHUNK_SIZE = 64 * 1024

FIELD_SEPARATOR = b"\0"


class Hasher(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def digest_size(self) -> int: ...

    def update(self, data: bytes, /) -> None: ...

    def digest(self) -> bytes: ...

    def hexdigest(self) -> str: ...


def new_hash(algorithm: str) -> Hasher:
    """Create an empty accumulator for ``algorithm``.

    Raises:
        UnknownHashAlgorithmError: If the algorithm is not supported.
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise UnknownHashAlgorithmError(algorithm, SUPPORTED_ALGORITHMS)
    return hashlib.new(algorithm, usedforsecurity=False)


class LoggingHash:
    """Accumulator wrapper that logs an md5 of every chunk written to it."""

    def __init__(self, inner: Hasher) -> None:
        self._inner = inner

    @property
    def name(self) -> str:
        return self._inner.name

    @property
    def digest_size(self) -> int:
        return self._inner.digest_size

    def update(self, data: bytes, /) -> None:
        logger.debug(
            "add to hash",
            extra={"md5": hashlib.md5(data, usedforsecurity=False).hexdigest()},
        )
        self._inner.update(data)

    def digest(self) -> bytes:
        return self._inner.digest()

    def hexdigest(self) -> str:
        return self._inner.hexdigest()


def file_content_hash(path: Path, algorithm: str) -> bytes:
    """Hash of file content; the file name plays no part in it."""
    h = new_hash(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(READ_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.digest()


def write_field(h: Hasher, value: str | bytes) -> None:
    """Write one string field followed by a NUL separator."""
    if isinstance(value, str):
        value = value.encode("utf-8")
    h.update(value)
    h.update(FIELD_SEPARATOR)


def write_mapping(h: Hasher, mapping: Mapping[str, str]) -> None:
    """Write key/value pairs in sorted key order."""
    for key in sorted(mapping):
        write_field(h, key)
        write_field(h, mapping[key])


def write_sequence(h: Hasher, values: Iterable[str]) -> None:
    """Write values in sorted order."""
    for value in sorted(values):
        write_field(h, value)
