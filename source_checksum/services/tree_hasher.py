"""Structural content hashing of files and directory trees."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from source_checksum.core.exceptions import SourcePathError, UnsupportedFileTypeError
from source_checksum.services.hashing import (
    FIELD_SEPARATOR,
    file_content_hash,
    new_hash,
)

logger = logging.getLogger(__name__)


def _kind(mode: int) -> str:
    if stat.S_ISLNK(mode):
        return "symbolic link"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISFIFO(mode):
        return "named pipe"
    if stat.S_ISCHR(mode) or stat.S_ISBLK(mode):
        return "device"
    return "special file"


class TreeHasher:
    """Merkle-style hasher for files and directories.

    A file's digest is the hash of its bytes. A directory's digest is the
    hash of ``name + NUL + child digest`` for every child, in name order, so
    it does not depend on the order the filesystem lists entries in.
    """

    def __init__(self, algorithm: str = "sha1") -> None:
        new_hash(algorithm)
        self.algorithm = algorithm

    def digest(self, path: Path) -> bytes:
        """Digest of the file or directory at ``path``.

        Raises:
            UnsupportedFileTypeError: For symlinks and special files
            SourcePathError: If anything cannot be statted or read
        """
        try:
            mode = path.lstat().st_mode
        except OSError as e:
            raise SourcePathError(str(path), e.strerror or str(e)) from e

        if stat.S_ISREG(mode):
            digest = self._file_digest(path)
        elif stat.S_ISDIR(mode):
            digest = self._dir_digest(path)
        else:
            raise UnsupportedFileTypeError(str(path), _kind(mode))

        logger.debug(
            "Hashed path",
            extra={"path": str(path), self.algorithm: digest.hex()},
        )
        return digest

    def _file_digest(self, path: Path) -> bytes:
        try:
            return file_content_hash(path, self.algorithm)
        except OSError as e:
            raise SourcePathError(str(path), e.strerror or str(e)) from e

    def _dir_digest(self, path: Path) -> bytes:
        h = new_hash(self.algorithm)
        for name in sorted(self._list_children(path)):
            h.update(os.fsencode(name))
            h.update(FIELD_SEPARATOR)
            h.update(self.digest(path / name))
        return h.digest()

    def _list_children(self, path: Path) -> list[str]:
        try:
            return os.listdir(path)
        except OSError as e:
            raise SourcePathError(str(path), e.strerror or str(e)) from e
