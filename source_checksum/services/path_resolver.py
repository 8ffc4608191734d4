"""Resolution of source patterns to concrete paths under a root."""

from __future__ import annotations

import glob
import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path, PurePath

from source_checksum.core.exceptions import (
    PathOutsideRootError,
    SourcePathError,
    WorkdirError,
)

logger = logging.getLogger(__name__)

REMOTE_PREFIXES = ("http://", "https://", "git@", "git://")


@dataclass(frozen=True)
class ResolvedPath:
    """A concrete path and the root-relative name it was matched as."""

    name: str
    path: Path


def normalize_pattern(pattern: str) -> str:
    """Make a recipe source pattern relative to the build root.

    Leading ``/`` and ``./`` are dropped because recipe sources are always
    relative to the build context. Returns ``""`` for empty patterns.
    """
    if not pattern:
        return ""
    return posixpath.normpath(pattern.lstrip("/") or ".")


class PathResolver:
    """Expands source patterns against a working-directory root."""

    def __init__(self, root: str | Path) -> None:
        """Initialize the resolver.

        Args:
            root: Working-directory root all patterns are relative to

        Raises:
            WorkdirError: If the root is not an existing directory
        """
        self.root = Path(root)
        if not self.root.is_dir():
            raise WorkdirError(str(root))
        self._real_root = os.path.realpath(self.root)

    def resolve(self, patterns: list[str]) -> list[ResolvedPath]:
        """Resolve patterns in the order given.

        Duplicated patterns produce duplicated entries.

        Raises:
            PathOutsideRootError: If a pattern or match escapes the root
            SourcePathError: If a match cannot be statted
        """
        resolved: list[ResolvedPath] = []
        for pattern in patterns:
            resolved.extend(self.resolve_pattern(pattern))
        return resolved

    def resolve_pattern(self, pattern: str) -> list[ResolvedPath]:
        """Resolve a single pattern; matches come back in lexical order."""
        if pattern.startswith(REMOTE_PREFIXES):
            logger.debug("Skipping remote source", extra={"pattern": pattern})
            return []

        relative = normalize_pattern(pattern)
        if not relative:
            logger.debug("Skipping empty source pattern")
            return []
        if relative == ".." or relative.startswith("../"):
            raise PathOutsideRootError(pattern, str(self.root))

        matches = sorted(
            PurePath(match).as_posix()
            for match in glob.glob(relative, root_dir=self.root, include_hidden=True)
        )
        if not matches:
            logger.debug("Pattern matched nothing", extra={"pattern": pattern})
            return []

        return [self._checked(name) for name in matches]

    def _checked(self, name: str) -> ResolvedPath:
        path = self.root / name
        real = os.path.realpath(path)
        if os.path.commonpath([real, self._real_root]) != self._real_root:
            raise PathOutsideRootError(name, str(self.root))
        try:
            path.lstat()
        except OSError as e:
            raise SourcePathError(name, e.strerror or str(e)) from e
        return ResolvedPath(name=name, path=path)
