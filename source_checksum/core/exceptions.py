"""Error taxonomy for checksum computation.

Every error is fatal for the invocation that raised it. Categories:
``input`` (bad recipe, bad options, paths outside the root), ``expansion``
(malformed variable substitution) and ``io`` (filesystem failures while
hashing).
"""

from typing import Any


class ChecksumError(Exception):
    """Base error carrying a short title, a detail message and context."""

    def __init__(
        self,
        title: str,
        detail: str,
        category: str = "input",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.title = title
        self.detail = detail
        self.category = category
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dictionary suitable for structured logs."""
        data = {
            "title": self.title,
            "category": self.category,
            "detail": self.detail,
        }
        data.update(self.extra)
        return data


class RecipeError(ChecksumError):
    """Recipe could not be read or parsed."""

    def __init__(
        self,
        detail: str,
        line: int | None = None,
        path: str | None = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if line is not None:
            detail = f"line {line}: {detail}"
            extra["line"] = line
        if path is not None:
            extra["path"] = path
        super().__init__(title="Recipe Error", detail=detail, extra=extra)


class UnknownHashAlgorithmError(ChecksumError):
    """Requested hash algorithm is not supported."""

    def __init__(self, algorithm: str, supported: tuple[str, ...]) -> None:
        super().__init__(
            title="Unknown Hash Algorithm",
            detail=(
                f"unknown hash algorithm '{algorithm}' "
                f"(supported: {', '.join(supported)})"
            ),
            extra={"algorithm": algorithm},
        )


class WorkdirError(ChecksumError):
    """Working-directory root is missing or not a directory."""

    def __init__(self, workdir: str) -> None:
        super().__init__(
            title="Workdir Error",
            detail=f"working directory '{workdir}' is not a directory",
            extra={"workdir": workdir},
        )


class PathOutsideRootError(ChecksumError):
    """A source pattern or one of its matches escapes the root."""

    def __init__(self, path: str, root: str) -> None:
        super().__init__(
            title="Path Outside Root",
            detail=f"source path '{path}' is outside of '{root}'",
            extra={"path": path, "root": root},
        )


class ExpansionError(ChecksumError):
    """Variable substitution in a recipe word failed."""

    def __init__(self, detail: str, word: str) -> None:
        super().__init__(
            title="Expansion Error",
            detail=f"{detail} in '{word}'",
            category="expansion",
            extra={"word": word},
        )


class SourcePathError(ChecksumError):
    """A referenced path could not be statted or read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            title="Source Path Error",
            detail=f"cannot read '{path}': {reason}",
            category="io",
            extra={"path": path},
        )


class UnsupportedFileTypeError(ChecksumError):
    """Symlinks and special files have no defined digest."""

    def __init__(self, path: str, kind: str) -> None:
        super().__init__(
            title="Unsupported File Type",
            detail=f"'{path}' is a {kind}",
            category="io",
            extra={"path": path, "kind": kind},
        )
