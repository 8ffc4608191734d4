"""Tests for the error taxonomy."""

import pytest

from source_checksum.core.exceptions import (
    ChecksumError,
    ExpansionError,
    PathOutsideRootError,
    RecipeError,
    SourcePathError,
    UnknownHashAlgorithmError,
    UnsupportedFileTypeError,
    WorkdirError,
)


class TestChecksumError:
    """Tests for the base error."""

    def test_creation(self) -> None:
        """Test title, detail and default category."""
        error = ChecksumError(title="Test Error", detail="This is a test error")

        assert error.title == "Test Error"
        assert error.detail == "This is a test error"
        assert error.category == "input"
        assert str(error) == "This is a test error"

    def test_to_dict(self) -> None:
        """Test conversion to a flat dictionary."""
        error = ChecksumError(
            title="Test Error",
            detail="detail",
            category="io",
            extra={"path": "a/1"},
        )

        assert error.to_dict() == {
            "title": "Test Error",
            "category": "io",
            "detail": "detail",
            "path": "a/1",
        }


class TestSpecificErrors:
    """Tests for the concrete error types."""

    def test_recipe_error_with_line(self) -> None:
        """Test line numbers prefix the detail."""
        error = RecipeError("COPY requires at least two arguments", line=3)

        assert error.detail == "line 3: COPY requires at least two arguments"
        assert error.extra == {"line": 3}
        assert error.title == "Recipe Error"

    def test_recipe_error_with_path(self) -> None:
        """Test the recipe path is kept as context."""
        error = RecipeError("read dockerfile: No such file", path="Dockerfile")
        assert error.detail == "read dockerfile: No such file"
        assert error.extra == {"path": "Dockerfile"}

    def test_expansion_error(self) -> None:
        """Test expansion errors carry the word."""
        error = ExpansionError("missing '}'", "${A")

        assert error.category == "expansion"
        assert error.detail == "missing '}' in '${A'"
        assert error.extra == {"word": "${A"}

    def test_unknown_hash_algorithm(self) -> None:
        """Test supported names are listed."""
        error = UnknownHashAlgorithmError("crc32", ("md5", "sha1"))
        assert "crc32" in error.detail
        assert "md5, sha1" in error.detail

    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (WorkdirError("ctx"), "input"),
            (PathOutsideRootError("../x", "ctx"), "input"),
            (SourcePathError("a", "Permission denied"), "io"),
            (UnsupportedFileTypeError("a", "socket"), "io"),
        ],
    )
    def test_categories(self, error: ChecksumError, category: str) -> None:
        """Test each error maps to its category."""
        assert isinstance(error, ChecksumError)
        assert error.category == category
