"""Tests for structured logging."""

import json
import logging
import sys

from source_checksum.core.logging import (
    TEXT_FORMAT,
    JSONFormatter,
    is_sensitive,
    redact_sensitive_data,
    setup_logging,
)


def _record(level: int = logging.INFO, msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="source_checksum.test",
        level=level,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestRedactSensitiveData:
    """Tests for sensitive data redaction."""

    def test_redacts_token_build_arg(self) -> None:
        """Test credential-like build args are redacted."""
        data = {"NPM_TOKEN": "abc", "GIT_PASSWORD": "pw", "VERSION": "1.2"}
        result = redact_sensitive_data(data)
        assert result["NPM_TOKEN"] == "[REDACTED]"
        assert result["GIT_PASSWORD"] == "[REDACTED]"
        assert result["VERSION"] == "1.2"

    def test_redacts_nested_sensitive_data(self) -> None:
        """Test nested sensitive fields are redacted."""
        data = {"build_args": {"PIP_SECRET": "s", "PYTHON": "3.12"}}
        result = redact_sensitive_data(data)
        assert result["build_args"] == {"PIP_SECRET": "[REDACTED]", "PYTHON": "3.12"}

    def test_redacts_in_lists(self) -> None:
        """Test sensitive fields in lists are redacted."""
        data = {"items": [{"api_key": "k"}, "plain"]}
        result = redact_sensitive_data(data)
        assert result["items"] == [{"api_key": "[REDACTED]"}, "plain"]

    def test_does_not_modify_input(self) -> None:
        """Test the input dictionary is left unchanged."""
        data = {"token": "t"}
        redact_sensitive_data(data)
        assert data == {"token": "t"}


class TestIsSensitive:
    """Tests for credential name detection."""

    def test_markers_match_case_insensitively(self) -> None:
        """Test typical secret build arg names."""
        for name in ("NPM_TOKEN", "GitPassword", "AWS_ACCESS_KEY_ID", "BASIC_AUTH"):
            assert is_sensitive(name)

    def test_plain_names(self) -> None:
        """Test ordinary build arg names pass through."""
        for name in ("VERSION", "PYTHON", "ARG1"):
            assert not is_sensitive(name)


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_formats_basic_log(self) -> None:
        """Test the fixed fields of a record."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "source_checksum.test"
        assert data["message"] == "Test message"
        assert data["source"] == "file:42"
        assert "time" in data
        assert "exception" not in data

    def test_formats_exception(self) -> None:
        """Test the traceback is attached as text."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record(logging.ERROR, "Error occurred")
        record.exc_info = exc_info
        data = json.loads(JSONFormatter().format(record))

        assert data["exception"].startswith("Traceback")
        assert data["exception"].endswith("ValueError: Test error")

    def test_extra_fields_at_top_level(self) -> None:
        """Test extra fields are flattened into the record and redacted."""
        record = _record()
        record.path = "a/1"
        record.sha1 = "da39a3ee5e6b4b0d3255bfef95601890afd80709"
        record.build_args = {"NPM_TOKEN": "hidden", "VERSION": "1"}

        data = json.loads(JSONFormatter().format(record))

        assert data["path"] == "a/1"
        assert data["sha1"] == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
        assert data["build_args"] == {"NPM_TOKEN": "[REDACTED]", "VERSION": "1"}

    def test_extra_does_not_replace_fixed_fields(self) -> None:
        """Test an extra named like a fixed field is dropped."""
        record = _record()
        record.level = "spoofed"

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"


class TestSetupLogging:
    """Tests for logging setup."""

    def test_single_stderr_handler(self) -> None:
        """Test the root logger gets exactly one stderr handler."""
        setup_logging("INFO")
        setup_logging("INFO")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr

    def test_text_format(self) -> None:
        """Test plain text is the default format."""
        setup_logging("WARNING")

        formatter = logging.getLogger().handlers[0].formatter
        assert formatter is not None
        assert formatter._fmt == TEXT_FORMAT
        assert logging.getLogger("source_checksum").level == logging.WARNING

    def test_json_format(self) -> None:
        """Test JSON output can be selected."""
        setup_logging("DEBUG", "json")

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Test an unrecognised level name."""
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.INFO
