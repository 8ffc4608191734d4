"""Logging configuration for the checksum tool.

Diagnostics always go to stderr so stdout carries nothing but the digest.
"""

import json
import logging
import sys
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

REDACTED = "[REDACTED]"

# Substrings of build argument and label names whose values are never logged
SENSITIVE_MARKERS = (
    "token",
    "password",
    "passwd",
    "secret",
    "credential",
    "auth",
    "private_key",
    "api_key",
    "access_key",
)

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Attributes every record carries; anything else arrived through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def is_sensitive(name: str) -> bool:
    """Whether a variable name looks like it holds a credential."""
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return redact_sensitive_data(value)
    if isinstance(value, list | tuple):
        return [_redact(item) for item in value]
    return value


def redact_sensitive_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with credential-like entries masked.

    Nested mappings and lists are walked, so a ``build_args`` dict passed as
    a log extra is masked key by key.
    """
    return {
        key: REDACTED if is_sensitive(key) else _redact(value)
        for key, value in data.items()
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        }
        for key, value in redact_sensitive_data(extras).items():
            entry.setdefault(key, value)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).rstrip()

        return json.dumps(entry, default=str)


def setup_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    """Configure the root logger with a single stderr handler.

    Args:
        log_level: Level name, e.g. "DEBUG" or "INFO"
        log_format: "text" for one plain line per record, "json" for
            structured records
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(level)
    root_logger.addHandler(stderr_handler)

    logging.getLogger("source_checksum").setLevel(level)
