"""Core module containing configuration, errors and logging setup."""

from source_checksum.core.config import (
    ChecksumConfig,
    Settings,
    default_platform,
    get_settings,
)

__all__ = ["ChecksumConfig", "Settings", "default_platform", "get_settings"]
