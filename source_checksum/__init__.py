"""Deterministic source checksums for container image builds."""

from source_checksum.core.config import ChecksumConfig
from source_checksum.core.exceptions import ChecksumError
from source_checksum.services.checksum_service import ChecksumService, calculate_checksum

__version__ = "0.1.0"

__all__ = ["ChecksumConfig", "ChecksumError", "ChecksumService", "calculate_checksum"]
