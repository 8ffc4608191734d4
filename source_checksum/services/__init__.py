"""Checksum engine services."""

from source_checksum.services.checksum_service import ChecksumService, calculate_checksum

__all__ = ["ChecksumService", "calculate_checksum"]
