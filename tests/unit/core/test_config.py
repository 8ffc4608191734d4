"""Tests for configuration module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from source_checksum.core.config import (
    ChecksumConfig,
    Settings,
    default_platform,
    get_settings,
)


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self) -> None:
        """Test that default values are applied correctly."""
        settings = Settings(_env_file=None)

        assert settings.dockerfile == "Dockerfile"
        assert settings.hash_algorithm == "sha1"
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.debug is False

    def test_settings_loads_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings load from prefixed environment variables."""
        monkeypatch.setenv("SOURCE_CHECKSUM_DOCKERFILE", "build/Dockerfile")
        monkeypatch.setenv("SOURCE_CHECKSUM_HASH_ALGORITHM", "sha256")
        monkeypatch.setenv("SOURCE_CHECKSUM_LOG_FORMAT", "json")
        monkeypatch.setenv("SOURCE_CHECKSUM_DEBUG", "true")

        settings = Settings(_env_file=None)

        assert settings.dockerfile == "build/Dockerfile"
        assert settings.hash_algorithm == "sha256"
        assert settings.log_format == "json"
        assert settings.debug is True

    def test_invalid_hash_algorithm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unsupported algorithms fail validation."""
        monkeypatch.setenv("SOURCE_CHECKSUM_HASH_ALGORITHM", "crc32")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_cached(self) -> None:
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()


class TestChecksumConfig:
    """Tests for ChecksumConfig."""

    def test_defaults(self) -> None:
        """Test a config with nothing set."""
        config = ChecksumConfig()

        assert config.dockerfile == Path("Dockerfile")
        assert config.workdir == Path(".")
        assert config.build_args == {}
        assert config.labels == {}
        assert config.platforms == [default_platform()]
        assert config.hash_algorithm == "sha1"
        assert config.debug is False

    def test_paths_coerced(self) -> None:
        """Test string paths become Path objects."""
        config = ChecksumConfig(dockerfile="ctx/Dockerfile", workdir="ctx")
        assert config.dockerfile == Path("ctx/Dockerfile")
        assert config.workdir == Path("ctx")


class TestDefaultPlatform:
    """Tests for default_platform."""

    def test_os_arch_form(self) -> None:
        """Test the platform looks like os/arch."""
        system, _, arch = default_platform().partition("/")
        assert system
        assert arch

    def test_arch_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test machine names map to OCI architectures."""
        monkeypatch.setattr("platform.system", lambda: "Linux")
        monkeypatch.setattr("platform.machine", lambda: "x86_64")
        assert default_platform() == "linux/amd64"

        monkeypatch.setattr("platform.machine", lambda: "aarch64")
        assert default_platform() == "linux/arm64"
