"""Configuration using Pydantic Settings."""

import platform
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# platform.machine() spellings mapped to OCI architecture names
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "i386": "386",
    "i686": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def default_platform() -> str:
    """Return the host platform in ``os/arch`` form, e.g. ``linux/amd64``."""
    system = platform.system().lower() or "linux"
    machine = platform.machine().lower()
    return f"{system}/{_ARCH_ALIASES.get(machine, machine)}"


class Settings(BaseSettings):
    """Defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SOURCE_CHECKSUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    dockerfile: str = Field(
        default="Dockerfile",
        description="Recipe path used when --file is not given",
    )
    hash_algorithm: Literal["md5", "sha1", "sha256"] = Field(
        default="sha1",
        description="Hash algorithm used when --hash is not given",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format on stderr",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logs and per-write hash logging",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    return Settings()


class ChecksumConfig(BaseModel):
    """Inputs of a single checksum computation."""

    dockerfile: Path = Field(default=Path("Dockerfile"))
    workdir: Path = Field(default=Path("."))
    build_args: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    platforms: list[str] = Field(default_factory=lambda: [default_platform()])
    hash_algorithm: str = "sha1"
    debug: bool = False
