"""Pytest configuration and shared fixtures."""

import base64
import logging
import os
import random
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

TESTDATA_DIR = Path(__file__).parent / "testdata"


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset settings cache and drop tool env vars before each test."""
    from source_checksum.core.config import get_settings

    for name in list(os.environ):
        if name.upper().startswith("SOURCE_CHECKSUM_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    package = logging.getLogger("source_checksum")
    handlers, level, package_level = root.handlers[:], root.level, package.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    package.setLevel(package_level)


@pytest.fixture
def testdata_dockerfile() -> Path:
    """Path to the multi-stage sample dockerfile."""
    return TESTDATA_DIR / "Dockerfile"


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating files with random content under a fresh context dir."""

    def _make(*paths: str, name: str = "context") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel in paths:
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            content = os.urandom(random.randint(1, 2048))
            path.write_bytes(base64.b64encode(content))
        return root

    return _make
