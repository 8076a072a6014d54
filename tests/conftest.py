"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path

import pytest

from hunkpatch.patch import PatchOptions


HEADER_DATE = "2024-01-31 10:00:00.000000000 +0100"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_dir(temp_dir, mocker):
    """Point the hunkpatch configuration at a temporary directory."""
    mock_dir = temp_dir / ".hunkpatch"
    mocker.patch("hunkpatch.config._CONFIG_DIR", mock_dir)
    return mock_dir


@pytest.fixture
def make_file(temp_dir):
    """Write a text file into the temporary directory and return its path."""

    def _make(name: str, content: str) -> Path:
        path = temp_dir / name
        path.write_bytes(content.encode("utf-8"))
        return path

    return _make


@pytest.fixture
def options():
    """Build PatchOptions with keyword overrides."""

    def _options(**kwargs) -> PatchOptions:
        return PatchOptions(**kwargs)

    return _options


def read(path: Path) -> str:
    """Read a file back exactly as written."""
    return path.read_bytes().decode("utf-8")


def unified_headers(old: Path, new: Path) -> str:
    return f"--- {old}\t{HEADER_DATE}\n+++ {new}\t{HEADER_DATE}\n"


def context_headers(old: Path, new: Path) -> str:
    return f"*** {old}\t{HEADER_DATE}\n--- {new}\t{HEADER_DATE}\n"
