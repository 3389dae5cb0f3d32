"""Pytest fixtures for diagcollect tests."""

import gzip
import os
from pathlib import Path

import pytest

from diagcollect.content.redaction import RedactionFilter
from diagcollect.core import logging as log


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore default logging settings after each test."""
    yield
    log.configure_logging(log_format="text", quiet=False)
    log.set_verbose(False)


@pytest.fixture
def redactor() -> RedactionFilter:
    return RedactionFilter()


@pytest.fixture
def system_root(tmp_path) -> Path:
    """Fake host filesystem root."""
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def staging(tmp_path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def make_file(system_root):
    """Create a file under the fake root with a given mtime."""

    def _make(rel: str, content: bytes, mtime: int | None = None, compress: bool = False) -> Path:
        path = system_root / rel.lstrip("/")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(gzip.compress(content) if compress else content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make
