"""Shared fixtures for the configuration loader tests."""

import tempfile
from pathlib import Path

import pytest


@pytest.fixture()
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
