# tests/conftest.py

"""Shared pytest fixtures for all chain_tracker tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def isolated_db_path(tmp_path: Path) -> Generator[Path, None, None]:
    """Point the default snapshot DB at a temp file for every test."""
    db_path = tmp_path / "analytics.db"
    with patch(
        "chain_tracker.config.settings.Settings.DB_PATH", db_path,
    ):
        yield db_path
