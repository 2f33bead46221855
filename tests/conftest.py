"""Shared pytest fixtures for all tests."""

import pytest

from mongofs.database import init_database
from mongofs.services.file_service import FileService


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Point the store at a fresh SQLite database for each test.

    Args:
        monkeypatch: pytest monkeypatch fixture
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to the temporary database file
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("mongofs.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("mongofs.config.DATABASE_PATH", str(db_path))
    init_database()
    return db_path


@pytest.fixture
def service(test_db):
    """
    FileService using the default chunk size preset.
    """
    return FileService()


@pytest.fixture
def patterned_bytes():
    """
    Build deterministic content where byte i is i % 251.

    Returns:
        Function taking a size and returning bytes
    """
    def _build(size: int) -> bytes:
        return bytes(idx % 251 for idx in range(size))
    return _build
