# tests/test_sa/conftest.py
import pytest

from core.sa.database import Database
from core.sa.repositories import SqlSnapshotRepository, SqlSettingsRepository

@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database with the schema created"""
    db = Database(f"sqlite:///{tmp_path / 'test_library.db'}")
    db.init_db()
    yield db
    db.dispose()

@pytest.fixture
def snapshot_repository(database):
    return SqlSnapshotRepository(database, key="test", max_bytes=0)

@pytest.fixture
def sql_settings_repository(database):
    return SqlSettingsRepository(database, key="test")
