import json
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError, IntegrityError

from core.models.results import FailureKind, SaveStatus
from core.sa.models import LibrarySnapshotRow
from core.sa.repositories import SqlSnapshotRepository, SqlSettingsRepository
from core.store.library_store import LibraryStore
from core.validation import sanitize_snapshot

def test_load_empty_database(snapshot_repository):
    assert snapshot_repository.load() is None

def test_save_and_load(snapshot_repository, database):
    snapshot = sanitize_snapshot({"reading": [{"id": "b1", "title": "Dune", "pageCount": 412}]})
    assert snapshot_repository.save(snapshot) == SaveStatus.OK

    data = json.loads(snapshot_repository.load())
    assert data["reading"][0]["pageCount"] == 412
    assert data["_metadata"]["totalBooks"] == 1
    with database.get_db() as session:
        row = session.get(LibrarySnapshotRow, "test")
        assert row.total_books == 1
        assert row.version == "1.0.0"

def test_save_overwrites_previous_snapshot(snapshot_repository):
    snapshot_repository.save(sanitize_snapshot({"read": [{"id": "b1", "title": "Dune"}]}))
    snapshot_repository.save(sanitize_snapshot(None))
    assert json.loads(snapshot_repository.load())["read"] == []

def test_keys_are_separate_libraries(database, snapshot_repository):
    other = SqlSnapshotRepository(database, key="other", max_bytes=0)
    snapshot_repository.save(sanitize_snapshot({"read": [{"id": "b1", "title": "Dune"}]}))
    assert other.load() is None

def test_payload_over_quota(database):
    repository = SqlSnapshotRepository(database, key="small", max_bytes=50)
    snapshot = sanitize_snapshot({"read": [{"id": "b1", "title": "Dune", "description": "x" * 100}]})
    assert repository.save(snapshot) == SaveStatus.QUOTA_EXCEEDED
    assert repository.load() is None

@pytest.mark.parametrize("message, status", [
    ("database or disk is full", SaveStatus.QUOTA_EXCEEDED),
    ("could not extend file: No space left on device", SaveStatus.QUOTA_EXCEEDED),
    ("database is locked", SaveStatus.FAILED),
])
def test_operational_errors_map_to_status(snapshot_repository, message, status):
    error = OperationalError("UPDATE library_snapshot", {}, Exception(message))
    with patch.object(snapshot_repository.database, "get_db", side_effect=error):
        assert snapshot_repository.save(sanitize_snapshot(None)) == status

def test_other_database_errors_fail(snapshot_repository):
    error = IntegrityError("INSERT", {}, Exception("constraint failed"))
    with patch.object(snapshot_repository.database, "get_db", side_effect=error):
        assert snapshot_repository.save(sanitize_snapshot(None)) == SaveStatus.FAILED

def test_store_persists_through_database(database, snapshot_repository):
    """Test a store reopened on the same database sees the same columns in order."""
    store = LibraryStore(snapshot_repository)
    store.add_book("to-read", {"id": "b1", "title": "Dune"})
    store.add_book("to-read", {"id": "b2", "title": "Emma"})
    store.move_book("b1", "to-read", "favorites")

    reopened = LibraryStore(SqlSnapshotRepository(database, key="test"))
    assert [book.id for book in reopened.list_column("to-read")] == ["b2"]
    assert [book.id for book in reopened.list_column("favorites")] == ["b1"]

def test_store_rolls_back_when_quota_exceeded(database):
    store = LibraryStore(SqlSnapshotRepository(database, key="tiny", max_bytes=2000))
    assert store.add_book("to-read", {"id": "b1", "title": "Dune"})
    result = store.add_book("to-read", {"id": "b2", "title": "Emma", "description": "y" * 3000})
    assert result.failure == FailureKind.QUOTA_EXCEEDED
    assert not store.contains("b2")
    assert store.reload().count() == 1

def test_settings_round_trip(sql_settings_repository):
    assert sql_settings_repository.load_settings() is None
    assert sql_settings_repository.save_settings({"theme": "dark"}) == SaveStatus.OK
    assert json.loads(sql_settings_repository.load_settings()) == {"theme": "dark"}
    assert sql_settings_repository.save_settings({"theme": "light"}) == SaveStatus.OK
    assert json.loads(sql_settings_repository.load_settings()) == {"theme": "light"}

def test_clear_settings(sql_settings_repository):
    sql_settings_repository.save_settings({"theme": "dark"})
    assert sql_settings_repository.clear_settings() == SaveStatus.OK
    assert sql_settings_repository.load_settings() is None

def test_settings_save_error(sql_settings_repository):
    error = OperationalError("UPDATE user_settings", {}, Exception("database is locked"))
    with patch.object(sql_settings_repository.database, "get_db", side_effect=error):
        assert sql_settings_repository.save_settings({"theme": "dark"}) == SaveStatus.FAILED
