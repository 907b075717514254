# core/services/library_service.py

import json
import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from core.models.book import BookRecord, SearchHit, ColumnId, column_key, is_column
from core.models.library import UserSettings, SCHEMA_VERSION
from core.models.results import StoreResult, FailureKind, LookupStatus, SaveStatus
from core.search.google_books import BookSearch, SOURCE
from core.store.library_store import LibraryStore
from core.store.repository import SettingsRepository
from core.validation import serialize_snapshot

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
EXPORT_SOURCE = "reading-board"

class LibraryService:
    """Glue between the store, the book lookup and the user's settings."""

    def __init__(self, store: LibraryStore, search: Optional[BookSearch] = None,
                 settings_repository: Optional[SettingsRepository] = None):
        self.store = store
        self.search = search
        self.settings_repository = settings_repository

    # ------------------------------------------------------------------ #
    # Books

    def add_search_result(self, record, column=ColumnId.TO_READ) -> StoreResult:
        """Promote a lookup result into the library with fresh reading fields."""
        data = record.to_dict() if isinstance(record, BookRecord) else dict(record or {})
        book_id = data.get("id")
        if book_id and self.store.contains(book_id):
            return StoreResult.failed(FailureKind.VALIDATION, "This book is already in your library")

        now = datetime.now(UTC).isoformat()
        data.update({
            "rating": 0,
            "comment": "",
            "progress": 0,
            "dateAdded": now,
            "dateStatusChanged": now,
            "source": data.get("source") or SOURCE,
        })
        return self.store.add_book(column, data)

    def add_by_external_id(self, external_id: str, column=ColumnId.TO_READ) -> StoreResult:
        if self.search is None:
            return StoreResult.failed(FailureKind.LOOKUP_UNAVAILABLE, "No book lookup is configured")
        if self.store.contains(external_id):
            return StoreResult.failed(FailureKind.VALIDATION, "This book is already in your library")

        lookup = self.search.fetch_book_details(external_id)
        if lookup.status == LookupStatus.NOT_FOUND:
            return StoreResult.failed(FailureKind.NOT_FOUND, lookup.message or f"Book {external_id} not found")
        if lookup.status == LookupStatus.TRANSIENT_FAILURE:
            logger.warning(f"Lookup of {external_id} unavailable: {lookup.message}")
            return StoreResult.failed(FailureKind.LOOKUP_UNAVAILABLE, lookup.message)
        return self.add_search_result(lookup.record, column)

    def search_library(self, query: Optional[str]) -> List[SearchHit]:
        """Short queries show the whole library instead of filtering it."""
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return self.store.search_books("")
        return self.store.search_books(query)

    def apply_book_update(self, book_id: str, rating: Optional[int] = None, comment: Optional[str] = None,
                          progress: Optional[int] = None, status=None) -> StoreResult:
        """Update reading fields, then move the book if its status changed."""
        current = self.store.column_of(book_id)
        if current is None:
            return StoreResult.failed(FailureKind.NOT_FOUND, f"Book {book_id} not found")
        if status is not None and not is_column(status):
            return StoreResult.failed(FailureKind.VALIDATION, f"Unknown column: {status}")

        changes: Dict[str, Any] = {}
        if rating is not None:
            changes["rating"] = rating
        if comment is not None:
            changes["comment"] = comment
        if progress is not None:
            changes["progress"] = progress

        result = StoreResult.success()
        if changes:
            result = self.store.update_book(book_id, changes)
            if not result:
                return result

        if status is not None and column_key(status) != current:
            result = self.store.move_book(book_id, current, status)
        return result

    # ------------------------------------------------------------------ #
    # Settings

    def get_settings(self) -> UserSettings:
        if self.settings_repository is None:
            return UserSettings()
        try:
            raw = self.settings_repository.load_settings()
        except Exception as e:
            logger.error(f"Could not read settings, using defaults: {e}")
            return UserSettings()
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning("Stored settings are unreadable; using defaults")
                raw = None
        return UserSettings.from_values(raw)

    def save_settings(self, values: Dict[str, Any]) -> StoreResult:
        if self.settings_repository is None:
            return StoreResult.failed(FailureKind.PERSISTENCE, "No settings storage is configured")
        merged = self.get_settings().to_dict()
        merged.update(values or {})
        user_settings = UserSettings.from_values(merged)
        try:
            status = self.settings_repository.save_settings(user_settings.to_dict())
        except Exception as e:
            logger.error(f"Could not save settings: {e}")
            return StoreResult.failed(FailureKind.PERSISTENCE, "Could not save settings")
        return StoreResult.from_save(status, user_settings)

    # ------------------------------------------------------------------ #
    # Import / export

    def export_data(self) -> Dict[str, Any]:
        return {
            "books": serialize_snapshot(self.store.get_snapshot()),
            "settings": self.get_settings().to_dict(),
            "stats": self.store.get_stats().model_dump(mode="json"),
            "metadata": {
                "exportDate": datetime.now(UTC).isoformat(),
                "version": SCHEMA_VERSION,
                "source": EXPORT_SOURCE,
            },
        }

    def import_data(self, data: Any) -> StoreResult:
        """Replace the library (and settings, when present) with exported data."""
        if not isinstance(data, dict):
            return StoreResult.failed(FailureKind.VALIDATION, "Import data must be an object")
        result = StoreResult.success()
        if "books" in data:
            result = self.store.replace_snapshot(data["books"])
            if not result:
                return result
        if isinstance(data.get("settings"), dict) and self.settings_repository is not None:
            saved = self.save_settings(data["settings"])
            if not saved:
                return saved
        return result

    def reset(self) -> StoreResult:
        """Empty the library and forget the settings."""
        result = self.store.reset()
        if result and self.settings_repository is not None:
            if self.settings_repository.clear_settings() != SaveStatus.OK:
                return StoreResult.failed(FailureKind.PERSISTENCE, "Could not clear settings")
        return result
