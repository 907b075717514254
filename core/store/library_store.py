# core/store/library_store.py

import logging
from collections import Counter
from datetime import datetime, UTC
from typing import Any, Callable, Dict, Iterable, List, Optional
from pydantic import ValidationError

from core.events import (
    EventBus, BookAdded, BookMoved, BookUpdated, BookDeleted,
    LibraryReplaced, StorageQuotaExceeded,
)
from core.models.book import BookRecord, SearchHit, COLUMN_IDS, COLUMN_TITLES, is_column, column_key
from core.models.library import LibrarySnapshot, LibraryStats, ColumnStats
from core.models.results import StoreResult, FailureKind, SaveStatus
from core.store.repository import SnapshotRepository
from core.validation import is_valid_record, sanitize_snapshot, validate_changes

logger = logging.getLogger(__name__)

# Field name -> persisted key, so updates may use either spelling
_ALIASES = {name: field.alias or name for name, field in BookRecord.model_fields.items()}

def _utc_now() -> datetime:
    return datetime.now(UTC)

def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed

class LibraryStore:
    """Owns the four columns and persists every mutation as a full snapshot.

    Mutations work on a deep copy of the committed snapshot. The copy only
    replaces the committed state after the repository reports a successful
    save, so a failed write leaves memory matching what is durable.

    Callers must serialize calls; the store is not reentrant.
    """

    def __init__(self, repository: SnapshotRepository, events: Optional[EventBus] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.repository = repository
        self.events = events or EventBus()
        self._clock = clock or _utc_now
        self._snapshot = self._load()

    # ------------------------------------------------------------------ #
    # Loading

    def _load(self) -> LibrarySnapshot:
        try:
            raw = self.repository.load()
        except Exception as e:
            logger.error(f"Could not read the stored library, starting empty: {e}")
            return LibrarySnapshot.empty()
        return sanitize_snapshot(raw)

    def reload(self) -> LibrarySnapshot:
        """Re-read the durable snapshot, discarding nothing that was saved."""
        self._snapshot = self._load()
        logger.debug(f"Reloaded library with {self._snapshot.count()} books")
        return self.get_snapshot()

    # ------------------------------------------------------------------ #
    # Reads

    def _now(self) -> str:
        return self._clock().isoformat()

    def get_snapshot(self) -> LibrarySnapshot:
        return self._snapshot.model_copy(deep=True)

    def get_book(self, book_id: str) -> Optional[SearchHit]:
        location = self._snapshot.find(book_id)
        if location is None:
            return None
        column_id, index = location
        record = self._snapshot.columns[column_id][index]
        return SearchHit(column=column_id, record=record.model_copy(deep=True))

    def column_of(self, book_id: str) -> Optional[str]:
        location = self._snapshot.find(book_id)
        return location[0] if location else None

    def contains(self, book_id: str) -> bool:
        return self._snapshot.find(book_id) is not None

    def list_column(self, column_id) -> List[BookRecord]:
        column_id = column_key(column_id)
        return [book.model_copy(deep=True) for book in self._snapshot.columns.get(column_id, [])]

    def total_books(self) -> int:
        return self._snapshot.count()

    # ------------------------------------------------------------------ #
    # Persistence

    def _commit(self, working: LibrarySnapshot, value: Any = None) -> StoreResult:
        saved_at = self._now()
        working.metadata.last_saved = saved_at
        working.metadata.total_books = working.count()
        try:
            status = self.repository.save(working)
        except Exception as e:
            logger.error(f"Saving the library failed: {e}")
            status = SaveStatus.FAILED

        result = StoreResult.from_save(status, value)
        if result.ok:
            self._snapshot = working
        elif result.quota_exceeded:
            logger.warning("Library save refused: storage quota exceeded")
            self.events.publish(StorageQuotaExceeded(message=result.message))
        else:
            logger.error("Library save failed; keeping the last saved state")
        return result

    # ------------------------------------------------------------------ #
    # Mutations

    def add_book(self, column_id, record) -> StoreResult:
        """Append a new record to column_id. Ids are unique across the whole library."""
        if not is_column(column_id):
            return StoreResult.failed(FailureKind.VALIDATION, f"Unknown column: {column_id}")
        column_id = column_key(column_id)

        data = record.to_dict() if isinstance(record, BookRecord) else record
        if not is_valid_record(data):
            return StoreResult.failed(FailureKind.VALIDATION, "A book needs a non-empty id and title")
        if self.contains(data["id"]):
            return StoreResult.failed(FailureKind.VALIDATION, f"Book {data['id']} is already in the library")

        now = self._now()
        try:
            book = BookRecord.model_validate({**data, "status": column_id})
        except ValidationError as e:
            return StoreResult.failed(FailureKind.VALIDATION, f"Invalid book record: {e}")
        if not book.date_added:
            book.date_added = now
        if not book.date_status_changed:
            book.date_status_changed = now

        working = self.get_snapshot()
        working.columns[column_id].append(book)
        result = self._commit(working, book)
        if result.ok:
            logger.info(f"Added {book.id} to {column_id}")
            self.events.publish(BookAdded(book_id=book.id, column=column_id, record=book))
        return result

    def move_book(self, book_id: str, from_column, to_column) -> StoreResult:
        """Move a record between columns, appending it to the destination."""
        if not is_column(from_column) or not is_column(to_column):
            return StoreResult.failed(FailureKind.VALIDATION, f"Unknown column: {from_column} -> {to_column}")
        from_column, to_column = column_key(from_column), column_key(to_column)
        if from_column == to_column:
            return StoreResult.failed(FailureKind.VALIDATION, "Source and destination columns are the same")

        working = self.get_snapshot()
        source = working.columns[from_column]
        index = next((i for i, book in enumerate(source) if book.id == book_id), None)
        if index is None:
            return StoreResult.failed(FailureKind.NOT_FOUND, f"Book {book_id} is not in {from_column}")

        destination = working.columns[to_column]
        if any(book.id == book_id for book in destination):
            logger.warning(f"Book {book_id} found in both {from_column} and {to_column}; refusing move")
            return StoreResult.failed(FailureKind.VALIDATION, f"Book {book_id} is already in {to_column}")

        book = source.pop(index)
        book.status = to_column
        book.date_status_changed = self._now()
        destination.append(book)

        result = self._commit(working, book)
        if result.ok:
            logger.info(f"Moved {book_id} from {from_column} to {to_column}")
            self.events.publish(BookMoved(
                book_id=book_id, from_column=from_column, to_column=to_column, record=book
            ))
        return result

    def update_book(self, book_id: str, changes: Dict[str, Any]) -> StoreResult:
        """Merge changes into the record wherever it lives and stamp dateModified."""
        error = validate_changes(changes)
        if error:
            return StoreResult.failed(FailureKind.VALIDATION, error)

        working = self.get_snapshot()
        location = working.find(book_id)
        if location is None:
            return StoreResult.failed(FailureKind.NOT_FOUND, f"Book {book_id} not found")
        column_id, index = location

        merged = working.columns[column_id][index].to_dict()
        for key, value in changes.items():
            merged[_ALIASES.get(key, key)] = value
        merged["dateModified"] = self._now()
        try:
            book = BookRecord.model_validate(merged)
        except ValidationError as e:
            return StoreResult.failed(FailureKind.VALIDATION, f"Invalid update: {e}")
        working.columns[column_id][index] = book

        result = self._commit(working, book)
        if result.ok:
            self.events.publish(BookUpdated(
                book_id=book_id, column=column_id, changes=dict(changes), record=book
            ))
        return result

    def delete_book(self, book_id: str, column_id=None) -> StoreResult:
        """Delete from column_id if given, otherwise from whichever column holds the book."""
        working = self.get_snapshot()
        if column_id is not None:
            if not is_column(column_id):
                return StoreResult.failed(FailureKind.VALIDATION, f"Unknown column: {column_id}")
            columns: Iterable[str] = [column_key(column_id)]
        else:
            columns = COLUMN_IDS

        removed = None
        for candidate in columns:
            books = working.columns[candidate]
            index = next((i for i, book in enumerate(books) if book.id == book_id), None)
            if index is not None:
                removed = (candidate, books.pop(index))
                break

        if removed is None:
            return StoreResult.failed(FailureKind.NOT_FOUND, f"Book {book_id} not found")

        result = self._commit(working, removed[1])
        if result.ok:
            logger.info(f"Deleted {book_id} from {removed[0]}")
            self.events.publish(BookDeleted(book_id=book_id, column=removed[0], record=removed[1]))
        return result

    def replace_snapshot(self, raw: Any) -> StoreResult:
        """Sanitize raw snapshot data and persist it as the whole library."""
        working = sanitize_snapshot(raw)
        result = self._commit(working, working.count())
        if result.ok:
            self.events.publish(LibraryReplaced(total_books=working.count()))
        return result

    def reset(self) -> StoreResult:
        """Empty all four columns."""
        return self.replace_snapshot(None)

    # ------------------------------------------------------------------ #
    # Queries

    def search_books(self, query: str, columns: Optional[Iterable] = None) -> List[SearchHit]:
        """Records whose searchable text contains every whitespace token of query.

        Matching is case-insensitive substring matching, so an empty query
        returns every record.
        """
        terms = (query or "").lower().split()
        wanted = [column_key(c) for c in columns] if columns else list(COLUMN_IDS)
        results = []
        for column_id in wanted:
            for book in self._snapshot.columns.get(column_id, []):
                text = book.searchable_text()
                if all(term in text for term in terms):
                    results.append(SearchHit(column=column_id, record=book.model_copy(deep=True)))
        return results

    def get_stats(self) -> LibraryStats:
        stats = LibraryStats()
        categories: Counter = Counter()
        authors: Counter = Counter()
        oldest = newest = None

        for column_id in COLUMN_IDS:
            books = self._snapshot.columns.get(column_id, [])
            stats.columns[column_id] = ColumnStats(count=len(books), title=COLUMN_TITLES[column_id])
            stats.total_books += len(books)

        for _, book in self._snapshot.iter_books():
            if book.rating in stats.ratings:
                stats.ratings[book.rating] += 1
            categories.update(book.categories)
            authors.update(book.authors)

            added = _parse_date(book.date_added)
            if added is None:
                continue
            if oldest is None or added < oldest[0]:
                oldest = (added, book.date_added)
            if newest is None or added > newest[0]:
                newest = (added, book.date_added)

        stats.categories = dict(categories)
        stats.authors = dict(authors)
        stats.oldest_book = oldest[1] if oldest else None
        stats.newest_book = newest[1] if newest else None
        return stats
