# core/validation.py

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Dict
from pydantic import ValidationError

from core.models.book import BookRecord, COLUMN_IDS
from core.models.library import LibrarySnapshot, SnapshotMetadata, SCHEMA_VERSION

logger = logging.getLogger(__name__)

METADATA_KEY = "_metadata"

def is_valid_record(candidate: Any) -> bool:
    """A record needs a non-empty string id and title; nothing else is checked."""
    if isinstance(candidate, BookRecord):
        candidate = {"id": candidate.id, "title": candidate.title}
    if not isinstance(candidate, Mapping):
        return False
    book_id = candidate.get("id")
    title = candidate.get("title")
    return (
        isinstance(book_id, str) and len(book_id) > 0
        and isinstance(title, str) and len(title) > 0
    )

def _decode(raw: Any) -> Optional[Mapping]:
    if isinstance(raw, LibrarySnapshot):
        return serialize_snapshot(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    return raw if isinstance(raw, Mapping) else None

def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))

def _read_metadata(raw: Any) -> SnapshotMetadata:
    metadata = SnapshotMetadata()
    if not isinstance(raw, Mapping):
        return metadata
    last_saved = raw.get("lastSaved")
    version = raw.get("version")
    if isinstance(last_saved, str):
        metadata.last_saved = last_saved
    if isinstance(version, str) and version:
        metadata.version = version
    return metadata

def sanitize_snapshot(raw: Any) -> LibrarySnapshot:
    """Turn whatever was stored into a structurally sound snapshot.

    Accepts a mapping, JSON text or bytes. Column values that are not
    sequences become empty, entries failing is_valid_record are dropped, a
    record seen earlier in board order wins over later duplicates, and each
    record's status is set to the column holding it. Never raises; an
    unreadable payload yields the empty default snapshot.
    """
    data = _decode(raw)
    if data is None:
        if raw is not None:
            logger.warning("Stored library is unreadable; starting from an empty library")
        return LibrarySnapshot.empty()

    snapshot = LibrarySnapshot.empty()
    seen = set()
    dropped = 0

    for column_id in COLUMN_IDS:
        entries = data.get(column_id)
        if entries is None:
            continue
        if not _is_sequence(entries):
            logger.warning(f"Column {column_id} is not a list; resetting it to empty")
            continue
        for entry in entries:
            if isinstance(entry, BookRecord):
                entry = entry.to_dict()
            if not is_valid_record(entry) or entry["id"] in seen:
                dropped += 1
                continue
            try:
                record = BookRecord.model_validate({**entry, "status": column_id})
            except ValidationError as e:
                logger.debug(f"Dropping unreadable record {entry.get('id')!r}: {e}")
                dropped += 1
                continue
            seen.add(record.id)
            snapshot.columns[column_id].append(record)

    if dropped:
        logger.warning(f"Discarded {dropped} invalid or duplicate book entries while loading")

    snapshot.metadata = _read_metadata(data.get(METADATA_KEY))
    snapshot.metadata.total_books = snapshot.count()
    return snapshot

def serialize_snapshot(snapshot: LibrarySnapshot, saved_at: Optional[str] = None) -> Dict[str, Any]:
    """Persisted layout: one key per column plus the _metadata block."""
    data: Dict[str, Any] = {
        column_id: [book.to_dict() for book in snapshot.columns.get(column_id, [])]
        for column_id in COLUMN_IDS
    }
    data[METADATA_KEY] = {
        "lastSaved": saved_at if saved_at is not None else snapshot.metadata.last_saved,
        "version": snapshot.metadata.version or SCHEMA_VERSION,
        "totalBooks": snapshot.count(),
    }
    return data

_IMMUTABLE_FIELDS = ("id", "status")

def validate_changes(changes: Any) -> Optional[str]:
    """Check a partial update. Returns an error message, or None when acceptable."""
    if not isinstance(changes, Mapping) or not changes:
        return "No changes given"
    for key in _IMMUTABLE_FIELDS:
        if key in changes:
            return f"'{key}' cannot be changed by an update"
    if "title" in changes:
        title = changes["title"]
        if not isinstance(title, str) or not title:
            return "Title must be a non-empty string"
    if "rating" in changes:
        rating = changes["rating"]
        if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= 5:
            return "Rating must be an integer between 0 and 5"
    if "progress" in changes:
        progress = changes["progress"]
        if isinstance(progress, bool) or not isinstance(progress, int) or not 0 <= progress <= 100:
            return "Progress must be an integer between 0 and 100"
    if "authors" in changes:
        authors = changes["authors"]
        if not isinstance(authors, list) or not all(isinstance(a, str) for a in authors):
            return "Authors must be a list of strings"
    return None
