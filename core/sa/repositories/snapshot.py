# core/sa/repositories/snapshot.py

import json
import logging
from typing import Optional
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from core.config import settings
from core.models.library import LibrarySnapshot
from core.models.results import SaveStatus
from core.sa.database import Database
from core.sa.models import LibrarySnapshotRow
from core.validation import serialize_snapshot

logger = logging.getLogger(__name__)

def is_storage_full(error: OperationalError) -> bool:
    """SQLite and PostgreSQL both report a full disk through OperationalError."""
    message = str(error.orig if error.orig is not None else error).lower()
    return "full" in message or "no space" in message or "quota" in message

class SqlSnapshotRepository:
    """Stores the serialized library as one JSON document per key."""

    def __init__(self, database: Database, key: Optional[str] = None, max_bytes: Optional[int] = None):
        """Initialize the repository.

        Args:
            database: Database whose schema has been created with init_db()
            key: Which stored library to use (default: LIBRARY_KEY setting)
            max_bytes: Largest payload accepted before reporting QUOTA_EXCEEDED
                       (default: STORAGE_QUOTA_BYTES setting)
        """
        self.database = database
        self.key = key or settings.library_key
        self.max_bytes = max_bytes if max_bytes is not None else settings.storage_quota_bytes

    def load(self) -> Optional[str]:
        """Return the stored JSON text, or None if this library was never saved."""
        with self.database.get_db() as session:
            row = session.get(LibrarySnapshotRow, self.key)
            return row.payload if row else None

    def save(self, snapshot: LibrarySnapshot) -> SaveStatus:
        data = serialize_snapshot(snapshot)
        payload = json.dumps(data, ensure_ascii=False)
        size = len(payload.encode("utf-8"))
        if self.max_bytes and size > self.max_bytes:
            logger.warning(f"Library payload of {size} bytes exceeds quota of {self.max_bytes} bytes")
            return SaveStatus.QUOTA_EXCEEDED

        metadata = data["_metadata"]
        try:
            with self.database.get_db() as session:
                row = session.get(LibrarySnapshotRow, self.key)
                if row is None:
                    row = LibrarySnapshotRow(key=self.key)
                    session.add(row)
                row.payload = payload
                row.version = metadata["version"]
                row.total_books = metadata["totalBooks"]
        except OperationalError as e:
            if is_storage_full(e):
                logger.warning(f"Database is full: {e}")
                return SaveStatus.QUOTA_EXCEEDED
            logger.error(f"Could not save library {self.key}: {e}")
            return SaveStatus.FAILED
        except SQLAlchemyError as e:
            logger.error(f"Could not save library {self.key}: {e}")
            return SaveStatus.FAILED

        logger.debug(f"Saved library {self.key} ({metadata['totalBooks']} books, {size} bytes)")
        return SaveStatus.OK
