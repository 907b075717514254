# core/models/library.py

import logging
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List

from .book import BookRecord, COLUMN_IDS

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

def _empty_columns() -> Dict[str, List[BookRecord]]:
    return {column_id: [] for column_id in COLUMN_IDS}

class SnapshotMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    last_saved: Optional[str] = None
    version: str = SCHEMA_VERSION
    total_books: int = 0

class LibrarySnapshot(BaseModel):
    """The four columns plus metadata; the unit of persistence"""

    columns: Dict[str, List[BookRecord]] = Field(default_factory=_empty_columns)
    metadata: SnapshotMetadata = Field(default_factory=SnapshotMetadata)

    @classmethod
    def empty(cls) -> "LibrarySnapshot":
        return cls()

    def count(self) -> int:
        return sum(len(books) for books in self.columns.values())

    def find(self, book_id: str) -> Optional[tuple]:
        """Return (column_id, index) of the record with book_id, or None."""
        for column_id in COLUMN_IDS:
            for index, book in enumerate(self.columns.get(column_id, [])):
                if book.id == book_id:
                    return column_id, index
        return None

    def iter_books(self):
        """Yield (column_id, record) pairs in board order."""
        for column_id in COLUMN_IDS:
            for book in self.columns.get(column_id, []):
                yield column_id, book

class ColumnStats(BaseModel):
    count: int = 0
    title: str = ""

class LibraryStats(BaseModel):
    columns: Dict[str, ColumnStats] = Field(default_factory=dict)
    total_books: int = 0
    ratings: Dict[int, int] = Field(default_factory=lambda: {i: 0 for i in range(1, 6)})
    categories: Dict[str, int] = Field(default_factory=dict)
    authors: Dict[str, int] = Field(default_factory=dict)
    oldest_book: Optional[str] = None
    newest_book: Optional[str] = None

SORT_FIELDS = ("dateAdded", "dateStatusChanged", "title", "rating")

class UserSettings(BaseModel):
    """Display preferences kept next to the library"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    theme: str = "light"
    books_per_column: int = 20
    auto_save: bool = True
    notifications: bool = True
    sort_by: str = "dateAdded"
    sort_order: str = "desc"

    @field_validator("theme")
    @classmethod
    def _theme(cls, value):
        return value if value in ("light", "dark") else "light"

    @field_validator("books_per_column")
    @classmethod
    def _books_per_column(cls, value):
        return value if value > 0 else 20

    @field_validator("sort_by")
    @classmethod
    def _sort_by(cls, value):
        return value if value in SORT_FIELDS else "dateAdded"

    @field_validator("sort_order")
    @classmethod
    def _sort_order(cls, value):
        return value if value in ("asc", "desc") else "desc"

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_values(cls, values) -> "UserSettings":
        """Build settings from untrusted values, keeping defaults for anything unusable."""
        merged = cls().to_dict()
        if not isinstance(values, dict):
            return cls.model_validate(merged)
        aliases = {name: field.alias or name for name, field in cls.model_fields.items()}
        for key, value in values.items():
            candidate = {**merged, aliases.get(key, key): value}
            try:
                merged = cls.model_validate(candidate).to_dict()
            except ValidationError:
                logger.warning(f"Ignoring invalid setting {key}={value!r}")
        return cls.model_validate(merged)
