# core/models/book.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any
from enum import Enum

UNKNOWN_AUTHOR = "Unknown author"

class ColumnId(str, Enum):
    TO_READ = "to-read"
    READING = "reading"
    READ = "read"
    FAVORITES = "favorites"

# Board order
COLUMN_IDS = tuple(column.value for column in ColumnId)

COLUMN_TITLES = {
    "to-read": "To read",
    "reading": "Reading",
    "read": "Read",
    "favorites": "Favorites",
}

def is_column(column_id: Any) -> bool:
    """Return True if column_id names one of the four board columns."""
    if isinstance(column_id, ColumnId):
        return True
    return isinstance(column_id, str) and column_id in COLUMN_IDS

def column_key(column_id: Any) -> str:
    """Normalize a ColumnId or string to the plain string key used in snapshots."""
    if isinstance(column_id, ColumnId):
        return column_id.value
    return column_id

def _clamp_int(value: Any, low: int, high: int) -> int:
    if isinstance(value, bool):
        return low
    try:
        number = int(value)
    except (TypeError, ValueError):
        return low
    return max(low, min(high, number))

class BookRecord(BaseModel):
    """One tracked book.

    Descriptive metadata is opaque to the store; any key not declared here is
    kept as an extra field so it survives save/load untouched.
    """
    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    title: str
    authors: List[str] = Field(default_factory=lambda: [UNKNOWN_AUTHOR])
    status: Optional[str] = None
    rating: int = 0
    comment: str = ""
    progress: int = 0
    date_added: Optional[str] = None
    date_status_changed: Optional[str] = None
    date_modified: Optional[str] = None

    # Descriptive metadata
    subtitle: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    cover: Optional[str] = None
    page_count: Optional[int] = None
    categories: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    isbn: Optional[str] = None
    source: Optional[str] = None

    @field_validator("authors", mode="before")
    @classmethod
    def _default_authors(cls, value):
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return [UNKNOWN_AUTHOR]
        authors = [str(author) for author in value if author]
        return authors or [UNKNOWN_AUTHOR]

    @field_validator("categories", mode="before")
    @classmethod
    def _list_of_categories(cls, value):
        if isinstance(value, str):
            return [value] if value else []
        if not isinstance(value, (list, tuple)):
            return []
        return [str(category) for category in value if category]

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value):
        return _clamp_int(value, 0, 5)

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value):
        return _clamp_int(value, 0, 100)

    @field_validator("comment", mode="before")
    @classmethod
    def _comment_text(cls, value):
        return "" if value is None else str(value)

    @field_validator(
        "status", "date_added", "date_status_changed", "date_modified",
        "subtitle", "publisher", "published_date", "description",
        "thumbnail", "cover", "language", "isbn", "source",
        mode="before",
    )
    @classmethod
    def _optional_text(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("page_count", mode="before")
    @classmethod
    def _page_count(cls, value):
        if value is None or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        """Serialize with the persisted camelCase keys."""
        return self.model_dump(by_alias=True)

    def searchable_text(self) -> str:
        """Title, authors, description and categories, lower-cased."""
        parts = [self.title, *self.authors, self.description or "", *self.categories]
        return " ".join(parts).lower()

class SearchHit(BaseModel):
    """A library record tagged with the column that currently holds it"""
    column: str
    record: BookRecord

    @property
    def book_id(self) -> str:
        return self.record.id
