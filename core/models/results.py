# core/models/results.py

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any

class FailureKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    QUOTA_EXCEEDED = "quota_exceeded"
    PERSISTENCE = "persistence"
    LOOKUP_UNAVAILABLE = "lookup_unavailable"

class SaveStatus(str, Enum):
    OK = "ok"
    QUOTA_EXCEEDED = "quota_exceeded"
    FAILED = "failed"

class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSIENT_FAILURE = "transient_failure"

@dataclass(frozen=True)
class StoreResult:
    """Outcome of a public store or service operation.

    Truthy on success so callers can write ``if store.add_book(...):``.
    """
    ok: bool
    failure: Optional[FailureKind] = None
    message: str = ""
    value: Any = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def is_persistence_failure(self) -> bool:
        return self.failure in (FailureKind.PERSISTENCE, FailureKind.QUOTA_EXCEEDED)

    @property
    def quota_exceeded(self) -> bool:
        return self.failure == FailureKind.QUOTA_EXCEEDED

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "StoreResult":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failed(cls, failure: FailureKind, message: str) -> "StoreResult":
        return cls(ok=False, failure=failure, message=message)

    @classmethod
    def from_save(cls, status: SaveStatus, value: Any = None) -> "StoreResult":
        if status == SaveStatus.OK:
            return cls.success(value)
        if status == SaveStatus.QUOTA_EXCEEDED:
            return cls.failed(FailureKind.QUOTA_EXCEEDED, "Storage quota exceeded; remove some books")
        return cls.failed(FailureKind.PERSISTENCE, "Could not save the library")

@dataclass(frozen=True)
class LookupResult:
    """Outcome of fetching one book from the search capability"""
    status: LookupStatus
    record: Any = None
    message: str = ""

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @classmethod
    def hit(cls, record) -> "LookupResult":
        return cls(status=LookupStatus.FOUND, record=record)

    @classmethod
    def not_found(cls, message: str = "Book not found") -> "LookupResult":
        return cls(status=LookupStatus.NOT_FOUND, message=message)

    @classmethod
    def transient(cls, message: str) -> "LookupResult":
        return cls(status=LookupStatus.TRANSIENT_FAILURE, message=message)
