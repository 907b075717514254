# core/store/repository.py

from typing import Any, Optional, Protocol, runtime_checkable

from core.models.library import LibrarySnapshot
from core.models.results import SaveStatus

@runtime_checkable
class SnapshotRepository(Protocol):
    """Durable storage for the serialized library.

    load() returns whatever was last stored (JSON text, bytes or a decoded
    mapping), or None when nothing was ever saved. The store runs it through
    sanitize_snapshot, so a repository never has to validate.
    """

    def load(self) -> Optional[Any]:
        ...

    def save(self, snapshot: LibrarySnapshot) -> SaveStatus:
        ...

@runtime_checkable
class SettingsRepository(Protocol):
    def load_settings(self) -> Optional[Any]:
        ...

    def save_settings(self, values: dict) -> SaveStatus:
        ...

    def clear_settings(self) -> SaveStatus:
        ...
