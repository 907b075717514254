# core/store/__init__.py
from .repository import SnapshotRepository, SettingsRepository
from .library_store import LibraryStore

__all__ = ['SnapshotRepository', 'SettingsRepository', 'LibraryStore']
