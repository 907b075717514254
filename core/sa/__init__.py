# core/sa/__init__.py
from .database import Database
from .models import Base, LibrarySnapshotRow, UserSettingsRow

__all__ = [
    'Database',
    'Base',
    'LibrarySnapshotRow',
    'UserSettingsRow',
]
