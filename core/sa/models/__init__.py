# core/sa/models/__init__.py
from .library import Base, TimestampMixin, LibrarySnapshotRow, UserSettingsRow

__all__ = [
    'Base',
    'TimestampMixin',
    'LibrarySnapshotRow',
    'UserSettingsRow',
]
