# core/sa/repositories/__init__.py
from .snapshot import SqlSnapshotRepository
from .settings import SqlSettingsRepository

__all__ = ['SqlSnapshotRepository', 'SqlSettingsRepository']
