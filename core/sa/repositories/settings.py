# core/sa/repositories/settings.py

import json
import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.models.results import SaveStatus
from core.sa.database import Database
from core.sa.models import UserSettingsRow

logger = logging.getLogger(__name__)

class SqlSettingsRepository:
    """Repository for the user's display settings."""

    def __init__(self, database: Database, key: Optional[str] = None):
        self.database = database
        self.key = key or settings.library_key

    def load_settings(self) -> Optional[str]:
        with self.database.get_db() as session:
            row = session.get(UserSettingsRow, self.key)
            return row.payload if row else None

    def save_settings(self, values: dict) -> SaveStatus:
        try:
            with self.database.get_db() as session:
                row = session.get(UserSettingsRow, self.key)
                if row is None:
                    row = UserSettingsRow(key=self.key)
                    session.add(row)
                row.payload = json.dumps(values)
        except SQLAlchemyError as e:
            logger.error(f"Could not save settings {self.key}: {e}")
            return SaveStatus.FAILED
        return SaveStatus.OK

    def clear_settings(self) -> SaveStatus:
        try:
            with self.database.get_db() as session:
                session.query(UserSettingsRow).filter(UserSettingsRow.key == self.key).delete()
        except SQLAlchemyError as e:
            logger.error(f"Could not clear settings {self.key}: {e}")
            return SaveStatus.FAILED
        return SaveStatus.OK
