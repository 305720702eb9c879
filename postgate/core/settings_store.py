"""Allow-listed key/value settings.

Recognised keys are the members of ``SettingKey``. Typed accessors take a
``SettingKey``; the string-keyed entry points used by the API resolve the
raw key first and reject (single write) or skip (bulk write) anything
outside the allow-list.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from postgate.core.exceptions import NotFoundError, ValidationError
from postgate.db.models.setting import Setting

logger = logging.getLogger(__name__)


class SettingKey(str, Enum):
    """Setting keys accepted for writes."""

    DISCORD_WEBHOOK_URL = "discord_webhook_url"  # Notification destination
    N8N_BASE_URL = "n8n_base_url"                # Reference base URL of the workflow tool

    @classmethod
    def parse(cls, raw: Any) -> Optional["SettingKey"]:
        """Resolve a raw key, or None if it is not allow-listed."""
        try:
            return cls(raw)
        except ValueError:
            return None


class SettingsStore:
    """Reads and upserts rows of the ``settings`` table."""

    def __init__(self, db: Session):
        self.db = db

    def all(self) -> Dict[str, str]:
        """Every stored setting as a key -> value map."""
        return {s.key: s.value for s in self.db.query(Setting).order_by(Setting.key).all()}

    def get(self, key: SettingKey) -> Optional[str]:
        setting = self._find(key.value)
        return setting.value if setting else None

    def get_entry(self, raw_key: str) -> Setting:
        setting = self._find(raw_key)
        if not setting:
            raise NotFoundError("Setting not found")
        return setting

    def set(self, key: SettingKey, value: str) -> Setting:
        setting = self._upsert(key, value)
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def update(self, raw_key: str, value: Any) -> Setting:
        """Single-key write from the API."""
        key = SettingKey.parse(raw_key)
        if key is None:
            raise ValidationError("Invalid setting key")
        if not isinstance(value, str):
            raise ValidationError("Value must be a string")
        return self.set(key, value)

    def bulk_update(self, values: Any) -> Dict[str, str]:
        """
        Write every allow-listed string value in ``values``.

        Unknown keys and non-string values are skipped.

        Returns:
            The full settings map after the update
        """
        if not isinstance(values, dict):
            raise ValidationError("Settings must be an object")

        for raw_key, value in values.items():
            key = SettingKey.parse(raw_key)
            if key is None or not isinstance(value, str):
                logger.debug(f"Skipping setting {raw_key!r}: not an allow-listed string value")
                continue
            self._upsert(key, value)

        self.db.commit()
        return self.all()

    def _find(self, raw_key: str) -> Optional[Setting]:
        return self.db.query(Setting).filter(Setting.key == raw_key).first()

    def _upsert(self, key: SettingKey, value: str) -> Setting:
        setting = self._find(key.value)
        if setting:
            setting.value = value
            setting.updated_at = datetime.utcnow()
        else:
            setting = Setting(key=key.value, value=value, updated_at=datetime.utcnow())
            self.db.add(setting)
        self.db.flush()
        return setting
