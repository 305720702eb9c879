"""Runtime-editable key/value settings."""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text

from postgate.db.base import Base


class Setting(Base):
    """A single allow-listed setting, upserted by key."""
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Setting {self.key}>"
