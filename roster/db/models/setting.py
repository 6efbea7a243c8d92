import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Uuid

from roster.db.base import Base


class Setting(Base):
    """Key/value application settings editable by admins (e.g. MAX_ONSITE_DAYS)."""
    __tablename__ = "settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
