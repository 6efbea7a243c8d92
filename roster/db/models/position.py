"""Position reference data.

Positions are matched into the approval chain by name when the chain is
built (see ``roster.core.approval.chain``); ``level`` is an informational
rank only.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Integer, Uuid
from sqlalchemy.orm import relationship

from roster.db.base import Base


class Position(Base):
    __tablename__ = "positions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    level = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    users = relationship("User", back_populates="position")

    def __repr__(self) -> str:
        return f"<Position {self.name}>"
