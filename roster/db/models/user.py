import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from roster.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))
    role = Column(String(20), nullable=False, default="EMPLOYEE", index=True)
    is_active = Column(Boolean, default=True)

    position_id = Column(Uuid(as_uuid=True), ForeignKey("positions.id"), nullable=True, index=True)
    location_id = Column(Uuid(as_uuid=True), ForeignKey("locations.id"), nullable=True, index=True)
    region_id = Column(Uuid(as_uuid=True), ForeignKey("regions.id"), nullable=True, index=True)
    manager_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    position = relationship("Position", back_populates="users")
    location = relationship("Location", back_populates="users")
    region = relationship("Region", back_populates="users")
    manager = relationship("User", remote_side=[id])
    requests = relationship("Request", back_populates="user", foreign_keys="Request.user_id", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User {self.email} [{self.role}]>"
