"""Roster request and approval decision models.

A request moves through the approval chain one level at a time; every
decision appends one ``Approval`` row.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, DateTime, Date, Float, Integer, ForeignKey, Text, Uuid, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from roster.db.base import Base

DECISION_PER_LEVEL_CONSTRAINT = "uq_approvals_request_level"


class Request(Base):
    """
    An onsite/offsite/leave request submitted by an employee.
    
    ``version`` is an optimistic lock: concurrent decisions on the same row
    cannot both commit.
    """
    __tablename__ = "requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # Request details
    type = Column(String(20), nullable=False)  # ONSITE, OFFSITE, LEAVE
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    justification = Column(Text, nullable=True)
    request_lat = Column(Float, nullable=True)
    request_long = Column(Float, nullable=True)
    
    # Workflow state
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    current_approval_level = Column(Integer, nullable=False, default=0)
    next_approver_position_id = Column(
        Uuid(as_uuid=True), ForeignKey("positions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    version = Column(Integer, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="requests", foreign_keys=[user_id])
    next_approver_position = relationship("Position")
    approvals = relationship(
        "Approval",
        back_populates="request",
        order_by="Approval.approval_level",
        cascade="all, delete-orphan",
    )
    
    __mapper_args__ = {"version_id_col": version}
    
    def __repr__(self) -> str:
        return f"<Request {self.type} {self.start_date}..{self.end_date} [{self.status}@{self.current_approval_level}]>"


class Approval(Base):
    """
    One approval decision on a request.
    
    Append-only. ``approval_level`` is the level the request was at when the
    decision was made; at most one decision is recorded per level.
    """
    __tablename__ = "approvals"
    __table_args__ = (
        UniqueConstraint("request_id", "approval_level", name=DECISION_PER_LEVEL_CONSTRAINT),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(Uuid(as_uuid=True), ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    
    status = Column(String(20), nullable=False)  # APPROVED, REJECTED
    comment = Column(Text, nullable=True)
    approval_level = Column(Integer, nullable=False)
    approval_lat = Column(Float, nullable=True)
    approval_long = Column(Float, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    
    # Relationships
    request = relationship("Request", back_populates="approvals")
    approver = relationship("User")
    
    def __repr__(self) -> str:
        return f"<Approval L{self.approval_level} {self.status}>"
