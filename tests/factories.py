"""Factory functions for creating test database records.

Each factory creates a model instance, adds it to the session, and flushes
so that database-generated fields (id, created_at, etc.) are populated.
All fields have sensible defaults but can be overridden via keyword arguments.

Usage::

    from tests.factories import create_chain_positions, create_user

    def test_something(db_session):
        positions = create_chain_positions(db_session)
        user = create_user(db_session, position=positions["SOS"])
        assert user.position.name == "SOS Jakarta"
"""

import uuid
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from roster.core.security import get_password_hash
from roster.db.models import (
    Approval,
    Location,
    Notification,
    Position,
    Region,
    Request,
    Setting,
    User,
)


_counter = 0

TEST_PASSWORD = "testpass123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


def _next_id() -> int:
    """Return a monotonically increasing integer for unique default values."""
    global _counter
    _counter += 1
    return _counter


# ---------------------------------------------------------------------------
# Master data
# ---------------------------------------------------------------------------


def create_region(session: Session, *, name: Optional[str] = None) -> Region:
    region = Region(name=name or f"Region {_next_id()}")
    session.add(region)
    session.flush()
    return region


def create_location(
    session: Session,
    *,
    name: Optional[str] = None,
    region: Optional[Region] = None,
    address: Optional[str] = None,
) -> Location:
    location = Location(
        name=name or f"Location {_next_id()}",
        region_id=region.id if region else None,
        address=address,
    )
    session.add(location)
    session.flush()
    return location


def create_position(session: Session, *, name: Optional[str] = None, level: int = 0) -> Position:
    position = Position(name=name or f"Position {_next_id()}", level=level)
    session.add(position)
    session.flush()
    return position


def create_chain_positions(session: Session) -> Dict[str, Position]:
    """Positions forming a complete approval chain, plus a plain staff position."""
    return {
        "SOS": create_position(session, name="SOS Jakarta"),
        "GSL": create_position(session, name="GSL Jakarta", level=1),
        "Koordinator": create_position(session, name="Koordinator Jawa", level=2),
        "Manager": create_position(session, name="Manager", level=3),
        "Staff": create_position(session, name="Staff"),
    }


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


def create_user(
    session: Session,
    *,
    email: Optional[str] = None,
    name: Optional[str] = None,
    role: str = "EMPLOYEE",
    position: Optional[Position] = None,
    location: Optional[Location] = None,
    region: Optional[Region] = None,
    manager: Optional[User] = None,
    is_active: bool = True,
) -> User:
    n = _next_id()
    user = User(
        email=email or f"user{n}@example.com",
        name=name or f"User {n}",
        password_hash=TEST_PASSWORD_HASH,
        role=role,
        is_active=is_active,
        position_id=position.id if position else None,
        location_id=location.id if location else None,
        region_id=region.id if region else None,
        manager_id=manager.id if manager else None,
    )
    session.add(user)
    session.flush()
    return user


# ---------------------------------------------------------------------------
# Request / Approval
# ---------------------------------------------------------------------------


def create_request(
    session: Session,
    *,
    user: User,
    type: str = "ONSITE",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    reason: str = "Site visit",
    status: str = "PENDING",
    level: int = 3,
    next_approver: Optional[Position] = None,
    created_at: Optional[datetime] = None,
) -> Request:
    start_date = start_date or date.today()
    request = Request(
        id=uuid.uuid4(),
        user_id=user.id,
        type=type,
        start_date=start_date,
        end_date=end_date or start_date + timedelta(days=2),
        reason=reason,
        status=status,
        current_approval_level=level,
        next_approver_position_id=next_approver.id if next_approver else None,
        created_at=created_at or datetime.utcnow(),
    )
    session.add(request)
    session.flush()
    return request


def create_approval(
    session: Session,
    *,
    request: Request,
    approver: Optional[User] = None,
    status: str = "APPROVED",
    level: Optional[int] = None,
    comment: str = "",
) -> Approval:
    approval = Approval(
        request_id=request.id,
        approver_id=approver.id if approver else None,
        status=status,
        approval_level=level if level is not None else request.current_approval_level,
        comment=comment,
    )
    session.add(approval)
    session.flush()
    return approval


# ---------------------------------------------------------------------------
# Settings / Notifications
# ---------------------------------------------------------------------------


def create_setting(session: Session, *, key: str, value: str, description: Optional[str] = None) -> Setting:
    setting = Setting(key=key, value=value, description=description)
    session.add(setting)
    session.flush()
    return setting


def create_notification(
    session: Session,
    *,
    user: User,
    type: str = "DURATION_WARNING",
    title: str = "Heads up",
    message: str = "Something happened",
    related_id: Optional[uuid.UUID] = None,
    is_read: bool = False,
    created_at: Optional[datetime] = None,
) -> Notification:
    notification = Notification(
        user_id=user.id,
        type=type,
        title=title,
        message=message,
        related_id=related_id,
        is_read=is_read,
        created_at=created_at or datetime.utcnow(),
    )
    session.add(notification)
    session.flush()
    return notification
