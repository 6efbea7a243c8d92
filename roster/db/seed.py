"""Database seeding for the roster service.

Creates the approval chain positions, default settings and the initial
admin account. Every step is idempotent.
"""

import logging
from typing import Dict

from sqlalchemy.orm import Session

from roster.core.config import get_settings
from roster.core.rbac.roles import UserRole
from roster.core.security import get_password_hash
from roster.db.models import Position, Setting, User
from roster.services.settings import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

# name -> (description, rank)
DEFAULT_POSITIONS = {
    "SOS": ("Site operations staff", 0),
    "GSL": ("Group site lead; first approver for SOS requests", 1),
    "Koordinator": ("Regional coordinator; second approval level", 2),
    "Manager": ("Final approval level", 3),
    "Staff": ("General staff; requests go straight to the Manager", 0),
}


def seed_positions(db: Session) -> Dict[str, Position]:
    """
    Create the default positions.

    Positions that already exist are returned unchanged.
    """
    positions = {}
    for name, (description, level) in DEFAULT_POSITIONS.items():
        position = db.query(Position).filter(Position.name == name).first()
        if position is None:
            position = Position(name=name, description=description, level=level)
            db.add(position)
        positions[name] = position
    db.flush()
    return positions


def seed_settings(db: Session) -> None:
    for key, (value, description) in DEFAULT_SETTINGS.items():
        if db.query(Setting).filter(Setting.key == key).first() is None:
            db.add(Setting(key=key, value=value, description=description))
    db.flush()


def seed_admin(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            name="Administrator",
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        db.add(user)
        db.flush()
        logger.info("Created admin account %s", email)
    return user


def seed_database(db: Session) -> None:
    """Seed positions, settings and the admin account, then commit."""
    settings = get_settings()
    seed_positions(db)
    seed_settings(db)
    seed_admin(db, settings.admin_email, settings.admin_password)
    db.commit()


if __name__ == "__main__":
    from roster.core.logging import configure_logging
    from roster.db.session import SessionLocal, init_db

    configure_logging(get_settings())
    init_db()
    session = SessionLocal()
    try:
        seed_database(session)
    finally:
        session.close()
