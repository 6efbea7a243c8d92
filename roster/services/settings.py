"""Access to the admin-editable key/value settings."""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from roster.db.models import Setting

logger = logging.getLogger(__name__)

MAX_ONSITE_DAYS = "MAX_ONSITE_DAYS"
MAX_OFFSITE_DAYS = "MAX_OFFSITE_DAYS"

DEFAULT_SETTINGS = {
    MAX_ONSITE_DAYS: ("14", "Maximum consecutive days for an ONSITE assignment"),
    MAX_OFFSITE_DAYS: ("14", "Maximum consecutive days for an OFFSITE assignment"),
}


def get_setting(db: Session, key: str) -> Optional[Setting]:
    return db.query(Setting).filter(Setting.key == key).first()


def get_int_setting(db: Session, key: str, default: int = 0) -> int:
    """Integer value of ``key``; ``default`` when unset or not a number."""
    setting = get_setting(db, key)
    if setting is None:
        return default
    try:
        return int(setting.value)
    except (TypeError, ValueError):
        logger.warning("Setting %s has non-integer value %r, using %d", key, setting.value, default)
        return default


def list_settings(db: Session) -> Dict[str, Setting]:
    return {s.key: s for s in db.query(Setting).order_by(Setting.key.asc()).all()}


def upsert_settings(db: Session, values: Dict[str, object]) -> Dict[str, Setting]:
    """Create or update each key; the caller commits."""
    updated = {}
    for key, value in values.items():
        setting = get_setting(db, key)
        if setting is None:
            description = DEFAULT_SETTINGS.get(key, (None, None))[1]
            setting = Setting(key=key, value=str(value), description=description)
            db.add(setting)
        else:
            setting.value = str(value)
        updated[key] = setting
    return updated
