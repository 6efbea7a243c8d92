"""Database models for the roster service."""

from roster.db.models.region import Region
from roster.db.models.location import Location
from roster.db.models.position import Position
from roster.db.models.user import User
from roster.db.models.request import Request, Approval
from roster.db.models.setting import Setting
from roster.db.models.notification import Notification, NotificationType

__all__ = [
    "Region",
    "Location",
    "Position",
    "User",
    "Request",
    "Approval",
    "Setting",
    "Notification",
    "NotificationType",
]
