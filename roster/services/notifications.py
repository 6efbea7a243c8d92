"""Duration-limit notifications.

Handles:
- The creation-time check of a new request against its type's limit
- The periodic scan of running (approved and started) requests
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from jinja2 import Template
from sqlalchemy import or_
from sqlalchemy.orm import Session

from roster.core.approval.states import RequestStatus, RequestType
from roster.core.config import get_settings
from roster.core.rbac.roles import UserRole
from roster.db.models import Notification, NotificationType, Position, Request, User
from roster.services.settings import MAX_OFFSITE_DAYS, MAX_ONSITE_DAYS, get_int_setting

logger = logging.getLogger(__name__)

DUPLICATE_WINDOW = timedelta(hours=24)


# Notification templates
TEMPLATES = {
    "request_over_limit": {
        "title": "Request duration exceeds the limit",
        "message": (
            "{{ type }} request by {{ requester }} lasts {{ days }} days, "
            "over the limit of {{ limit }} days."
        ),
    },
    NotificationType.DURATION_EXCEEDED: {
        "title": "Duration limit exceeded: {{ requester }}",
        "message": (
            "{{ requester }} ({{ type }}) is past the {{ limit }} day limit. "
            "Current duration: {{ days }} days."
        ),
    },
    NotificationType.DURATION_WARNING: {
        "title": "Duration limit approaching: {{ requester }}",
        "message": (
            "{{ requester }} ({{ type }}) is close to the duration limit. "
            "{{ remaining }} day{{ '' if remaining == 1 else 's' }} remaining."
        ),
    },
}


def render(template_key, **context) -> Dict[str, str]:
    """Render the title and message of a notification template."""
    template = TEMPLATES[template_key]
    return {
        "title": Template(template["title"]).render(**context),
        "message": Template(template["message"]).render(**context),
    }


def duration_days(start: date, end: date) -> int:
    """Whole days from start to end, both inclusive."""
    return (end - start).days + 1


def limit_key_for(request_type: str) -> str:
    return MAX_ONSITE_DAYS if request_type == RequestType.ONSITE.value else MAX_OFFSITE_DAYS


@dataclass
class ScanResult:
    checked: int = 0
    notifications_created: int = 0

    def to_dict(self) -> dict:
        return {
            "success": True,
            "checked": self.checked,
            "notificationsCreated": self.notifications_created,
        }


class NotificationService:
    """Creates duration notifications; the caller owns the transaction."""

    def __init__(self, db: Session):
        self.db = db

    def check_request_duration(self, request: Request, requester: User) -> Optional[Notification]:
        """
        Notify the requester's manager when a new request is longer than allowed.

        A limit of 0, or no setting at all, means unlimited.
        """
        limit = get_int_setting(self.db, limit_key_for(request.type), default=0)
        days = duration_days(request.start_date, request.end_date)

        if limit <= 0 or days <= limit:
            return None
        if requester.manager_id is None:
            logger.info("Request %s exceeds %d days but %s has no manager", request.id, limit, requester.email)
            return None

        notification = Notification(
            user_id=requester.manager_id,
            type=NotificationType.DURATION_EXCEEDED.value,
            related_id=request.id,
            is_read=False,
            created_at=datetime.utcnow(),
            **render(
                "request_over_limit",
                type=request.type,
                requester=requester.name or requester.email,
                days=days,
                limit=limit,
            ),
        )
        self.db.add(notification)
        logger.info("Duration notification for request %s sent to manager %s", request.id, requester.manager_id)
        return notification

    def _recipients(self) -> List[User]:
        """Active admins, managers and Koordinator position holders."""
        return (
            self.db.query(User)
            .outerjoin(Position, User.position_id == Position.id)
            .filter(User.is_active.is_(True))
            .filter(
                or_(
                    User.role.in_([UserRole.ADMIN.value, UserRole.MANAGER.value]),
                    Position.name.contains("Koordinator"),
                )
            )
            .all()
        )

    def _recently_notified(self, user_id, request_id, notification_type: NotificationType, now: datetime) -> bool:
        return (
            self.db.query(Notification.id)
            .filter(
                Notification.user_id == user_id,
                Notification.related_id == request_id,
                Notification.type == notification_type.value,
                Notification.created_at >= now - DUPLICATE_WINDOW,
            )
            .first()
            is not None
        )

    def classify(self, days_so_far: int, limit: int) -> Optional[NotificationType]:
        if days_so_far > limit:
            return NotificationType.DURATION_EXCEEDED
        remaining = limit - days_so_far
        if 0 <= remaining <= get_settings().duration_warning_days:
            return NotificationType.DURATION_WARNING
        return None

    def run_duration_scan(self, today: Optional[date] = None, now: Optional[datetime] = None) -> ScanResult:
        """
        Check every approved request that has started against its limit.

        Recipients are not notified twice for the same request and type
        within 24 hours.
        """
        today = today or date.today()
        now = now or datetime.utcnow()
        config = get_settings()

        limits = {
            RequestType.ONSITE.value: get_int_setting(
                self.db, MAX_ONSITE_DAYS, default=config.default_max_onsite_days
            ),
            "default": get_int_setting(
                self.db, MAX_OFFSITE_DAYS, default=config.default_max_offsite_days
            ),
        }

        running = (
            self.db.query(Request)
            .filter(Request.status == RequestStatus.APPROVED.value, Request.start_date <= today)
            .all()
        )
        recipients = self._recipients()
        result = ScanResult(checked=len(running))

        for request in running:
            limit = limits.get(request.type, limits["default"])
            days_so_far = duration_days(request.start_date, today)
            notification_type = self.classify(days_so_far, limit)
            if notification_type is None:
                continue

            requester = request.user
            content = render(
                notification_type,
                requester=(requester.name if requester else None) or "Unknown",
                type=request.type,
                limit=limit,
                days=days_so_far,
                remaining=limit - days_so_far,
            )

            for recipient in recipients:
                if self._recently_notified(recipient.id, request.id, notification_type, now):
                    continue
                self.db.add(
                    Notification(
                        user_id=recipient.id,
                        type=notification_type.value,
                        related_id=request.id,
                        is_read=False,
                        created_at=now,
                        **content,
                    )
                )
                result.notifications_created += 1

        logger.info(
            "Duration scan checked %d requests, created %d notifications",
            result.checked, result.notifications_created,
        )
        return result
