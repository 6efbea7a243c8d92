"""Notification endpoints, including the scheduled duration scan."""

import hmac
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.notifications import NotificationResponse, NotificationUpdate
from roster.core.config import get_settings
from roster.core.rbac import require_permission
from roster.db.models import Notification, User
from roster.services.notifications import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])
cron_router = APIRouter(prefix="/cron", tags=["cron"])

RECENT_LIMIT = 20


@router.get("", response_model=List[NotificationResponse])
@require_permission("notifications:read")
async def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's most recent notifications, newest first."""
    return (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )


@router.patch("/{notification_id}", response_model=NotificationResponse)
@require_permission("notifications:update")
async def update_notification(
    notification_id: UUID,
    body: NotificationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    if notification.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    notification.is_read = body.is_read
    db.commit()
    db.refresh(notification)
    return notification


@cron_router.post("/notifications")
def run_notification_scan(
    db: Session = Depends(get_db),
    x_cron_secret: Optional[str] = Header(None),
):
    """Scan running requests for duration limits. Guarded by X-Cron-Secret when configured."""
    secret = get_settings().cron_secret
    if secret and not hmac.compare_digest(x_cron_secret or "", secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    result = NotificationService(db).run_duration_scan()
    db.commit()
    return result.to_dict()
