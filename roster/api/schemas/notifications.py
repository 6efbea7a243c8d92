from datetime import datetime
from typing import Optional
from uuid import UUID

from roster.api.schemas.common import ApiInput, ApiModel


class NotificationResponse(ApiModel):
    id: UUID
    user_id: UUID
    type: str
    title: str
    message: str
    related_id: Optional[UUID]
    is_read: bool
    created_at: datetime


class NotificationUpdate(ApiInput):
    is_read: bool
