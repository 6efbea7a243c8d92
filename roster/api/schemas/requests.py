from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from roster.api.schemas.common import ApiInput, ApiModel
from roster.core.approval.states import RequestType


class RequestCreate(ApiInput):
    type: RequestType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)
    justification: Optional[str] = None
    request_lat: Optional[float] = None
    request_long: Optional[float] = None


class UserSummary(ApiModel):
    id: UUID
    name: Optional[str]
    email: str


class ApprovalResponse(ApiModel):
    id: UUID
    request_id: UUID
    approver_id: Optional[UUID]
    status: str
    comment: Optional[str]
    approval_level: int
    approval_lat: Optional[float]
    approval_long: Optional[float]
    created_at: datetime


class ApprovalWithApprover(ApprovalResponse):
    approver: Optional[UserSummary] = None


class RequestResponse(ApiModel):
    id: UUID
    user_id: UUID
    type: str
    start_date: date
    end_date: date
    reason: str
    justification: Optional[str]
    request_lat: Optional[float]
    request_long: Optional[float]
    status: str
    current_approval_level: int
    next_approver_position_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime


class RequestDetail(RequestResponse):
    user: Optional[UserSummary] = None
    approvals: List[ApprovalWithApprover] = []
