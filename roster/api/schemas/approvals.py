from typing import List, Optional
from uuid import UUID

from pydantic import Field

from roster.api.schemas.common import ApiInput, ApiModel
from roster.api.schemas.requests import ApprovalWithApprover, RequestResponse


class ApprovalDecision(ApiInput):
    request_id: UUID
    # Validated by the workflow so an unknown value answers 400 "Invalid status"
    status: str
    comment: Optional[str] = None
    approval_lat: Optional[float] = None
    approval_long: Optional[float] = None


class RequesterSummary(ApiModel):
    id: UUID
    name: Optional[str]
    email: str
    position_name: Optional[str] = None


class PendingApproval(RequestResponse):
    """A request waiting on the caller, with its requester and history."""
    user: RequesterSummary
    next_approver_position_name: Optional[str] = None
    approvals: List[ApprovalWithApprover] = Field(default_factory=list)
