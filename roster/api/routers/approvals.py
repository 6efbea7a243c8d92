"""Approval workflow API endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from roster.api.deps import get_current_user, get_approval_workflow
from roster.api.schemas.approvals import ApprovalDecision, PendingApproval, RequesterSummary
from roster.api.schemas.common import ErrorResponse
from roster.api.schemas.requests import ApprovalResponse, ApprovalWithApprover, RequestResponse
from roster.core.approval import Actor, ApprovalWorkflow
from roster.core.rbac import require_permission
from roster.core.rbac.roles import UserRole
from roster.db.models import Request as RequestModel, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/approvals", tags=["approvals"])

DECISION_ERRORS = {code: {"model": ErrorResponse} for code in (400, 403, 404, 409)}


def to_pending_approval(request: RequestModel) -> PendingApproval:
    requester = request.user
    return PendingApproval.model_validate(
        {
            **RequestResponse.model_validate(request).model_dump(),
            "user": RequesterSummary(
                id=requester.id,
                name=requester.name,
                email=requester.email,
                position_name=requester.position.name if requester.position else None,
            ),
            "next_approver_position_name": (
                request.next_approver_position.name if request.next_approver_position else None
            ),
            "approvals": [ApprovalWithApprover.model_validate(a) for a in request.approvals],
        }
    )


@router.get("", response_model=List[PendingApproval])
@require_permission("approvals:list")
async def list_pending_approvals(
    current_user: User = Depends(get_current_user),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    """PENDING requests waiting on the caller's position, oldest first. Admins see all."""
    return [to_pending_approval(r) for r in workflow.pending_for(Actor.from_user(current_user))]


@router.post("", responses=DECISION_ERRORS)
@require_permission("approvals:approve")
async def decide(
    body: ApprovalDecision,
    current_user: User = Depends(get_current_user),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    """
    Approve or reject a pending request.

    Returns the updated request and the recorded approval as a two-element array.
    """
    request, approval = workflow.decide(
        body.request_id,
        body.status,
        Actor.from_user(current_user),
        comment=body.comment,
        approval_lat=body.approval_lat,
        approval_long=body.approval_long,
    )
    return JSONResponse(
        content=[
            RequestResponse.model_validate(request).model_dump(mode="json", by_alias=True),
            ApprovalResponse.model_validate(approval).model_dump(mode="json", by_alias=True),
        ]
    )


@router.get("/{request_id}/history", response_model=List[ApprovalWithApprover])
@require_permission("approvals:read")
async def get_approval_history(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    """
    Decisions recorded on a request, oldest first.

    An employee must own the request or take part in its approval.
    """
    request = workflow.repository.get_request(request_id)
    if request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")

    approvals = workflow.repository.list_approvals(request_id)
    if current_user.role == UserRole.EMPLOYEE.value and not (
        request.user_id == current_user.id
        or (current_user.position_id is not None and request.next_approver_position_id == current_user.position_id)
        or any(a.approver_id == current_user.id for a in approvals)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return approvals
