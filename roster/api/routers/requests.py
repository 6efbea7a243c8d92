"""Roster request endpoints."""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload

from roster.api.deps import get_db, get_current_user, get_approval_workflow
from roster.api.schemas.requests import RequestCreate, RequestDetail, RequestResponse
from roster.core.approval import Actor, ApprovalWorkflow
from roster.core.rbac import require_permission
from roster.core.rbac.roles import UserRole
from roster.db.models import Approval, Request as RequestModel, User
from roster.services.notifications import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["requests"])


def default_range_start(today: Optional[date] = None) -> date:
    """First day of the month two months before ``today``."""
    today = today or date.today()
    month = today.month - 2
    year = today.year
    if month < 1:
        month += 12
        year -= 1
    return date(year, month, 1)


@router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
@require_permission("requests:create")
async def create_request(
    body: RequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    """Submit a request; it is routed to the first approver of the requester's chain."""
    request = workflow.submit(
        Actor.from_user(current_user),
        request_type=body.type,
        start_date=body.start_date,
        end_date=body.end_date,
        reason=body.reason,
        justification=body.justification,
        request_lat=body.request_lat,
        request_long=body.request_long,
    )

    if NotificationService(db).check_request_duration(request, current_user) is not None:
        db.commit()

    return request


@router.get("", response_model=List[RequestDetail])
@require_permission("requests:list")
async def list_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
):
    """
    Requests starting within [start, end], newest start date first.

    Employees only see their own. Each item carries its latest approval.
    """
    range_start = start or default_range_start()

    query = (
        db.query(RequestModel)
        .options(
            selectinload(RequestModel.user),
            selectinload(RequestModel.approvals).selectinload(Approval.approver),
        )
        .filter(RequestModel.start_date >= range_start)
    )
    if end is not None:
        query = query.filter(RequestModel.start_date <= end)
    if current_user.role == UserRole.EMPLOYEE.value:
        query = query.filter(RequestModel.user_id == current_user.id)

    items = []
    for request in query.order_by(RequestModel.start_date.desc()).all():
        detail = RequestDetail.model_validate(request)
        detail.approvals = detail.approvals[-1:]
        items.append(detail)
    return items


@router.get("/{request_id}", response_model=RequestDetail)
@require_permission("requests:read")
async def get_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a request with its full approval history."""
    request = db.query(RequestModel).filter(RequestModel.id == request_id).first()
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")

    if current_user.role == UserRole.EMPLOYEE.value and request.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return request
