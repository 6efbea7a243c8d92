"""Admin database browser."""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Type
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, inspect
from sqlalchemy.orm import Session

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.common import PaginatedResponse, PaginationParams, SuccessResponse
from roster.core.approval import SqlAlchemyApprovalRepository, chain_provider, check_position_change
from roster.core.approval.errors import ChainConfigurationError
from roster.core.rbac import require_permission
from roster.db.base import Base
from roster.db.models import Approval, Location, Notification, Position, Region, Request, Setting, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/database", tags=["database"])

# Browsable tables: name -> (model, description, ordering column)
TABLES: Dict[str, tuple] = {
    "User": (User, "User accounts and profiles", User.created_at.desc()),
    "Position": (Position, "Job positions", Position.name.asc()),
    "Location": (Location, "Work locations", Location.name.asc()),
    "Region": (Region, "Work regions", Region.name.asc()),
    "Request": (Request, "Onsite/Offsite/Leave requests", Request.created_at.desc()),
    "Approval": (Approval, "Request approvals", Approval.created_at.desc()),
    "Setting": (Setting, "System settings", Setting.key.asc()),
    "Notification": (Notification, "User notifications", Notification.created_at.desc()),
}

REDACTED_COLUMNS = {"password_hash"}


def resolve_table(table: str) -> Type[Base]:
    if table not in TABLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid table name")
    return TABLES[table][0]


def row_to_dict(row: Base) -> Dict[str, Any]:
    data = {}
    for column in inspect(row).mapper.column_attrs:
        if column.key in REDACTED_COLUMNS:
            continue
        value = getattr(row, column.key)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        data[column.key] = value
    return data


@router.get("")
@require_permission("database:read")
async def list_tables(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        "tables": [
            {
                "name": name,
                "description": description,
                "count": db.query(func.count()).select_from(model).scalar(),
            }
            for name, (model, description, _) in TABLES.items()
        ]
    }


@router.get("/{table}")
@require_permission("database:read")
async def browse_table(
    table: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
):
    model = resolve_table(table)
    params = PaginationParams(page=page, per_page=per_page)
    order_by = TABLES[table][2]

    total = db.query(func.count()).select_from(model).scalar()
    rows = db.query(model).order_by(order_by).offset(params.offset).limit(params.limit).all()

    return PaginatedResponse.create(
        items=[row_to_dict(r) for r in rows], total=total, page=params.page, per_page=params.per_page
    ).model_dump(by_alias=True)


@router.delete("/{table}/{row_id}", response_model=SuccessResponse)
@require_permission("database:delete")
async def delete_row(
    table: str,
    row_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    model = resolve_table(table)
    if model is User and row_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    row = db.get(model, row_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")

    if model is Position:
        positions = SqlAlchemyApprovalRepository(db).list_positions()
        try:
            check_position_change(positions, [p for p in positions if p.id != row_id])
        except ChainConfigurationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot delete: the approval chain would break ({e.details})",
            ) from e

    db.delete(row)
    db.commit()
    if model is Position:
        chain_provider.invalidate()

    logger.warning("%s %s deleted from the database browser by %s", table, row_id, current_user.email)
    return SuccessResponse()
