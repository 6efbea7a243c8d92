"""User management endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.auth import UserResponse
from roster.api.schemas.common import SuccessResponse
from roster.api.schemas.users import UserCreate, UserUpdate
from roster.core.rbac import has_permission, require_permission
from roster.core.rbac.roles import UserRole
from roster.core.security import get_password_hash
from roster.db.models import Location, Position, Region, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def check_references(db: Session, values: dict) -> None:
    """Reject ids of positions, locations, regions or managers that do not exist."""
    for field, model, label in (
        ("position_id", Position, "Position"),
        ("location_id", Location, "Location"),
        ("region_id", Region, "Region"),
        ("manager_id", User, "Manager"),
    ):
        ref_id = values.get(field)
        if ref_id is not None and db.get(model, ref_id) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} not found")


def check_role_grant(current_user: User, role) -> None:
    if role == UserRole.ADMIN and current_user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can grant the ADMIN role")


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List users visible to the caller.

    Admins and managers see everyone, GSL position holders their location,
    Koordinator position holders their region.
    """
    query = db.query(User).options(
        selectinload(User.position),
        selectinload(User.location),
        selectinload(User.region),
        selectinload(User.manager),
    )

    if not has_permission(current_user, "users:list"):
        position_name = current_user.position.name if current_user.position else ""
        if "GSL" in position_name:
            if current_user.location_id is None:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="GSL account has no location assigned")
            query = query.filter(User.location_id == current_user.location_id)
        elif "koordinator" in position_name.lower():
            if current_user.region_id is None:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Koordinator account has no region assigned")
            query = query.filter(User.region_id == current_user.region_id)
        else:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return query.order_by(User.name.asc()).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@require_permission("users:manage")
async def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if db.query(User).filter(User.email == body.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    check_role_grant(current_user, body.role)
    values = body.model_dump(exclude={"password", "role"})
    check_references(db, values)

    user = User(
        **values,
        role=body.role.value,
        password_hash=get_password_hash(body.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User %s created by %s", user.email, current_user.email)
    return user


@router.put("/{user_id}", response_model=UserResponse)
@require_permission("users:manage")
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    values = body.model_dump(exclude_unset=True)
    if "email" in values and values["email"] != user.email:
        if db.query(User).filter(User.email == values["email"]).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")
    if values.get("manager_id") == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A user cannot manage themselves")
    if "role" in values:
        check_role_grant(current_user, values["role"])
        values["role"] = values["role"].value
    check_references(db, values)

    password = values.pop("password", None)
    if password:
        user.password_hash = get_password_hash(password)
    for field, value in values.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=SuccessResponse)
@require_permission("users:manage")
async def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a user together with their requests and notifications."""
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    db.query(User).filter(User.manager_id == user_id).update({User.manager_id: None})
    db.delete(user)
    db.commit()

    logger.info("User %s deleted by %s", user_id, current_user.email)
    return SuccessResponse()


@router.post("/{user_id}/activate", response_model=UserResponse)
@require_permission("users:manage")
async def activate_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.is_active = True
    db.commit()
    db.refresh(user)
    return user
