from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from roster.api.schemas.common import ApiInput
from roster.core.rbac.roles import UserRole


class UserCreate(ApiInput):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: UserRole = UserRole.EMPLOYEE
    is_active: bool = True
    position_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    region_id: Optional[UUID] = None
    manager_id: Optional[UUID] = None


class UserUpdate(ApiInput):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    position_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    region_id: Optional[UUID] = None
    manager_id: Optional[UUID] = None
