from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from roster.api.schemas.common import ApiInput, ApiModel


class UserRegister(ApiInput):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    position_id: UUID
    location_id: UUID
    region_id: UUID


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class NamedRef(ApiModel):
    id: UUID
    name: Optional[str]


class UserResponse(ApiModel):
    id: UUID
    email: str
    name: Optional[str]
    role: str
    is_active: bool
    position_id: Optional[UUID]
    location_id: Optional[UUID]
    region_id: Optional[UUID]
    manager_id: Optional[UUID]
    position: Optional[NamedRef] = None
    location: Optional[NamedRef] = None
    region: Optional[NamedRef] = None
    manager: Optional[NamedRef] = None
    created_at: datetime
    last_login: Optional[datetime] = None
