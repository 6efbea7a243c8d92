from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from roster.api.schemas.common import ApiInput, ApiModel


class RegionIn(ApiInput):
    name: str = Field(..., min_length=1, max_length=255)


class RegionResponse(ApiModel):
    id: UUID
    name: str
    created_at: datetime


class LocationIn(ApiInput):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
    region_id: Optional[UUID] = None


class LocationResponse(ApiModel):
    id: UUID
    name: str
    address: Optional[str]
    region_id: Optional[UUID]
    region: Optional[RegionResponse] = None
    created_at: datetime


class PositionIn(ApiInput):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    level: int = Field(0, ge=0)


class PositionResponse(ApiModel):
    id: UUID
    name: str
    description: Optional[str]
    level: int
    created_at: datetime
