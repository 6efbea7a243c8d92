"""Master data endpoints: regions, locations and positions."""

import logging
from typing import List, NamedTuple, Type
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.common import SuccessResponse
from roster.api.schemas.master import (
    LocationIn,
    LocationResponse,
    PositionIn,
    PositionResponse,
    RegionIn,
    RegionResponse,
)
from roster.core.approval import SqlAlchemyApprovalRepository, chain_provider, check_position_change
from roster.core.approval.errors import ChainConfigurationError
from roster.core.approval.states import RequestStatus
from roster.core.rbac import require_permission
from roster.db.models import Location, Position, Region, Request as RequestModel, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/master", tags=["master"])


def get_or_404(db: Session, model: Type, item_id: UUID, label: str):
    item = db.get(model, item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return item


def ensure_unique_name(db: Session, model: Type, name: str, label: str, exclude_id: UUID = None) -> None:
    query = db.query(model).filter(model.name == name)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} name already exists")


def refuse_delete(label: str, reason: str):
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Cannot delete: {label} is {reason}",
    )


# Regions

@router.get("/regions", response_model=List[RegionResponse])
@require_permission("regions:list")
async def list_regions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Region).order_by(Region.name.asc()).all()


@router.post("/regions", response_model=RegionResponse, status_code=status.HTTP_201_CREATED)
@require_permission("regions:manage")
async def create_region(
    body: RegionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_unique_name(db, Region, body.name, "Region")
    region = Region(name=body.name)
    db.add(region)
    db.commit()
    db.refresh(region)
    return region


@router.put("/regions/{region_id}", response_model=RegionResponse)
@require_permission("regions:manage")
async def update_region(
    region_id: UUID,
    body: RegionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    region = get_or_404(db, Region, region_id, "Region")
    ensure_unique_name(db, Region, body.name, "Region", exclude_id=region_id)
    region.name = body.name
    db.commit()
    db.refresh(region)
    return region


@router.delete("/regions/{region_id}", response_model=SuccessResponse)
@require_permission("regions:manage")
async def delete_region(
    region_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    region = get_or_404(db, Region, region_id, "Region")
    if db.query(User.id).filter(User.region_id == region_id).first():
        refuse_delete("Region", "assigned to employees")
    if db.query(Location.id).filter(Location.region_id == region_id).first():
        refuse_delete("Region", "used by locations")
    db.delete(region)
    db.commit()
    return SuccessResponse()


# Locations

@router.get("/locations", response_model=List[LocationResponse])
@require_permission("locations:list")
async def list_locations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Location)
        .options(selectinload(Location.region))
        .order_by(Location.name.asc())
        .all()
    )


@router.post("/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
@require_permission("locations:manage")
async def create_location(
    body: LocationIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_unique_name(db, Location, body.name, "Location")
    if body.region_id is not None:
        get_or_404(db, Region, body.region_id, "Region")
    location = Location(name=body.name, address=body.address, region_id=body.region_id)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@router.put("/locations/{location_id}", response_model=LocationResponse)
@require_permission("locations:manage")
async def update_location(
    location_id: UUID,
    body: LocationIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    location = get_or_404(db, Location, location_id, "Location")
    ensure_unique_name(db, Location, body.name, "Location", exclude_id=location_id)
    if body.region_id is not None:
        get_or_404(db, Region, body.region_id, "Region")
    location.name = body.name
    location.address = body.address
    location.region_id = body.region_id
    db.commit()
    db.refresh(location)
    return location


@router.delete("/locations/{location_id}", response_model=SuccessResponse)
@require_permission("locations:manage")
async def delete_location(
    location_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    location = get_or_404(db, Location, location_id, "Location")
    if db.query(User.id).filter(User.location_id == location_id).first():
        refuse_delete("Location", "assigned to employees")
    db.delete(location)
    db.commit()
    return SuccessResponse()


# Positions

class PositionName(NamedTuple):
    id: UUID
    name: str


def refuse_chain_break(db: Session, position_id: UUID, new_name: str) -> None:
    """Reject a rename after which some approval level would have no approver."""
    positions = SqlAlchemyApprovalRepository(db).list_positions()
    renamed = sorted(
        (PositionName(p.id, new_name if p.id == position_id else p.name) for p in positions),
        key=lambda p: p.name,
    )
    try:
        check_position_change(positions, renamed)
    except ChainConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot rename: the approval chain would break ({e.details})",
        ) from e


def chain_references(db: Session, position_id: UUID) -> bool:
    """Check if the current approval chain routes decisions to the position."""
    try:
        chain = chain_provider.get(SqlAlchemyApprovalRepository(db).list_positions)
    except ChainConfigurationError:
        logger.warning("Approval chain is incomplete; position %s is not part of it", position_id)
        return False
    return chain.references(position_id)


@router.get("/positions", response_model=List[PositionResponse])
@require_permission("positions:list")
async def list_positions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Position).order_by(Position.name.asc()).all()


@router.post("/positions", response_model=PositionResponse, status_code=status.HTTP_201_CREATED)
@require_permission("positions:manage")
async def create_position(
    body: PositionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_unique_name(db, Position, body.name, "Position")
    position = Position(name=body.name, description=body.description, level=body.level)
    db.add(position)
    db.commit()
    chain_provider.invalidate()
    db.refresh(position)
    logger.info("Position %r created by %s", position.name, current_user.email)
    return position


@router.put("/positions/{position_id}", response_model=PositionResponse)
@require_permission("positions:manage")
async def update_position(
    position_id: UUID,
    body: PositionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    position = get_or_404(db, Position, position_id, "Position")
    ensure_unique_name(db, Position, body.name, "Position", exclude_id=position_id)
    if body.name != position.name:
        refuse_chain_break(db, position_id, body.name)
    position.name = body.name
    position.description = body.description
    position.level = body.level
    db.commit()
    chain_provider.invalidate()
    db.refresh(position)
    logger.info("Position %s updated by %s", position_id, current_user.email)
    return position


@router.delete("/positions/{position_id}", response_model=SuccessResponse)
@require_permission("positions:manage")
async def delete_position(
    position_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    position = get_or_404(db, Position, position_id, "Position")
    if db.query(User.id).filter(User.position_id == position_id).first():
        refuse_delete("Position", "assigned to employees")
    if chain_references(db, position_id):
        refuse_delete("Position", "an approver in the approval chain")
    pending = (
        db.query(RequestModel.id)
        .filter(
            RequestModel.next_approver_position_id == position_id,
            RequestModel.status == RequestStatus.PENDING.value,
        )
        .first()
    )
    if pending:
        refuse_delete("Position", "awaited by pending requests")
    db.delete(position)
    db.commit()
    chain_provider.invalidate()
    logger.info("Position %s deleted by %s", position_id, current_user.email)
    return SuccessResponse()
