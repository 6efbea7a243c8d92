from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from roster.api.deps import get_db, get_current_user
from roster.core.rbac import require_permission
from roster.db.models import User
from roster.services.dashboard import compute_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
@require_permission("dashboard:read")
async def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Request and personnel summary; managers see their direct reports only."""
    return compute_stats(db, current_user)
