from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from roster.api.deps import get_db, get_current_user
from roster.api.schemas.common import SuccessResponse
from roster.api.schemas.settings import SettingOut, SettingValue, SettingsUpdate
from roster.core.rbac import require_permission
from roster.db.models import User
from roster.services.settings import get_setting, list_settings, upsert_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=Dict[str, SettingValue])
@require_permission("settings:read")
async def get_settings_map(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        key: SettingValue(value=s.value, description=s.description)
        for key, s in list_settings(db).items()
    }


@router.put("", response_model=SuccessResponse)
@require_permission("settings:update")
async def update_settings(
    body: SettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    upsert_settings(db, body.settings)
    db.commit()
    return SuccessResponse()


@router.get("/{key}", response_model=SettingOut)
@require_permission("settings:read")
async def get_setting_value(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """A single setting; unknown keys read as ``"0"`` (no limit)."""
    setting = get_setting(db, key)
    if setting is None:
        return SettingOut(key=key, value="0")
    return SettingOut(key=setting.key, value=setting.value, description=setting.description)
