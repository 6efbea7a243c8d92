from typing import Dict, Optional, Union

from pydantic import BaseModel

from roster.api.schemas.common import ApiInput


class SettingValue(BaseModel):
    value: str
    description: Optional[str] = None


class SettingOut(BaseModel):
    key: str
    value: str
    description: Optional[str] = None


class SettingsUpdate(ApiInput):
    settings: Dict[str, Union[int, float, str]]
