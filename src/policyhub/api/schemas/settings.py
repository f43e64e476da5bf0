"""Settings request/response schemas."""

from datetime import datetime
from typing import Any

from pydantic import Field

from policyhub.api.schemas.base import CamelModel


class SettingResponse(CamelModel):
    """A stored setting row."""

    id: int
    organization_id: int
    setting_key: str
    setting_value: Any = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class UpdateSettingRequest(CamelModel):
    setting_key: str = Field(..., min_length=1, max_length=255)
    setting_value: Any = None
