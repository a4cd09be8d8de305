"""Request/response schemas for site settings."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SettingType(str, Enum):
    """Closed set of value kinds a setting may declare."""

    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    JSON = "json"


class SettingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    key: str
    value: str
    type: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SettingUpdateRequest(BaseModel):
    value: str = Field(..., min_length=1, description="New value (validated against the type)")
    type: SettingType | None = Field(
        default=None,
        description="Value kind; omitted keeps the stored kind (or 'string' for new keys)",
    )


class PublicSettingsResponse(BaseModel):
    """Resolved settings map for rendering: normalized keys, secrets masked, asset URLs absolute."""

    settings: dict[str, str]
    api_base: str = Field(default="", description="Origin assets are resolved against; empty means relative")
