"""Request/response schemas for tags."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TagCreateRequest(BaseModel):
    name: str = Field(..., max_length=100)


class TagUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    post_count: int = 0
    created_at: datetime | None = None


class TagMergeRequest(BaseModel):
    """Fold every source tag into the target: links move, sources are deleted."""

    source_ids: list[int] = Field(
        ..., min_length=1, validation_alias=AliasChoices("source_ids", "sourceIds")
    )
    target_id: int = Field(..., validation_alias=AliasChoices("target_id", "targetId"))


class TagCleanupResponse(BaseModel):
    deleted: int
