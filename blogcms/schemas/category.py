"""Request/response schemas for categories."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Shape accepted for slugs a client supplies explicitly.
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, max_length=30)


class CategoryUpdateRequest(BaseModel):
    """Partial edit. A new name re-derives the slug unless a slug is also given."""

    name: str | None = Field(default=None, max_length=100)
    slug: str | None = Field(default=None, max_length=120, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, max_length=30)


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    color: str | None = None
    post_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryReorderRequest(BaseModel):
    ids: list[int]
