"""Response schema for the upload endpoints."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    url: str = Field(..., description="Public path of the stored file, e.g. /uploads/images/image-....jpg")
