"""Request/response schemas for reader comments and moderation."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

AUTHOR_EMAIL_MAX_LEN = 200


class CommentCreateRequest(BaseModel):
    """
    Public comment. honeypot is a hidden form field: humans leave it empty,
    so any value marks the submission as automated.
    """

    post_id: int = Field(..., validation_alias=AliasChoices("post_id", "postId"))
    author_name: str | None = Field(
        default=None, max_length=100, validation_alias=AliasChoices("author_name", "authorName")
    )
    author_email: EmailStr | None = Field(
        default=None, validation_alias=AliasChoices("author_email", "authorEmail")
    )
    content: str = Field(..., max_length=5000)
    honeypot: str | None = None

    @field_validator("author_email")
    @classmethod
    def validate_email_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) > AUTHOR_EMAIL_MAX_LEN:
            raise ValueError(f"authorEmail must be at most {AUTHOR_EMAIL_MAX_LEN} characters")
        return v


class CommentApprovalRequest(BaseModel):
    approved: bool


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    author_name: str | None = None
    author_email: str | None = None
    content: str
    approved: bool
    created_at: datetime | None = None
