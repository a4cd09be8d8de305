"""Request/response schemas for user administration and self-service."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from blogcms.models.user import Role
from blogcms.schemas.auth import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    UserPublic,
    check_password_policy,
)

BIO_MAX_LEN = 1000


class UserDetail(UserPublic):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserDetail]


class UserCreateRequest(BaseModel):
    """Admin-created account; role defaults to EDITOR."""

    email: EmailStr
    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str | None = Field(default=None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str | None = Field(default=None, validation_alias=AliasChoices("last_name", "lastName"))
    role: Role = Role.EDITOR

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_policy(v)


class UserUpdateRequest(BaseModel):
    """Admin edit; only fields that are present are changed."""

    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str | None = Field(default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str | None = Field(default=None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str | None = Field(default=None, validation_alias=AliasChoices("last_name", "lastName"))
    bio: str | None = Field(default=None, max_length=BIO_MAX_LEN)
    avatar: str | None = Field(default=None, max_length=2048)
    role: Role | None = None
    is_active: bool | None = Field(default=None, validation_alias=AliasChoices("is_active", "isActive"))

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return check_password_policy(v)


class ProfileUpdateRequest(BaseModel):
    """Self-service profile edit."""

    email: EmailStr | None = None
    first_name: str | None = Field(default=None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str | None = Field(default=None, validation_alias=AliasChoices("last_name", "lastName"))
    bio: str | None = Field(default=None, max_length=BIO_MAX_LEN)
    avatar: str | None = Field(default=None, max_length=2048)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("current_password", "currentPassword")
    )
    new_password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_policy(v)


class MessageResponse(BaseModel):
    message: str


class ActivityItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    details: dict[str, Any] | None = Field(default=None, serialization_alias="metadata")
    created_at: datetime | None = None


class ActivityListResponse(BaseModel):
    items: list[ActivityItem]
