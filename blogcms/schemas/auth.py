"""Request/response schemas for auth endpoints."""

import re

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from blogcms.models.user import Role

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255

# At least one lower, one upper, one digit and one symbol.
PASSWORD_POLICY_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^\w\s]).{8,}$")
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters and include upper, lower, number, and special character"
)


def check_password_policy(value: str) -> str:
    if not PASSWORD_POLICY_RE.match(value):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return value


class RegisterRequest(BaseModel):
    """New account. Registration always creates an EDITOR."""

    email: EmailStr = Field(..., description="Unique email address")
    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Unique username"
    )
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("last_name", "lastName")
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_policy(v)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < USERNAME_MIN_LEN:
            raise ValueError(f"Username must be at least {USERNAME_MIN_LEN} characters")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")
    remember_me: bool = Field(
        default=False,
        validation_alias=AliasChoices("remember_me", "rememberMe"),
        description="Issue a long-lived token (and persistent cookie in cookie mode)",
    )


class UserPublic(BaseModel):
    """User fields safe to return to clients (never the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    avatar: str | None = None
    role: Role
    is_active: bool = True


class TokenResponse(BaseModel):
    """Session token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserPublic


class LogoutResponse(BaseModel):
    success: bool = True


class CurrentUser(BaseModel):
    """Authenticated principal taken from the verified token (id, email, username, role)."""

    id: int
    email: str
    username: str
    role: Role
