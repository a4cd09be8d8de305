"""Request/response schemas for newsletter signup."""

from pydantic import BaseModel, EmailStr


class SubscribeRequest(BaseModel):
    email: EmailStr
    honeypot: str | None = None


class SubscribeResponse(BaseModel):
    message: str
