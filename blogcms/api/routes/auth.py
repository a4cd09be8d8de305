"""Register, login (with throttle and optional cookie transport) and logout."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from blogcms.api.deps import SettingsDep, ThrottleDep
from blogcms.core.database import get_db
from blogcms.core.session import clear_session_cookies, set_session_cookies
from blogcms.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    TokenResponse,
    UserPublic,
)
from blogcms.services import auth as auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    """Create an editor account. Returns public fields only; 409 on duplicate email or username."""
    user = auth_service.register_user(
        db,
        email=body.email,
        username=body.username,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserPublic.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    throttle: ThrottleDep,
    settings: SettingsDep,
) -> TokenResponse:
    """
    Authenticate with email and password.

    The token is always returned in the body (for Authorization-header clients).
    In cookie mode it is also set as an HttpOnly cookie, next to a readable
    CSRF cookie whose value must be echoed in the CSRF header on unsafe requests.
    401 for bad credentials, 429 while the identifier is locked out.
    """
    user, token = auth_service.login(
        db,
        throttle,
        settings,
        email=body.email,
        password=body.password,
        remember=body.remember_me,
    )
    set_session_cookies(response, token, remember=body.remember_me, settings=settings)
    return TokenResponse(access_token=token, token_type="bearer", user=UserPublic.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
def logout(response: Response, settings: SettingsDep) -> LogoutResponse:
    """Clear the session and CSRF cookies (cookie mode). Always succeeds."""
    clear_session_cookies(response, settings=settings)
    logger.info("Logout", extra={"cookie_mode": settings.AUTH_COOKIE_ENABLED})
    return LogoutResponse(success=True)
