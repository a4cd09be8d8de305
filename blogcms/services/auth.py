"""Registration and credential checks guarded by the login throttle."""

import logging

from sqlalchemy.orm import Session

from blogcms.core.config import Settings
from blogcms.core.errors import Unauthorized
from blogcms.core.security import create_access_token, verify_password
from blogcms.core.throttle import LoginThrottle, throttle_key
from blogcms.models import Role, User
from blogcms.services.activity import log_activity
from blogcms.services.users import create_user, find_by_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def register_user(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Open registration; new accounts are editors."""
    return create_user(
        db,
        email=email,
        username=username,
        password=password,
        first_name=first_name,
        last_name=last_name,
        role=Role.EDITOR,
    )


def authenticate(db: Session, throttle: LoginThrottle, email: str, password: str) -> User:
    """
    Check credentials for email.

    A blocked identifier is rejected with TooManyRequests before the password
    hash is touched. Unknown email, wrong password and inactive accounts all
    count as failures and raise the same Unauthorized. Success clears the
    identifier's failure record.
    """
    key = throttle_key(email)
    throttle.check(key)

    user = find_by_email(db, key)
    valid = verify_password(password, user.password_hash) if user is not None else False
    if user is None or not valid or not user.is_active:
        record = throttle.record_failure(key)
        logger.warning(
            "Login failed",
            extra={"identifier": key, "attempts": record.count, "blocked": record.blocked_until is not None},
        )
        raise Unauthorized(INVALID_CREDENTIALS)

    throttle.reset_attempts(key)
    return user


def login(
    db: Session,
    throttle: LoginThrottle,
    settings: Settings,
    *,
    email: str,
    password: str,
    remember: bool = False,
) -> tuple[User, str]:
    """Authenticate and issue a session token. Returns (user, token)."""
    user = authenticate(db, throttle, email, password)
    token = create_access_token(
        user_id=user.id,
        email=user.email,
        username=user.username,
        role=user.role,
        remember=remember,
        settings=settings,
    )
    log_activity(db, user.id, "login", {"remember": remember})
    logger.info("Login succeeded", extra={"user_id": user.id, "remember": remember})
    return user, token
