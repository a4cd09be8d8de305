"""Password hashing and JWT session token issue/verification."""

import time
from typing import Any

import bcrypt
import jwt

from blogcms.core.config import Settings, get_settings
from blogcms.core.errors import Unauthorized
from blogcms.models.user import Role

# Bcrypt cost (rounds).
BCRYPT_ROUNDS = 12

# Claims every session token must carry.
REQUIRED_CLAIMS = ("sub", "email", "username", "role", "exp")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def token_lifetime_seconds(remember: bool, settings: Settings | None = None) -> int:
    """Configured lifetime for a session token: the long one when remember is set."""
    settings = settings or get_settings()
    if remember:
        return settings.jwt_remember_expiration_seconds
    return settings.jwt_expiration_seconds


def create_access_token(
    *,
    user_id: int,
    email: str,
    username: str,
    role: str,
    remember: bool = False,
    settings: Settings | None = None,
    now: float | None = None,
) -> str:
    """Sign a session token for the principal. `now` is a Unix timestamp (defaults to the current time)."""
    settings = settings or get_settings()
    issued_at = int(now if now is not None else time.time())
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "username": username,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + token_lifetime_seconds(remember, settings),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(
    token: str,
    *,
    settings: Settings | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """
    Verify signature and expiry; return the payload.

    Expiry is checked here against `now` rather than inside PyJWT so callers
    can pin the clock. A token is expired once now >= exp.
    Raises jwt.PyJWTError on any failure.
    """
    settings = settings or get_settings()
    payload = jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_exp": False, "require": list(REQUIRED_CLAIMS)},
    )
    current = now if now is not None else time.time()
    try:
        exp = int(payload["exp"])
    except (TypeError, ValueError) as e:
        raise jwt.InvalidTokenError("Expiration Time claim (exp) must be an integer") from e
    if current >= exp:
        raise jwt.ExpiredSignatureError("Signature has expired")
    return payload


def principal_from_token(
    token: str,
    *,
    settings: Settings | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """
    Verify a token and return the principal fields embedded in it.

    The user record is not re-read: role or identity changes made after
    issuance apply only once a new token is issued.
    Raises Unauthorized for every verification failure.
    """
    try:
        payload = decode_access_token(token, settings=settings, now=now)
    except jwt.ExpiredSignatureError as e:
        raise Unauthorized("Token has expired") from e
    except jwt.PyJWTError as e:
        raise Unauthorized("Invalid token") from e
    try:
        user_id = int(payload["sub"])
        role = Role(payload["role"])
    except (TypeError, ValueError) as e:
        raise Unauthorized("Invalid token payload") from e
    return {
        "id": user_id,
        "email": str(payload["email"]),
        "username": str(payload["username"]),
        "role": role,
    }
