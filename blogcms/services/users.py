"""User accounts: creation, lookup, admin edits and self-service profile changes."""

import logging
from typing import Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.core.errors import Conflict, NotFound, Unauthorized
from blogcms.core.security import hash_password, verify_password
from blogcms.models import Role, User
from blogcms.services.activity import log_activity

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def _ensure_unique(db: Session, *, email: str | None, username: str | None, exclude_id: int | None = None) -> None:
    clauses = []
    if email is not None:
        clauses.append(User.email == email)
    if username is not None:
        clauses.append(User.username == username)
    if not clauses:
        return
    query = db.query(User).filter(or_(*clauses))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        raise Conflict("User with this email or username already exists")


def _commit_or_conflict(db: Session, message: str) -> None:
    # Unique indexes still decide races between the pre-check and the commit.
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(message) from e


def create_user(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    role: Role = Role.EDITOR,
) -> User:
    """Create an account with a hashed password. Duplicate email or username raises Conflict."""
    email = normalize_email(email)
    username = username.strip()
    _ensure_unique(db, email=email, username=username)
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=Role(role).value,
        is_active=True,
    )
    db.add(user)
    _commit_or_conflict(db, "User with this email or username already exists")
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return user


def update_user(db: Session, user_id: int, changes: dict[str, Any]) -> User:
    """Admin edit. Only keys present in changes are applied; a password is re-hashed."""
    user = get_user(db, user_id)
    if "email" in changes and changes["email"] is not None:
        changes["email"] = normalize_email(changes["email"])
    _ensure_unique(
        db,
        email=changes.get("email"),
        username=changes.get("username"),
        exclude_id=user.id,
    )
    for field, value in changes.items():
        if field == "password":
            if value:
                user.password_hash = hash_password(value)
        elif field == "role":
            if value is not None:
                user.role = Role(value).value
        elif field in ("email", "username", "is_active") and value is None:
            continue
        else:
            setattr(user, field, value)
    _commit_or_conflict(db, "User with this email or username already exists")
    db.refresh(user)
    logger.info("User updated", extra={"user_id": user.id, "fields": sorted(changes)})
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete the row; raises NotFound when absent."""
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id})


def update_profile(db: Session, user_id: int, changes: dict[str, Any]) -> User:
    """Self-service edit of email, names, bio and avatar."""
    user = get_user(db, user_id)
    if changes.get("email") is not None:
        changes["email"] = normalize_email(changes["email"])
        _ensure_unique(db, email=changes["email"], username=None, exclude_id=user.id)
    elif "email" in changes:
        del changes["email"]
    for field, value in changes.items():
        setattr(user, field, value)
    _commit_or_conflict(db, "Email already in use")
    db.refresh(user)
    log_activity(db, user.id, "profile.update", {"fields": sorted(changes)})
    return user


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    """Replace the password after verifying the current one (Unauthorized when it does not match)."""
    user = get_user(db, user_id)
    if not verify_password(current_password, user.password_hash):
        raise Unauthorized("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()
    log_activity(db, user.id, "password.change")
