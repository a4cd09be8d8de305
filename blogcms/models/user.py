"""ORM model for CMS users (auth and RBAC)."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from blogcms.models.base import Base


class Role(str, Enum):
    """Roles a user can hold. Every authenticated principal has exactly one."""

    ADMIN = "ADMIN"
    EDITOR = "EDITOR"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    email is stored lowercased. role: 'ADMIN' or 'EDITOR'.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    avatar = Column(String(2048), nullable=True)
    role = Column(String(16), nullable=False, default=Role.EDITOR.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
