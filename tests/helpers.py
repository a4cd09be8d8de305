"""Shared builders for endpoint tests: app on in-memory SQLite, fake clock, users, posts and tokens."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from blogcms.core.config import Settings
from blogcms.core.database import engine_options, get_db
from blogcms.core.ratelimit import CommentRateLimiter
from blogcms.core.security import create_access_token
from blogcms.core.throttle import LoginThrottle
from blogcms.main import create_app
from blogcms.models import Base, Post, PostStatus, Role, User
from blogcms.services.slugs import slugify
from blogcms.services.users import create_user

STRONG_PASSWORD = "Str0ngP@ss!"
TEST_JWT_SECRET = "test-secret-with-at-least-32-bytes!"


class FakeClock:
    """Monotonic clock whose time only moves when advanced."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"DATABASE_URL": "sqlite://", "JWT_SECRET": TEST_JWT_SECRET}
    values.update(overrides)
    return Settings(**values)


def make_session_factory() -> sessionmaker:
    engine = create_engine("sqlite://", **engine_options("sqlite://"))
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_client(
    settings: Settings | None = None,
    throttle: LoginThrottle | None = None,
    comment_limiter: CommentRateLimiter | None = None,
) -> tuple[TestClient, Callable[[], Session]]:
    """TestClient for a fresh app and database. Returns (client, session factory)."""
    settings = settings or make_settings()
    factory = make_session_factory()
    app = create_app(settings, throttle, comment_limiter)

    def override_get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app), factory


def add_user(
    factory: Callable[[], Session],
    *,
    email: str,
    username: str,
    role: Role = Role.EDITOR,
    password: str = STRONG_PASSWORD,
) -> User:
    db = factory()
    try:
        return create_user(db, email=email, username=username, password=password, role=role)
    finally:
        db.close()


def bearer(user: User, settings: Settings, **kwargs: Any) -> dict[str, str]:
    token = create_access_token(
        user_id=user.id,
        email=user.email,
        username=user.username,
        role=user.role,
        settings=settings,
        **kwargs,
    )
    return {"Authorization": f"Bearer {token}"}


def parse_set_cookie(header: str) -> tuple[str, str, dict[str, str]]:
    """Split a Set-Cookie header into (name, value, lowercased attributes)."""
    parts = [p.strip() for p in header.split(";") if p.strip()]
    name, _, value = parts[0].partition("=")
    attrs: dict[str, str] = {}
    for part in parts[1:]:
        key, _, val = part.partition("=")
        attrs[key.strip().lower()] = val.strip()
    return name, value, attrs


def add_post(
    factory: Callable[[], Session],
    *,
    title: str,
    status: PostStatus = PostStatus.PUBLISHED,
    published_at: datetime | None = None,
    **fields: Any,
) -> int:
    """Insert a post directly; published posts default to an hour ago. Returns the id."""
    if status == PostStatus.PUBLISHED and published_at is None:
        published_at = datetime.now(timezone.utc) - timedelta(hours=1)
    db = factory()
    try:
        post = Post(
            title=title,
            slug=fields.pop("slug", None) or slugify(title),
            content=fields.pop("content", f"<p>{title}</p>"),
            status=status.value,
            published_at=published_at,
            **fields,
        )
        db.add(post)
        db.commit()
        return post.id
    finally:
        db.close()
