"""Engine, per-request sessions and the connectivity probe used by health checks."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from blogcms.core.config import settings


def engine_options(database_url: str, *, echo: bool = False) -> dict[str, Any]:
    """
    create_engine keyword arguments for a URL.

    SQLite connections are shared across the request threadpool; an in-memory
    database must also stay on one connection or each session sees an empty schema.
    """
    options: dict[str, Any] = {"echo": echo}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL, echo=settings.DEBUG))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """True when a trivial query succeeds."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
