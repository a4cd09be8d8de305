"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

import logging
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from blogcms import __version__
from blogcms.api.deps import get_comment_limiter, get_login_throttle
from blogcms.api.errors import register_exception_handlers
from blogcms.api.routes import router as api_router
from blogcms.core.config import Settings, get_settings
from blogcms.core.csrf import CSRFMiddleware
from blogcms.core.ratelimit import CommentRateLimiter
from blogcms.core.throttle import LoginThrottle

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # Timestamps carry a Z suffix, so render them in UTC.
    logging.Formatter.converter = time.gmtime
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings | None = None,
    throttle: LoginThrottle | None = None,
    comment_limiter: CommentRateLimiter | None = None,
) -> FastAPI:
    """
    Build the application.

    Passing settings (and optionally a throttle or comment limiter) overrides the cached
    dependencies, so one process can host differently configured apps.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Blog CMS API",
        version=__version__,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )
    app.dependency_overrides[get_settings] = lambda: settings
    if throttle is None:
        throttle = LoginThrottle.from_settings(settings)
    app.dependency_overrides[get_login_throttle] = lambda: throttle
    if comment_limiter is None:
        comment_limiter = CommentRateLimiter.from_settings(settings)
    app.dependency_overrides[get_comment_limiter] = lambda: comment_limiter

    app.add_middleware(CSRFMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", settings.CSRF_HEADER_NAME],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Blog CMS API"}

    logger.info(
        "Application configured",
        extra={
            "environment": settings.APP_ENV,
            "cookie_mode": settings.AUTH_COOKIE_ENABLED,
            "csrf": settings.AUTH_COOKIE_ENABLED and settings.CSRF_PROTECTION,
        },
    )
    return app


app = create_app()
