"""API routes."""

from fastapi import APIRouter

from blogcms.api.routes import (
    auth,
    categories,
    comments,
    health,
    newsletter,
    posts,
    settings,
    tags,
    upload,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
router.include_router(newsletter.router, prefix="/newsletter", tags=["newsletter"])
