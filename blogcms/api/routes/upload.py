"""Image upload endpoints (admin and editor): multipart field 'file'."""

from typing import Annotated

from fastapi import APIRouter, Depends, UploadFile, status
from starlette.concurrency import run_in_threadpool

from blogcms.api.deps import SettingsDep, require_route
from blogcms.core.config import Settings
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.upload import UploadResponse
from blogcms.services.uploads import store_upload

router = APIRouter()


async def _store(kind: str, file: UploadFile, settings: Settings, max_bytes: int) -> UploadResponse:
    # Read one byte past the limit so oversized files are detected without buffering all of them.
    data = await file.read(max_bytes + 1)
    stored = await run_in_threadpool(
        store_upload, settings.UPLOAD_DIR, kind, data, file.content_type, max_bytes
    )
    return UploadResponse(url=stored.url)


@router.post("/image", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile,
    _user: Annotated[CurrentUser, Depends(require_route("upload.image"))],
    settings: SettingsDep,
) -> UploadResponse:
    """Store an inline post image under /uploads/images/."""
    return await _store("image", file, settings, settings.UPLOAD_MAX_BYTES)


@router.post("/cover", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_cover(
    file: UploadFile,
    _user: Annotated[CurrentUser, Depends(require_route("upload.cover"))],
    settings: SettingsDep,
) -> UploadResponse:
    """Store a post cover image under /uploads/covers/."""
    return await _store("cover", file, settings, settings.UPLOAD_MAX_BYTES)


@router.post("/avatar", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_avatar(
    file: UploadFile,
    _user: Annotated[CurrentUser, Depends(require_route("upload.avatar"))],
    settings: SettingsDep,
) -> UploadResponse:
    """Store an avatar under /uploads/avatars/ (smaller size limit)."""
    return await _store("avatar", file, settings, settings.AVATAR_MAX_BYTES)
