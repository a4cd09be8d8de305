"""Tags: public listing and lookup, staff editing and merging, admin cleanup."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blogcms.api.deps import require_route
from blogcms.core.database import get_db
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.tag import (
    TagCleanupResponse,
    TagCreateRequest,
    TagMergeRequest,
    TagRead,
    TagUpdateRequest,
)
from blogcms.schemas.user import MessageResponse
from blogcms.services import tags as tags_service

router = APIRouter()

DbDep = Annotated[Session, Depends(get_db)]


@router.get("", response_model=list[TagRead])
def list_tags(db: DbDep, q: Annotated[str | None, Query(max_length=100)] = None) -> list[TagRead]:
    return [TagRead(**t) for t in tags_service.list_tags(db, q)]


@router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED)
def create_tag(
    body: TagCreateRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("tags.create"))],
    db: DbDep,
) -> TagRead:
    tag = tags_service.create_tag(db, body.name)
    return TagRead(**tags_service.tag_detail(db, tag))


@router.post("/merge", response_model=MessageResponse)
def merge_tags(
    body: TagMergeRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("tags.merge"))],
    db: DbDep,
) -> MessageResponse:
    """Fold sourceIds into targetId; posts end up tagged with the target once."""
    tags_service.merge_tags(db, body.source_ids, body.target_id)
    return MessageResponse(message="Tags merged")


@router.post("/cleanup-unused", response_model=TagCleanupResponse)
def cleanup_unused(
    _admin: Annotated[CurrentUser, Depends(require_route("tags.cleanup"))],
    db: DbDep,
) -> TagCleanupResponse:
    return TagCleanupResponse(deleted=tags_service.cleanup_unused(db))


@router.get("/{tag_id}", response_model=TagRead)
def get_tag(tag_id: int, db: DbDep) -> TagRead:
    return TagRead(**tags_service.tag_detail(db, tags_service.get_tag(db, tag_id)))


@router.put("/{tag_id}", response_model=TagRead)
def update_tag(
    tag_id: int,
    body: TagUpdateRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("tags.update"))],
    db: DbDep,
) -> TagRead:
    tag = tags_service.update_tag(db, tag_id, body.name)
    return TagRead(**tags_service.tag_detail(db, tag))


@router.delete("/{tag_id}", response_model=MessageResponse)
def delete_tag(
    tag_id: int,
    _admin: Annotated[CurrentUser, Depends(require_route("tags.delete"))],
    db: DbDep,
) -> MessageResponse:
    tags_service.delete_tag(db, tag_id)
    return MessageResponse(message="Tag deleted")
