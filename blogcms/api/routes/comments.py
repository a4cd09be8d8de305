"""Reader comments: public listing and submission, admin moderation."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blogcms.api.deps import CommentLimiterDep, client_ip, require_route
from blogcms.core.database import get_db
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.comment import CommentApprovalRequest, CommentCreateRequest, CommentRead
from blogcms.schemas.user import MessageResponse
from blogcms.services import comments as comments_service

router = APIRouter()

DbDep = Annotated[Session, Depends(get_db)]


@router.get("/by-post/{post_id}", response_model=list[CommentRead])
def list_post_comments(
    post_id: int,
    db: DbDep,
    limit: int = 20,
    offset: int = 0,
) -> list[CommentRead]:
    """Approved comments, oldest first. limit is clamped to 1..100."""
    comments = comments_service.list_for_post(db, post_id, limit=limit, offset=offset)
    return [CommentRead.model_validate(c) for c in comments]


@router.post("", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    body: CommentCreateRequest,
    db: DbDep,
    limiter: CommentLimiterDep,
    client: Annotated[str | None, Depends(client_ip)],
) -> CommentRead:
    """Submit a comment; it stays hidden until an admin approves it. 429 when the caller posts too fast."""
    comment = comments_service.create_comment(db, body.model_dump(), client=client, limiter=limiter)
    return CommentRead.model_validate(comment)


@router.get("/admin", response_model=list[CommentRead])
def admin_list(
    _admin: Annotated[CurrentUser, Depends(require_route("comments.admin_list"))],
    db: DbDep,
    post_id: Annotated[int | None, Query(alias="postId")] = None,
    approved: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[CommentRead]:
    """Every comment, newest first, optionally filtered by post or approval state."""
    comments = comments_service.admin_list(db, post_id=post_id, approved=approved, limit=limit, offset=offset)
    return [CommentRead.model_validate(c) for c in comments]


@router.patch("/{comment_id}/approve", response_model=CommentRead)
def set_approval(
    comment_id: int,
    body: CommentApprovalRequest,
    _admin: Annotated[CurrentUser, Depends(require_route("comments.approve"))],
    db: DbDep,
) -> CommentRead:
    return CommentRead.model_validate(comments_service.set_approval(db, comment_id, body.approved))


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    _admin: Annotated[CurrentUser, Depends(require_route("comments.delete"))],
    db: DbDep,
) -> MessageResponse:
    comments_service.delete_comment(db, comment_id)
    return MessageResponse(message="Comment deleted")
