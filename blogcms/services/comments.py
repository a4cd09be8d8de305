"""Reader comments: public listing and submission, admin moderation."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from blogcms.core.errors import BadRequest, NotFound
from blogcms.core.ratelimit import CommentRateLimiter
from blogcms.models import Comment, Post
from blogcms.services.posts import utcnow, visible

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _paging(limit: int | None, offset: int | None) -> tuple[int, int]:
    limit = DEFAULT_PAGE_SIZE if limit is None else limit
    return min(max(1, limit), MAX_PAGE_SIZE), max(0, offset or 0)


def list_for_post(db: Session, post_id: int, *, limit: int | None = None, offset: int | None = None) -> list[Comment]:
    """Approved comments on a post, oldest first."""
    limit, offset = _paging(limit, offset)
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id, Comment.approved.is_(True))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def create_comment(
    db: Session,
    data: dict[str, Any],
    *,
    client: str | None,
    limiter: CommentRateLimiter,
) -> Comment:
    """
    Store a pending (unapproved) comment on a visible post.

    A filled honeypot or an unknown post is rejected before the client's
    rate limit is charged, so only real submissions count against it.
    """
    content = (data.get("content") or "").strip()
    if not content:
        raise BadRequest("content is required")
    if data.get("honeypot"):
        logger.info("Comment honeypot triggered", extra={"client": client})
        raise BadRequest("Invalid submission")
    post_id = data.get("post_id")
    post = db.query(Post.id).filter(Post.id == post_id, visible(utcnow())).first()
    if post is None:
        raise BadRequest("Invalid postId")

    limiter.hit(client)

    comment = Comment(
        post_id=post_id,
        content=content,
        author_name=(data.get("author_name") or "").strip() or None,
        author_email=(data.get("author_email") or "").strip() or None,
        approved=False,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("Comment submitted", extra={"comment_id": comment.id, "post_id": post_id})
    return comment


def admin_list(
    db: Session,
    *,
    post_id: int | None = None,
    approved: bool | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Comment]:
    """All comments, newest first, optionally narrowed to one post or approval state."""
    limit, offset = _paging(limit, offset)
    query = db.query(Comment)
    if post_id is not None:
        query = query.filter(Comment.post_id == post_id)
    if approved is not None:
        query = query.filter(Comment.approved.is_(approved))
    return query.order_by(Comment.created_at.desc(), Comment.id.desc()).offset(offset).limit(limit).all()


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def set_approval(db: Session, comment_id: int, approved: bool) -> Comment:
    comment = get_comment(db, comment_id)
    comment.approved = approved
    db.commit()
    db.refresh(comment)
    logger.info("Comment moderated", extra={"comment_id": comment_id, "approved": approved})
    return comment


def delete_comment(db: Session, comment_id: int) -> None:
    comment = get_comment(db, comment_id)
    db.delete(comment)
    db.commit()
    logger.info("Comment deleted", extra={"comment_id": comment_id})
