"""
Posts: public reading (visible posts only) and staff authoring.

Readers only ever see posts that are PUBLISHED with a publish time in the
past. Staff callers (posts.drafts) also get drafts, archived and scheduled
posts on the listing and by-id lookup.
"""

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blogcms.api.deps import can_access, get_optional_user, require_route
from blogcms.core.database import get_db
from blogcms.models import PostStatus
from blogcms.schemas.auth import CurrentUser
from blogcms.schemas.post import (
    BulkDeleteRequest,
    BulkStatusRequest,
    CountResponse,
    PostCreateRequest,
    PostPage,
    PostRead,
    PostStatsResponse,
    PostUpdateRequest,
    PrevNextResponse,
    ViewCountResponse,
)
from blogcms.schemas.user import MessageResponse
from blogcms.services import posts as posts_service
from blogcms.services.posts import PostFilters

router = APIRouter()

DbDep = Annotated[Session, Depends(get_db)]
OptionalUserDep = Annotated[CurrentUser | None, Depends(get_optional_user)]


def _read(posts) -> list[PostRead]:
    return [PostRead.from_post(p) for p in posts]


@router.get("", response_model=list[PostRead] | PostPage)
def list_posts(
    db: DbDep,
    principal: OptionalUserDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    post_status: Annotated[PostStatus | None, Query(alias="status")] = None,
    published: bool = False,
    sort_by: Annotated[
        Literal["createdAt", "updatedAt", "publishedAt", "title", "viewCount"], Query(alias="sortBy")
    ] = "createdAt",
    sort_order: Annotated[Literal["asc", "desc"], Query(alias="sortOrder")] = "desc",
    category_id: Annotated[int | None, Query(alias="categoryId")] = None,
    category: str | None = None,
    tag: str | None = None,
    date_from: Annotated[datetime | None, Query(alias="dateFrom")] = None,
    date_to: Annotated[datetime | None, Query(alias="dateTo")] = None,
    q: Annotated[str | None, Query(max_length=200)] = None,
    featured: bool = False,
    exclude: Annotated[list[int], Query()] = [],
    with_meta: Annotated[bool, Query(alias="withMeta")] = False,
) -> list[PostRead] | PostPage:
    """
    Filtered, sorted page of posts. status only applies for staff; category
    and tag are slugs. withMeta=true wraps the items with total/page/limit.
    """
    filters = PostFilters(
        page=page,
        limit=limit,
        status=post_status,
        published=published,
        sort_by=sort_by,
        sort_order=sort_order,
        category_id=category_id,
        category_slug=category,
        tag_slug=tag,
        date_from=date_from,
        date_to=date_to,
        q=q,
        featured=featured,
        exclude_ids=exclude,
    )
    items, total = posts_service.list_posts(
        db, filters, include_drafts=can_access(principal, "posts.drafts")
    )
    if with_meta:
        return PostPage(items=_read(items), total=total, page=page, limit=limit)
    return _read(items)


# Fixed paths are declared before /{post_id} so they are not parsed as ids.
@router.get("/slug/{slug}", response_model=PostRead)
def get_post_by_slug(slug: str, db: DbDep) -> PostRead:
    return PostRead.from_post(posts_service.get_by_slug(db, slug))


@router.get("/search", response_model=list[PostRead])
def search_posts(db: DbDep, q: Annotated[str | None, Query(max_length=200)] = None) -> list[PostRead]:
    """Up to 50 visible posts matching q in title, excerpt or body; empty q returns []."""
    return _read(posts_service.search_posts(db, q))


@router.get("/stats", response_model=PostStatsResponse)
def post_stats(
    _staff: Annotated[CurrentUser, Depends(require_route("posts.stats"))],
    db: DbDep,
) -> PostStatsResponse:
    return PostStatsResponse.from_stats(posts_service.post_stats(db))


@router.get("/scheduled", response_model=list[PostRead])
def scheduled_posts(
    _staff: Annotated[CurrentUser, Depends(require_route("posts.scheduled"))],
    db: DbDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    date_from: Annotated[datetime | None, Query(alias="dateFrom")] = None,
    date_to: Annotated[datetime | None, Query(alias="dateTo")] = None,
) -> list[PostRead]:
    """Published posts whose publish time has not arrived yet, soonest first."""
    return _read(posts_service.scheduled_posts(db, limit=limit, date_from=date_from, date_to=date_to))


@router.get("/category/{slug}", response_model=list[PostRead])
def posts_by_category(slug: str, db: DbDep) -> list[PostRead]:
    return _read(posts_service.posts_by_category_slug(db, slug))


@router.get("/tag/{slug}", response_model=list[PostRead])
def posts_by_tag(slug: str, db: DbDep) -> list[PostRead]:
    return _read(posts_service.posts_by_tag_slug(db, slug))


@router.post("/bulk/status", response_model=CountResponse)
def bulk_status(
    body: BulkStatusRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("posts.bulk_status"))],
    db: DbDep,
) -> CountResponse:
    count = posts_service.bulk_update_status(db, body.ids, body.status, body.published_at)
    return CountResponse(count=count)


@router.post("/bulk/delete", response_model=CountResponse)
def bulk_delete(
    body: BulkDeleteRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("posts.bulk_delete"))],
    db: DbDep,
) -> CountResponse:
    return CountResponse(count=posts_service.bulk_delete(db, body.ids))


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    body: PostCreateRequest,
    author: Annotated[CurrentUser, Depends(require_route("posts.create"))],
    db: DbDep,
) -> PostRead:
    """New post by the caller; HTML content is sanitized and the slug made unique."""
    post = posts_service.create_post(db, body.model_dump(exclude_unset=True), author.id)
    return PostRead.from_post(post)


@router.post("/{post_id}/view", response_model=ViewCountResponse)
def count_view(post_id: int, db: DbDep) -> ViewCountResponse:
    return ViewCountResponse(view_count=posts_service.increment_view(db, post_id))


@router.get("/{post_id}/related", response_model=list[PostRead])
def related_posts(
    post_id: int,
    db: DbDep,
    limit: Annotated[int, Query(ge=1, le=10)] = 3,
) -> list[PostRead]:
    return _read(posts_service.related_posts(db, post_id, limit))


@router.get("/{post_id}/prev-next", response_model=PrevNextResponse)
def prev_next(post_id: int, db: DbDep) -> PrevNextResponse:
    prev, nxt = posts_service.prev_next(db, post_id)
    return PrevNextResponse(
        prev=PostRead.from_post(prev) if prev else None,
        next=PostRead.from_post(nxt) if nxt else None,
    )


@router.post("/{post_id}/duplicate", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def duplicate_post(
    post_id: int,
    author: Annotated[CurrentUser, Depends(require_route("posts.duplicate"))],
    db: DbDep,
) -> PostRead:
    return PostRead.from_post(posts_service.duplicate_post(db, post_id, author.id))


@router.get("/{post_id}", response_model=PostRead)
def get_post(post_id: int, db: DbDep, principal: OptionalUserDep) -> PostRead:
    post = posts_service.get_post(db, post_id, include_drafts=can_access(principal, "posts.drafts"))
    return PostRead.from_post(post)


@router.put("/{post_id}", response_model=PostRead)
def update_post(
    post_id: int,
    body: PostUpdateRequest,
    _staff: Annotated[CurrentUser, Depends(require_route("posts.update"))],
    db: DbDep,
) -> PostRead:
    return PostRead.from_post(posts_service.update_post(db, post_id, body.model_dump(exclude_unset=True)))


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    _staff: Annotated[CurrentUser, Depends(require_route("posts.delete"))],
    db: DbDep,
) -> MessageResponse:
    posts_service.delete_post(db, post_id)
    return MessageResponse(message="Post deleted")
