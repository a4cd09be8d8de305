"""Posts: listing and lookup for readers, authoring and bulk actions for staff, dashboard stats."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from blogcms.core.errors import BadRequest, Conflict, NotFound
from blogcms.models import Category, Post, PostStatus, Tag, post_categories, post_tags
from blogcms.services.sanitize import sanitize_html
from blogcms.services.slugs import slugify

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "publishedAt": Post.published_at,
    "title": Post.title,
    "viewCount": Post.view_count,
}

MAX_PAGE_SIZE = 100
SEARCH_LIMIT = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def visible(now: datetime):
    """Filter for posts readers may see: published, and the publish time has passed."""
    return and_(Post.status == PostStatus.PUBLISHED.value, Post.published_at <= now)


def _text_match(term: str):
    return or_(
        Post.title.icontains(term, autoescape=True),
        Post.excerpt.icontains(term, autoescape=True),
        Post.content.icontains(term, autoescape=True),
        Post.markdown.icontains(term, autoescape=True),
    )


@dataclass
class PostFilters:
    """Query options for the post listing. Readers only ever get visible posts."""

    page: int = 1
    limit: int = 10
    status: PostStatus | None = None
    published: bool = False
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    category_id: int | None = None
    category_slug: str | None = None
    tag_slug: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    q: str | None = None
    featured: bool = False
    exclude_ids: list[int] = field(default_factory=list)


def _filtered(db: Session, filters: PostFilters, *, include_drafts: bool, now: datetime) -> Query:
    query = db.query(Post)
    if not include_drafts:
        query = query.filter(visible(now))
    elif filters.status is not None:
        query = query.filter(Post.status == filters.status.value)
    elif filters.published:
        query = query.filter(visible(now))

    if filters.category_id is not None:
        query = query.filter(Post.categories.any(Category.id == filters.category_id))
    elif filters.category_slug:
        query = query.filter(Post.categories.any(Category.slug == filters.category_slug))
    if filters.tag_slug:
        query = query.filter(Post.tags.any(Tag.slug == filters.tag_slug))
    if filters.date_from is not None:
        query = query.filter(Post.published_at >= as_utc(filters.date_from))
    if filters.date_to is not None:
        query = query.filter(Post.published_at <= as_utc(filters.date_to))
    term = (filters.q or "").strip()
    if term:
        query = query.filter(_text_match(term))
    if filters.featured:
        query = query.filter(Post.featured.is_(True))
    if filters.exclude_ids:
        query = query.filter(Post.id.notin_(filters.exclude_ids))
    return query


def list_posts(db: Session, filters: PostFilters, *, include_drafts: bool = False) -> tuple[list[Post], int]:
    """One page of posts and the total matching count."""
    page = max(1, filters.page)
    limit = min(max(1, filters.limit), MAX_PAGE_SIZE)
    query = _filtered(db, filters, include_drafts=include_drafts, now=utcnow())
    total = query.count()
    column = SORT_COLUMNS.get(filters.sort_by, Post.created_at)
    ordering = column.asc() if filters.sort_order.lower() == "asc" else column.desc()
    items = query.order_by(ordering, Post.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return items, total


def get_post(db: Session, post_id: int, *, include_drafts: bool = False) -> Post:
    query = db.query(Post).filter(Post.id == post_id)
    if not include_drafts:
        query = query.filter(visible(utcnow()))
    post = query.first()
    if post is None:
        raise NotFound("Post not found")
    return post


def get_by_slug(db: Session, slug: str) -> Post:
    post = db.query(Post).filter(Post.slug == slug, visible(utcnow())).first()
    if post is None:
        raise NotFound("Post not found")
    return post


def search_posts(db: Session, q: str | None) -> list[Post]:
    term = (q or "").strip()
    if not term:
        return []
    return (
        db.query(Post)
        .filter(visible(utcnow()), _text_match(term))
        .order_by(Post.created_at.desc())
        .limit(SEARCH_LIMIT)
        .all()
    )


def posts_by_category_slug(db: Session, slug: str) -> list[Post]:
    return (
        db.query(Post)
        .filter(visible(utcnow()), Post.categories.any(Category.slug == slug))
        .order_by(Post.created_at.desc())
        .all()
    )


def posts_by_tag_slug(db: Session, slug: str) -> list[Post]:
    return (
        db.query(Post)
        .filter(visible(utcnow()), Post.tags.any(Tag.slug == slug))
        .order_by(Post.created_at.desc())
        .all()
    )


def increment_view(db: Session, post_id: int) -> int:
    updated = (
        db.query(Post)
        .filter(Post.id == post_id)
        .update({Post.view_count: Post.view_count + 1}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise NotFound("Post not found")
    db.commit()
    return db.query(Post.view_count).filter(Post.id == post_id).scalar()


def related_posts(db: Session, post_id: int, limit: int = 3) -> list[Post]:
    """Visible posts sharing a category or tag with post_id, most viewed first."""
    base = db.query(Post).filter(Post.id == post_id).first()
    if base is None:
        raise NotFound("Post not found")
    category_ids = [c.id for c in base.categories]
    tag_ids = [t.id for t in base.tags]
    query = db.query(Post).filter(visible(utcnow()), Post.id != post_id)
    shared = []
    if category_ids:
        shared.append(Post.categories.any(Category.id.in_(category_ids)))
    if tag_ids:
        shared.append(Post.tags.any(Tag.id.in_(tag_ids)))
    if shared:
        query = query.filter(or_(*shared))
    limit = max(1, min(10, limit))
    return query.order_by(Post.view_count.desc(), Post.published_at.desc()).limit(limit).all()


def prev_next(db: Session, post_id: int) -> tuple[Post | None, Post | None]:
    """Visible neighbours by publish time; a post never published pivots on its creation time."""
    current = db.query(Post).filter(Post.id == post_id).first()
    if current is None:
        raise NotFound("Post not found")
    pivot = current.published_at or current.created_at
    now = utcnow()
    prev = (
        db.query(Post)
        .filter(visible(now), Post.published_at < pivot)
        .order_by(Post.published_at.desc())
        .first()
    )
    nxt = (
        db.query(Post)
        .filter(visible(now), Post.published_at > pivot)
        .order_by(Post.published_at.asc())
        .first()
    )
    return prev, nxt


def scheduled_posts(
    db: Session,
    *,
    limit: int = 20,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[Post]:
    """Published posts whose publish time is still ahead, soonest first."""
    query = db.query(Post).filter(
        Post.status == PostStatus.PUBLISHED.value, Post.published_at > utcnow()
    )
    if date_from is not None:
        query = query.filter(Post.published_at >= as_utc(date_from))
    if date_to is not None:
        query = query.filter(Post.published_at <= as_utc(date_to))
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    return query.order_by(Post.published_at.asc()).limit(limit).all()


def ensure_unique_slug(db: Session, base: str, exclude_id: int | None = None) -> str:
    """base, or base-1, base-2, ... whichever is free first."""
    slug = base
    suffix = 1
    while True:
        query = db.query(Post.id).filter(Post.slug == slug)
        if exclude_id is not None:
            query = query.filter(Post.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


def _load(db: Session, model: type, ids: list[int], label: str) -> list:
    ids = list(dict.fromkeys(ids))
    if not ids:
        return []
    rows = db.query(model).filter(model.id.in_(ids)).all()
    found = {row.id for row in rows}
    missing = [i for i in ids if i not in found]
    if missing:
        raise BadRequest(f"Unknown {label} id(s)", detail={"ids": missing})
    by_id = {row.id: row for row in rows}
    return [by_id[i] for i in ids]


def _commit_or_conflict(db: Session) -> None:
    # The slug index still decides races between ensure_unique_slug and the commit.
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Post with this slug already exists") from e


def create_post(db: Session, data: dict[str, Any], author_id: int | None) -> Post:
    """
    New post. published=True makes it PUBLISHED at published_at (default now);
    otherwise it is a DRAFT with no publish time. The slug comes from the given
    slug or the title and is made unique with a numeric suffix.
    """
    title = (data.get("title") or "").strip()
    if not title:
        raise BadRequest("Title is required")
    base = slugify((data.get("slug") or "").strip() or title)
    if not base:
        raise BadRequest("Title must contain letters or digits")
    status = PostStatus.PUBLISHED if data.get("published") else PostStatus.DRAFT
    published_at = None
    if status == PostStatus.PUBLISHED:
        published_at = as_utc(data.get("published_at")) or utcnow()

    category_ids = data.get("category_ids") or []
    if not category_ids and data.get("category_id") is not None:
        category_ids = [data["category_id"]]

    post = Post(
        title=title,
        slug=ensure_unique_slug(db, base),
        excerpt=data.get("excerpt"),
        content=sanitize_html(data.get("content")),
        markdown=data.get("markdown") or "",
        cover_image=data.get("featured_image"),
        status=status.value,
        featured=bool(data.get("featured")),
        published_at=published_at,
        author_id=author_id,
        meta_title=data.get("meta_title"),
        meta_description=data.get("meta_description"),
        meta_keywords=data.get("meta_keywords"),
        view_count=0,
    )
    post.categories = _load(db, Category, category_ids, "category")
    post.tags = _load(db, Tag, data.get("tag_ids") or [], "tag")
    db.add(post)
    _commit_or_conflict(db)
    db.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "status": post.status})
    return post


def _status_change(changes: dict[str, Any]) -> PostStatus | None:
    if changes.get("status") is not None:
        return PostStatus(changes["status"])
    if isinstance(changes.get("published"), bool):
        return PostStatus.PUBLISHED if changes["published"] else PostStatus.DRAFT
    return None


def update_post(db: Session, post_id: int, changes: dict[str, Any]) -> Post:
    """
    Partial edit; only keys present in changes apply.

    An explicit status wins over the published flag. Publishing stamps
    published_at (given value or now), returning to DRAFT clears it and
    ARCHIVED keeps it. category_ids (or a single category_id) and tag_ids
    replace the current links.
    """
    post = get_post(db, post_id, include_drafts=True)

    if "slug" in changes and changes["slug"] is not None:
        base = slugify(changes["slug"].strip())
        if base:
            post.slug = ensure_unique_slug(db, base, exclude_id=post.id)

    status = _status_change(changes)
    given_published_at = as_utc(changes.get("published_at"))
    if status is not None:
        post.status = status.value
        if status == PostStatus.PUBLISHED:
            post.published_at = given_published_at or utcnow()
        elif status == PostStatus.DRAFT:
            post.published_at = None
    elif given_published_at is not None:
        post.published_at = given_published_at

    if changes.get("title") is not None:
        title = changes["title"].strip()
        if not title:
            raise BadRequest("Title is required")
        post.title = title
    if changes.get("content") is not None:
        post.content = sanitize_html(changes["content"])
    if changes.get("markdown") is not None:
        post.markdown = changes["markdown"]
    if isinstance(changes.get("featured"), bool):
        post.featured = changes["featured"]
    if "featured_image" in changes:
        post.cover_image = changes["featured_image"]
    for name in ("excerpt", "meta_title", "meta_description", "meta_keywords"):
        if name in changes:
            setattr(post, name, changes[name])

    if changes.get("category_ids") is not None:
        post.categories = _load(db, Category, changes["category_ids"], "category")
    elif "category_id" in changes:
        category_id = changes["category_id"]
        post.categories = _load(db, Category, [category_id] if category_id is not None else [], "category")
    if changes.get("tag_ids") is not None:
        post.tags = _load(db, Tag, changes["tag_ids"], "tag")

    _commit_or_conflict(db)
    db.refresh(post)
    logger.info("Post updated", extra={"post_id": post.id, "fields": sorted(changes)})
    return post


def duplicate_post(db: Session, post_id: int, author_id: int | None) -> Post:
    """Draft copy titled '<title> (Copy)' with slug '<slug>-copy' (suffixed if taken)."""
    original = get_post(db, post_id, include_drafts=True)
    clone = Post(
        title=f"{original.title} (Copy)"[:200],
        slug=ensure_unique_slug(db, f"{original.slug}-copy"),
        excerpt=original.excerpt,
        content=original.content,
        markdown=original.markdown,
        cover_image=original.cover_image,
        status=PostStatus.DRAFT.value,
        featured=bool(original.featured),
        published_at=None,
        author_id=author_id or original.author_id,
        meta_title=original.meta_title,
        meta_description=original.meta_description,
        meta_keywords=original.meta_keywords,
        view_count=0,
    )
    clone.categories = list(original.categories)
    clone.tags = list(original.tags)
    db.add(clone)
    _commit_or_conflict(db)
    db.refresh(clone)
    logger.info("Post duplicated", extra={"post_id": original.id, "copy_id": clone.id})
    return clone


def delete_post(db: Session, post_id: int) -> None:
    post = get_post(db, post_id, include_drafts=True)
    db.delete(post)
    db.commit()
    logger.info("Post deleted", extra={"post_id": post_id})


def bulk_update_status(
    db: Session, ids: list[int], status: PostStatus, published_at: datetime | None = None
) -> int:
    """Set status on every listed post; publish time follows the same rules as update_post."""
    if not ids:
        return 0
    values: dict[Any, Any] = {Post.status: status.value}
    if status == PostStatus.PUBLISHED:
        values[Post.published_at] = as_utc(published_at) or utcnow()
    elif status == PostStatus.DRAFT:
        values[Post.published_at] = None
    count = db.query(Post).filter(Post.id.in_(ids)).update(values, synchronize_session=False)
    db.commit()
    logger.info("Post status bulk update", extra={"status": status.value, "count": count})
    return count


def bulk_delete(db: Session, ids: list[int]) -> int:
    if not ids:
        return 0
    posts = db.query(Post).filter(Post.id.in_(ids)).all()
    for post in posts:
        db.delete(post)
    db.commit()
    logger.info("Posts bulk deleted", extra={"count": len(posts)})
    return len(posts)


def _month_start(now: datetime, months_back: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months_back
    return datetime(month_index // 12, month_index % 12 + 1, 1, tzinfo=timezone.utc)


def _top_terms(db: Session, model: type, link_table, link_column, now: datetime) -> list[dict[str, Any]]:
    """Up to ten categories or tags ranked by visible posts."""
    count = func.count(link_table.c.post_id)
    rows = (
        db.query(model.id, model.name, model.slug, count)
        .join(link_table, link_column == model.id)
        .join(Post, Post.id == link_table.c.post_id)
        .filter(visible(now))
        .group_by(model.id, model.name, model.slug)
        .order_by(count.desc(), model.name.asc())
        .limit(10)
        .all()
    )
    return [{"id": r[0], "name": r[1], "slug": r[2], "count": r[3]} for r in rows]


def post_stats(db: Session) -> dict[str, Any]:
    """Dashboard numbers: counts, recent edits, monthly output, most viewed, top categories and tags."""
    now = utcnow()
    counts = {
        "posts": db.query(func.count(Post.id)).scalar(),
        "drafts": db.query(func.count(Post.id)).filter(Post.status == PostStatus.DRAFT.value).scalar(),
        "published": db.query(func.count(Post.id)).filter(Post.status == PostStatus.PUBLISHED.value).scalar(),
        "views": db.query(func.coalesce(func.sum(Post.view_count), 0)).scalar(),
        "categories": db.query(func.count(Category.id)).scalar(),
        "tags": db.query(func.count(Tag.id)).scalar(),
    }
    recent = db.query(Post).order_by(Post.updated_at.desc(), Post.id.desc()).limit(5).all()

    months = [_month_start(now, back) for back in range(11, -1, -1)]
    series = {f"{m.year}-{m.month:02d}": 0 for m in months}
    for (created_at,) in db.query(Post.created_at).filter(Post.created_at >= months[0]).all():
        key = f"{created_at.year}-{created_at.month:02d}"
        if key in series:
            series[key] += 1

    popular = (
        db.query(Post.title, Post.view_count)
        .filter(Post.status == PostStatus.PUBLISHED.value)
        .order_by(Post.view_count.desc(), Post.id.asc())
        .limit(5)
        .all()
    )
    return {
        "counts": counts,
        "recent": recent,
        "series": {
            "posts_over_time": [{"month": k, "count": v} for k, v in series.items()],
            "popular_posts": [{"title": title, "views": views} for title, views in popular],
        },
        "content": {
            "categories_top": _top_terms(db, Category, post_categories, post_categories.c.category_id, now),
            "tags_top": _top_terms(db, Tag, post_tags, post_tags.c.tag_id, now),
        },
    }
