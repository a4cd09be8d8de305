"""Request/response schemas for posts."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from blogcms.models import Post, PostStatus
from blogcms.models.user import Role

TITLE_MAX_LEN = 200
EXCERPT_MAX_LEN = 500

# Author roles as the public site labels them.
AUTHOR_ROLE_LABELS = {Role.ADMIN.value: "admin", Role.EDITOR.value: "editor"}


class PostWriteFields(BaseModel):
    excerpt: str | None = Field(default=None, max_length=EXCERPT_MAX_LEN)
    slug: str | None = None
    featured_image: str | None = Field(
        default=None, max_length=2048, validation_alias=AliasChoices("featured_image", "featuredImage")
    )
    category_id: int | None = Field(default=None, validation_alias=AliasChoices("category_id", "categoryId"))
    category_ids: list[int] | None = Field(default=None, validation_alias=AliasChoices("category_ids", "categoryIds"))
    tag_ids: list[int] | None = Field(default=None, validation_alias=AliasChoices("tag_ids", "tagIds"))
    published: bool | None = None
    published_at: datetime | None = Field(default=None, validation_alias=AliasChoices("published_at", "publishedAt"))
    markdown: str | None = None
    featured: bool | None = None
    meta_title: str | None = Field(default=None, max_length=255, validation_alias=AliasChoices("meta_title", "metaTitle"))
    meta_description: str | None = Field(
        default=None, max_length=500, validation_alias=AliasChoices("meta_description", "metaDescription")
    )
    meta_keywords: str | None = Field(
        default=None, max_length=500, validation_alias=AliasChoices("meta_keywords", "metaKeywords")
    )


class PostCreateRequest(PostWriteFields):
    title: str = Field(..., max_length=TITLE_MAX_LEN)
    content: str


class PostUpdateRequest(PostWriteFields):
    """Partial edit; only fields sent are applied. status wins over published."""

    title: str | None = Field(default=None, max_length=TITLE_MAX_LEN)
    content: str | None = None
    status: PostStatus | None = None


class PostAuthor(BaseModel):
    id: int
    email: str
    name: str
    role: str


class PostTerm(BaseModel):
    id: int
    name: str
    slug: str


class PostRead(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    markdown: str
    excerpt: str | None = None
    featured_image: str | None = None
    featured: bool
    published: bool
    status: PostStatus
    published_at: datetime | None = None
    author_id: int | None = None
    author: PostAuthor | None = None
    categories: list[PostTerm] = []
    tags: list[PostTerm] = []
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None
    view_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_post(cls, post: Post) -> "PostRead":
        author = None
        if post.author is not None:
            name = " ".join(p for p in (post.author.first_name, post.author.last_name) if p)
            author = PostAuthor(
                id=post.author.id,
                email=post.author.email,
                name=name or post.author.username or "Anonymous",
                role=AUTHOR_ROLE_LABELS.get(post.author.role, "author"),
            )
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            content=post.content or "",
            markdown=post.markdown or "",
            excerpt=post.excerpt,
            featured_image=post.cover_image,
            featured=bool(post.featured),
            published=post.status == PostStatus.PUBLISHED.value,
            status=PostStatus(post.status),
            published_at=post.published_at,
            author_id=post.author_id,
            author=author,
            categories=[PostTerm(id=c.id, name=c.name, slug=c.slug) for c in post.categories],
            tags=[PostTerm(id=t.id, name=t.name, slug=t.slug) for t in post.tags],
            meta_title=post.meta_title,
            meta_description=post.meta_description,
            meta_keywords=post.meta_keywords,
            view_count=post.view_count or 0,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostPage(BaseModel):
    """Listing with paging metadata (withMeta=true)."""

    items: list[PostRead]
    total: int
    page: int
    limit: int


class PrevNextResponse(BaseModel):
    prev: PostRead | None = None
    next: PostRead | None = None


class ViewCountResponse(BaseModel):
    view_count: int


class BulkStatusRequest(BaseModel):
    ids: list[int] = Field(default_factory=list)
    status: PostStatus
    published_at: datetime | None = Field(default=None, validation_alias=AliasChoices("published_at", "publishedAt"))


class BulkDeleteRequest(BaseModel):
    ids: list[int] = Field(default_factory=list)


class CountResponse(BaseModel):
    count: int


class StatsCounts(BaseModel):
    posts: int
    drafts: int
    published: int
    views: int
    categories: int
    tags: int


class MonthCount(BaseModel):
    month: str
    count: int


class PopularPost(BaseModel):
    title: str
    views: int


class StatsSeries(BaseModel):
    posts_over_time: list[MonthCount]
    popular_posts: list[PopularPost]


class TermCount(PostTerm):
    count: int


class StatsContent(BaseModel):
    categories_top: list[TermCount]
    tags_top: list[TermCount]


class PostStatsResponse(BaseModel):
    counts: StatsCounts
    recent: list[PostRead]
    series: StatsSeries
    content: StatsContent

    @classmethod
    def from_stats(cls, stats: dict[str, Any]) -> "PostStatsResponse":
        return cls(
            counts=StatsCounts(**stats["counts"]),
            recent=[PostRead.from_post(p) for p in stats["recent"]],
            series=StatsSeries(**stats["series"]),
            content=StatsContent(**stats["content"]),
        )
