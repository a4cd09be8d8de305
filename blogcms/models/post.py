"""ORM models for blog posts and their category/tag links."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from blogcms.models.base import Base


class PostStatus(str, Enum):
    """Lifecycle of a post. Only PUBLISHED posts whose published_at has passed are public."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


post_categories = Table(
    "post_categories",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base):
    """
    Blog post. content is sanitized HTML; markdown is the editor source.

    A PUBLISHED post with a future published_at is scheduled, not yet visible.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    excerpt = Column(String(500), nullable=True)
    content = Column(Text, nullable=False, default="")
    markdown = Column(Text, nullable=False, default="")
    cover_image = Column(String(2048), nullable=True)
    status = Column(String(16), nullable=False, default=PostStatus.DRAFT.value, index=True)
    featured = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(String(500), nullable=True)
    meta_keywords = Column(String(500), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    author = relationship("User", lazy="joined")
    categories = relationship(
        "Category", secondary=post_categories, back_populates="posts", order_by="Category.name"
    )
    tags = relationship("Tag", secondary=post_tags, back_populates="posts", order_by="Tag.name")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
