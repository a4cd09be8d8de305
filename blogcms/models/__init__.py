"""SQLAlchemy ORM models."""

from blogcms.models.activity import ActivityLog
from blogcms.models.base import Base
from blogcms.models.category import Category
from blogcms.models.comment import Comment
from blogcms.models.newsletter import NewsletterSubscriber
from blogcms.models.post import Post, PostStatus, post_categories, post_tags
from blogcms.models.setting import Setting
from blogcms.models.tag import Tag
from blogcms.models.user import Role, User

__all__ = [
    "ActivityLog",
    "Base",
    "Category",
    "Comment",
    "NewsletterSubscriber",
    "Post",
    "PostStatus",
    "Role",
    "Setting",
    "Tag",
    "User",
    "post_categories",
    "post_tags",
]
