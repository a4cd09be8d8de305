"""ORM model for post categories."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from blogcms.models.base import Base
from blogcms.models.post import post_categories


class Category(Base):
    """Named grouping of posts. Display order lives in the categories_order setting."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=True)
    color = Column(String(30), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    posts = relationship("Post", secondary=post_categories, back_populates="categories")
