"""ORM model for reader comments on posts."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from blogcms.models.base import Base


class Comment(Base):
    """Anonymous reader comment. Hidden from the public listing until approved."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_name = Column(String(100), nullable=True)
    author_email = Column(String(200), nullable=True)
    content = Column(Text, nullable=False)
    approved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    post = relationship("Post", back_populates="comments")
