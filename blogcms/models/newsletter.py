"""ORM model for newsletter subscribers."""

from sqlalchemy import Column, DateTime, Integer, String, func

from blogcms.models.base import Base


class NewsletterSubscriber(Base):
    """One subscribed address, stored lowercased."""

    __tablename__ = "newsletter_subscribers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    subscribed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
