"""ORM model for per-user activity entries (profile edits, password changes, logins)."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from blogcms.models.base import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action = Column(String(64), nullable=False)
    # "metadata" is reserved on declarative classes, so the attribute is named details.
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
