"""ORM model for key/value site settings."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from blogcms.models.base import Base


class Setting(Base):
    """
    One configuration entry. The literal key is kept as written; consumers
    compare normalized keys (see services.settings.normalize_key).
    """

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(255), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False, default="")
    type = Column(String(16), nullable=False, default="string")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
