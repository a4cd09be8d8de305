"""Core app configuration and database."""

from blogcms.core.config import get_settings, settings
from blogcms.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
