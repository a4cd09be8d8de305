"""Best-effort per-user activity log."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogcms.models import ActivityLog

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 20


def log_activity(db: Session, user_id: int, action: str, details: dict[str, Any] | None = None) -> None:
    """
    Record an activity entry and commit it.

    Failures are logged and rolled back; they never fail the caller's operation.
    """
    try:
        db.add(ActivityLog(user_id=user_id, action=action, details=details))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(
            "Activity log write failed",
            extra={"user_id": user_id, "action": action, "error": str(e)[:200]},
        )


def recent_activity(db: Session, user_id: int, limit: int = RECENT_ACTIVITY_LIMIT) -> list[ActivityLog]:
    """Latest entries for a user, newest first."""
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
