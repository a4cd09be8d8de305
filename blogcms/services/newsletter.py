"""Newsletter signup."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.core.errors import BadRequest
from blogcms.models import NewsletterSubscriber

logger = logging.getLogger(__name__)

SUBSCRIBED_MESSAGE = "You are subscribed."


def subscribe(db: Session, email: str) -> bool:
    """
    Add email (lowercased) to the list. Returns False when it was already there;
    subscribing twice is not an error.
    """
    normalized = (email or "").strip().lower()
    if not normalized:
        raise BadRequest("Invalid email")
    if db.query(NewsletterSubscriber.id).filter(NewsletterSubscriber.email == normalized).first():
        return False
    db.add(NewsletterSubscriber(email=normalized))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent signup for the same address won the race.
        db.rollback()
        return False
    logger.info("Newsletter subscription added")
    return True
