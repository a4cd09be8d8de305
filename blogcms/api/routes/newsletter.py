"""Public newsletter signup."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogcms.core.database import get_db
from blogcms.schemas.newsletter import SubscribeRequest, SubscribeResponse
from blogcms.services import newsletter as newsletter_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/subscribe", response_model=SubscribeResponse)
def subscribe(body: SubscribeRequest, db: Annotated[Session, Depends(get_db)]) -> SubscribeResponse:
    """
    Add an address to the list. Repeat signups succeed quietly, and a filled
    honeypot gets the same answer without anything being stored.
    """
    if body.honeypot:
        logger.info("Newsletter honeypot triggered")
    else:
        newsletter_service.subscribe(db, body.email)
    return SubscribeResponse(message=newsletter_service.SUBSCRIBED_MESSAGE)
