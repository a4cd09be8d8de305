"""Health and readiness endpoints with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from blogcms import __version__
from blogcms.api.deps import SettingsDep
from blogcms.core.database import check_db_connected, get_db
from blogcms.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)], settings: SettingsDep) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Always 200 so the service counts as live while the database starts.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(status="ok", version=__version__, environment=settings.APP_ENV, database=db_status)


@router.get("/ready", response_model=ReadinessResponse)
def get_ready(db: Annotated[Session, Depends(get_db)]):
    """Readiness: 503 until the database answers."""
    if check_db_connected(db):
        return ReadinessResponse(status="ready", database="connected")
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(status="not_ready", database="disconnected").model_dump(),
    )
