"""Health check: database reachability and live session count."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse
from app.web.security import SecurityConfig, get_security

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    security: Annotated[SecurityConfig, Depends(get_security)],
) -> HealthResponse:
    """
    Return service status. Public so load balancers can probe it without a session.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    security.sessions.prune()
    return HealthResponse(
        status="ok",
        environment=security.settings.APP_ENV,
        database=db_status,
        active_sessions=len(security.sessions),
    )
