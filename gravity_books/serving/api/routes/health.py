"""
Health Check Endpoints
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from gravity_books.config import get_settings
from gravity_books.database.connection import check_database_health

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request, response: Response) -> HealthResponse:
    """Application status and database connectivity"""
    settings = get_settings()
    db_health = check_database_health(request.app.state.engine)
    status = "healthy" if db_health.get("status") == "healthy" else "unhealthy"
    if status != "healthy":
        response.status_code = 503
    
    return HealthResponse(
        status=status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks={"database": db_health},
    )


@router.get("/health/live")
def liveness_check() -> Dict[str, str]:
    """Returns 200 while the application is running."""
    return {"status": "alive"}
