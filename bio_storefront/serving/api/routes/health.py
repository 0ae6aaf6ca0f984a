"""
Health Check Endpoints

Liveness and readiness checks for the orchestrator.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from bio_storefront.config import get_settings
from bio_storefront.database import Database, get_database
from bio_storefront.database.models import utcnow

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(database: Database = Depends(get_database)) -> HealthResponse:
    """
    Application status plus database connectivity.
    """
    settings = get_settings()
    db_health = await database.health()
    status = "healthy" if db_health.get("status") == "healthy" else "degraded"

    return HealthResponse(
        status=status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=utcnow(),
        checks={"database": db_health},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response, database: Database = Depends(get_database)) -> Dict[str, str]:
    """Returns 503 until the database answers."""
    db_health = await database.health()
    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
