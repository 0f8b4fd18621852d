"""Health Checks — process liveness and database connectivity.

Invariants:
    - GET /api/health/ answers 200 whenever the process is serving
    - GET /api/health/ready answers 503 with database "disconnected" when the
      database cannot be reached or was never initialized
    - Both endpoints are public and never touch church data
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from lmpg.config import APP_VERSION, Settings, get_settings
from lmpg.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(settings: Settings = Depends(get_settings)):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "version": APP_VERSION,
    }


@router.get("/ready")
async def database_readiness():
    """Ping the database through the shared session manager."""
    manager = database.db_manager
    if manager is None:
        logger.warning("Readiness check before database initialization")
        connected = False
    else:
        connected = await manager.health_check()
    if not connected:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ERROR", "database": "disconnected"},
        )
    return {"status": "OK", "database": "connected"}
