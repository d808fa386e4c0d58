"""
Health check endpoint with database status
"""

from fastapi import APIRouter, Depends, Request
from api.dependencies import get_storage
from core.config import settings
from ingestion.endpoints import ENDPOINTS
from ingestion.loaders.base import StorageAdapter
from schemas.api import HealthCheckResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, storage: StorageAdapter = Depends(get_storage)):
    """
    Health check endpoint.

    Returns:
    - Destination database connectivity
    - Number of configured endpoints
    - Whether the cron scheduler is running
    """
    db_connected = await storage.ping()
    if not db_connected:
        logger.error("Health check: destination database unreachable")

    scheduler = getattr(request.app.state, "scheduler", None)

    return HealthCheckResponse(
        database_connected=db_connected,
        database_provider=settings.DB_PROVIDER,
        configured_endpoints=len(ENDPOINTS),
        scheduler_running=bool(scheduler and scheduler.running),
    )
