"""
Configured upstream endpoints
"""

from fastapi import APIRouter
from core.config import settings
from ingestion.endpoints import ENDPOINTS
from schemas.api import EndpointInfo, EndpointsResponse

router = APIRouter(tags=["Endpoints"])


@router.get("/endpoints", response_model=EndpointsResponse)
async def list_endpoints():
    """The endpoint catalogue the scheduler runs through"""
    return EndpointsResponse(
        total=len(ENDPOINTS),
        endpoints=[EndpointInfo(**endpoint.model_dump()) for endpoint in ENDPOINTS],
        date_range_mode=settings.DATE_RANGE_MODE,
    )
