"""Health check endpoint."""

from fastapi import APIRouter, Depends

from ...config import AppConfig, get_config
from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(config: AppConfig = Depends(get_config)) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        store=config.store_backend,
        version="0.1.0",
    )
