"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core import config

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if the invoice template is available, 503 otherwise.
    """
    template_available = config.TEMPLATE_PATH.is_file()
    timestamp = datetime.now(timezone.utc).isoformat()

    if template_available:
        return HealthResponse(
            status="healthy",
            version=config.API_VERSION,
            template_available=True,
            timestamp=timestamp,
        )

    return JSONResponse(
        status_code=503,
        content=HealthResponse(
            status="unhealthy",
            version=config.API_VERSION,
            template_available=False,
            timestamp=timestamp,
            error="Invoice template not found",
        ).model_dump(),
    )
