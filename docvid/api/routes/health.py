"""
Health check endpoints for docvid API
"""

from fastapi import APIRouter
from datetime import datetime, timezone
from typing import Dict, Any

from docvid import settings
from docvid.api.models.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        service="docvid API",
    )


@router.get("/health/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check endpoint.

    Reports whether the staging and output directories are usable.
    """
    components = {}
    for name, path in (
        ("uploads", settings.get_uploads_dir()),
        ("processed", settings.get_processed_dir()),
    ):
        components[name] = "available" if path.is_dir() else "missing"

    status = "healthy" if all(v == "available" for v in components.values()) else "degraded"
    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "docvid API",
        "components": components,
    }
