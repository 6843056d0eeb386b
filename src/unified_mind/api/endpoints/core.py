"""Core API endpoints for Unified Mind."""

from fastapi import APIRouter

from unified_mind.core.config import settings
from unified_mind.core.logging import get_logger
from unified_mind.domain.models.utils import utc_now_iso

logger = get_logger(__name__)

router = APIRouter()


def _health() -> dict[str, str]:
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.service_version,
        "timestamp": utc_now_iso(),
    }


@router.get("/")
async def root():
    """Root endpoint with application status."""
    return _health()


@router.get("/health", operation_id="health")
async def health_check():
    """Health check endpoint."""
    return _health()
