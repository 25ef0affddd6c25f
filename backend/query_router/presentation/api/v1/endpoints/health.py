"""Liveness endpoint — answers without touching the query pipeline."""

from fastapi import APIRouter

from query_router.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Process is up; use /query/health for a pipeline round-trip."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
        "environment": settings.app_env,
    }
