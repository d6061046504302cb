"""Health and metrics endpoints."""

from fastapi import APIRouter

from prompteval.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/metrics")
async def metrics():
    """Service info for observability."""
    return {
        "service": "prompteval",
        "version": "0.1.0",
        "default_model": settings.default_model,
        "generation_concurrency": settings.generation_concurrency,
    }
