"""
Health check route.
"""
from fastapi import APIRouter, Request

from pastebin.models import HealthCheck

router = APIRouter()


@router.get("/healthz", response_model=HealthCheck)
@router.get("/api/healthz", response_model=HealthCheck)
async def health_check(request: Request) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if application and database are healthy.
    """
    is_healthy = request.app.state.store.is_healthy()
    return HealthCheck(ok=is_healthy)
