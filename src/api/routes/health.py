"""Health check and system endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies.common import get_store
from src.schemas.base import HealthCheckResponse
from src.services.credential_store import CredentialStore

router = APIRouter()

SERVICE_NAME = "track-marketplace-service"
SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, store: CredentialStore = Depends(get_store)):
    """
    Service health check endpoint.

    Checks database connectivity and reports the rate limiter mode.
    """
    settings = request.app.state.settings
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "dependencies": {}
    }

    try:
        await store.ping()
        health_data["dependencies"]["database"] = {
            "status": "healthy",
            "details": "Connection successful"
        }
    except Exception as e:
        health_data["dependencies"]["database"] = {
            "status": "unhealthy",
            "error": type(e).__name__,
            "details": "Database connection failed"
        }
        health_data["status"] = "unhealthy"

    health_data["dependencies"]["rate_limiter"] = {
        "status": "healthy",
        "type": "in_memory",
        "details": "Per-process sliding windows"
    }

    if health_data["status"] == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail={"code": "SERVICE_UNHEALTHY", "message": "Database connection failed"},
        )

    return HealthCheckResponse(**health_data)


@router.get("/version")
async def version_info(request: Request):
    """Get service version information."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": request.app.state.settings.environment,
        "api_version": "v1",
    }
