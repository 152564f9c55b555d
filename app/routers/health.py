# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# Mounted at {BASE_PATH} without authentication.
# =============================================================================

import asyncio
from datetime import datetime, timezone

import redis
from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    broker: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_database() -> str:
    from lib.supabase_client import SupabaseClient

    try:
        SupabaseClient.get_client().table("users").select("id").limit(1).execute()
        return "healthy"
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"


def _check_broker() -> str:
    try:
        redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2).ping()
        return "healthy"
    except redis.RedisError as e:
        return f"unhealthy: {str(e)[:50]}"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.NODE_ENV,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks database and Celery broker connectivity.
    """
    database, broker = await asyncio.gather(
        asyncio.to_thread(_check_database),
        asyncio.to_thread(_check_broker),
    )
    checks = ChecksResponse(database=database, broker=broker)

    # The broker only matters where cron jobs are dispatched through Celery
    all_healthy = checks.database == "healthy" and (
        checks.broker == "healthy" or settings.is_development
    )

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Used by Kubernetes/Docker for restart decisions.
    """
    return LivenessResponse(status="alive", timestamp=_now())
