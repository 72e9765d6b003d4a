"""
Health check endpoints for Kubernetes probes and monitoring.

Provides:
- /health: Full health check with engine configuration
- /health/live: Liveness probe (is the service running?)
- /health/ready: Readiness probe (can the service handle traffic?)

The service has no backing stores, so readiness only checks that the load
test engine is configured with usable limits.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.config import settings
from app.services.load_test_service import load_test_service

router = APIRouter(tags=["healthcheck"])


class EngineLimits(BaseModel):
    """Hard ceilings and defaults applied by the load test engine."""

    max_total_requests: int
    max_concurrent_requests: int
    default_total_requests: int
    default_concurrent_requests: int
    request_timeout_seconds: float


class HealthResponse(BaseModel):
    """Full health check response."""

    status: str  # "healthy", "unhealthy"
    version: str
    service: str = "load-test-service"
    environment: str
    timestamp: str
    engine: EngineLimits


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: str = "alive"
    timestamp: str


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    status: str  # "ready", "not_ready"
    timestamp: str
    checks: dict[str, str] = {}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _engine_limits() -> EngineLimits:
    return EngineLimits(
        max_total_requests=load_test_service.max_total_requests,
        max_concurrent_requests=load_test_service.max_concurrent_requests,
        default_total_requests=load_test_service.default_total_requests,
        default_concurrent_requests=load_test_service.default_concurrent_requests,
        request_timeout_seconds=load_test_service.request_timeout,
    )


def _engine_ready() -> bool:
    return (
        load_test_service.max_total_requests >= 1
        and load_test_service.max_concurrent_requests >= 1
        and load_test_service.request_timeout > 0
    )


@router.get(
    "/health",
    summary="Full health check",
    description="Returns service status together with the load test engine limits.",
    response_model=HealthResponse,
    responses={
        200: {"description": "Service is healthy"},
        503: {"description": "Engine is misconfigured"},
    },
)
async def health_check():
    """Full health check endpoint."""
    healthy = _engine_ready()
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.service_version,
        environment=settings.environment,
        timestamp=_timestamp(),
        engine=_engine_limits(),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())


@router.get(
    "/health/live",
    summary="Liveness probe",
    response_model=LivenessResponse,
)
async def liveness():
    """Liveness probe: the process is up and serving requests."""
    return LivenessResponse(timestamp=_timestamp())


@router.get(
    "/health/ready",
    summary="Readiness probe",
    response_model=ReadinessResponse,
    responses={503: {"description": "Service is not ready"}},
)
async def readiness():
    """Readiness probe: the engine can accept load tests."""
    ready = _engine_ready()
    body = ReadinessResponse(
        status="ready" if ready else "not_ready",
        timestamp=_timestamp(),
        checks={"load_test_engine": "ready" if ready else "not_ready"},
    )
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump())
