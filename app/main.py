from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.correlation import CorrelationIdMiddleware
from app.core.exceptions import register_exception_handlers
from app.core.metrics import MetricsMiddleware
from app.core.rate_limit import RateLimitMiddleware
from app.core.tracing import init_tracing, instrument_fastapi
from app.log.logging import logger

# Versioned routers
from app.routers.v1 import router as v1_router
from app.routers.v1.load_testing import router as legacy_load_testing_router

# Non-versioned routers (health, metrics)
from app.routers.healthcheck_router import router as healthcheck_router
from app.routers.metrics_router import router as metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info(
        "Starting Load Test Service...",
        max_total_requests=settings.load_test_max_total_requests,
        max_concurrent_requests=settings.load_test_max_concurrent_requests,
        request_timeout=settings.load_test_request_timeout,
        event_type="service_starting",
    )

    yield

    logger.info("Shutting down Load Test Service...", event_type="service_stopping")


# Tracing must be configured before the app is instrumented
init_tracing()

# Initialize FastAPI
app = FastAPI(
    title="Load Test Service",
    description="Runs bounded-concurrency HTTP load tests and reports latency statistics",
    version=settings.service_version,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Add middlewares in order (last added = first executed)
# 1. Correlation ID middleware (sets up tracing context for logs and error bodies)
app.add_middleware(CorrelationIdMiddleware)

# 2. Metrics middleware (captures all requests with timing)
app.add_middleware(MetricsMiddleware)

# 3. Rate limiting middleware (only limits starting load tests)
if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware)

# 4. CORS middleware (answers browser preflights before anything else runs)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=settings.cors_header_names,
)


# Root endpoint for testing
@app.get("/")
async def root():
    return {
        "message": "Load Test Service is running!",
        "version": settings.service_version,
        "limits": {
            "max_total_requests": settings.load_test_max_total_requests,
            "max_concurrent_requests": settings.load_test_max_concurrent_requests,
        },
    }


# =============================================================================
# Versioned API Routers
# =============================================================================

app.include_router(v1_router)

# =============================================================================
# Non-versioned Routers (Infrastructure)
# =============================================================================

app.include_router(healthcheck_router)
app.include_router(metrics_router)

# =============================================================================
# Legacy Routes (Backward Compatibility)
# =============================================================================

# Unversioned POST /load-testing kept for clients that predate /v1
app.include_router(legacy_load_testing_router, deprecated=True)

# Instrument FastAPI for tracing
instrument_fastapi(app)
