"""
Prometheus metrics for service monitoring.

This module provides metrics collection for:
- HTTP request latency and counts
- Load test runs and the requests they issue
- Rate limiting
"""

import time
from collections.abc import Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

# =============================================================================
# Service Info
# =============================================================================

SERVICE_INFO = Info("load_test_service", "Information about the load test service")
SERVICE_INFO.info(
    {
        "version": settings.service_version,
        "service_name": settings.service_name,
        "environment": settings.environment,
    }
)


# =============================================================================
# HTTP Metrics
# =============================================================================

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0, 30.0, 60.0),
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status_code"]
)

HTTP_REQUEST_IN_PROGRESS = Gauge(
    "http_requests_in_progress", "HTTP requests currently in progress", ["method", "endpoint"]
)


# =============================================================================
# Load Test Metrics
# =============================================================================

LOAD_TESTS_TOTAL = Counter(
    "load_tests_total",
    "Total number of load tests requested",
    ["status"],  # completed, rejected, failed
)

LOAD_TESTS_IN_PROGRESS = Gauge("load_tests_in_progress", "Load tests currently running")

LOAD_TEST_REQUESTS = Counter(
    "load_test_requests_total",
    "Total requests issued against load test targets",
    ["outcome"],  # success, failure
)

LOAD_TEST_RESPONSE_TIME = Histogram(
    "load_test_response_time_seconds",
    "Response time of individual load test requests",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

LOAD_TEST_DURATION = Histogram(
    "load_test_duration_seconds",
    "Wall clock duration of complete load tests",
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)


# =============================================================================
# Rate Limiting Metrics
# =============================================================================

RATE_LIMIT_EXCEEDED = Counter(
    "rate_limit_exceeded_total",
    "Total number of rate limit exceeded responses",
    ["endpoint"],
)


# =============================================================================
# Middleware
# =============================================================================


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = request.url.path.rstrip("/") or "/"

        HTTP_REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        except Exception:
            status_code = "500"
            raise
        finally:
            duration = time.time() - start_time
            HTTP_REQUEST_DURATION.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).observe(duration)
            HTTP_REQUEST_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).inc()
            HTTP_REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

        return response


# =============================================================================
# Helper Functions
# =============================================================================


def record_load_test_started():
    """Mark a load test as running."""
    LOAD_TESTS_IN_PROGRESS.inc()


def record_load_test_finished(status: str, duration_seconds: float | None = None):
    """Record the end of a load test run."""
    LOAD_TESTS_IN_PROGRESS.dec()
    LOAD_TESTS_TOTAL.labels(status=status).inc()
    if duration_seconds is not None:
        LOAD_TEST_DURATION.observe(duration_seconds)


def record_load_test_rejected():
    """Record a load test rejected during validation."""
    LOAD_TESTS_TOTAL.labels(status="rejected").inc()


def record_load_test_request(success: bool, response_time_ms: int):
    """Record one request issued against a load test target."""
    LOAD_TEST_REQUESTS.labels(outcome="success" if success else "failure").inc()
    LOAD_TEST_RESPONSE_TIME.observe(response_time_ms / 1000)


def record_rate_limit_exceeded(endpoint: str):
    """Record a rate limit exceeded event."""
    RATE_LIMIT_EXCEEDED.labels(endpoint=endpoint).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
