"""
Metrics router for the Prometheus scrape endpoint.

Exposes HTTP metrics alongside the load test counters and histograms
(load_tests_total, load_test_requests_total, load_test_response_time_seconds).
"""
from fastapi import APIRouter, Response

from app.core.metrics import get_metrics, get_metrics_content_type

router = APIRouter(tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Returns Prometheus-formatted metrics for monitoring.",
    response_class=Response
)
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
