"""
v1 load testing endpoints.

Provides endpoints for:
- Running a load test against a target URL (POST /v1/load-testing)
- Answering bare CORS preflights (OPTIONS /v1/load-testing)
"""

from fastapi import APIRouter, Response

from app.core.config import settings
from app.models.load_test import LoadTestReport, LoadTestRequest
from app.services.load_test_service import load_test_service

router = APIRouter(tags=["load-testing"])


@router.post(
    "/load-testing",
    summary="Run a load test",
    description=(
        "Issues GET requests against the target URL in sequential batches and returns "
        "aggregate latency and throughput statistics. totalRequests (default 100) is "
        "capped at 500 and concurrentRequests (default 10) at 25."
    ),
    response_model=LoadTestReport,
    responses={
        400: {"description": "Missing URL, counts below 1 or malformed body"},
        429: {"description": "Too many load tests started by this client"},
    },
)
async def run_load_test(request: LoadTestRequest):
    """
    Run a load test and wait for its report.

    Args:
        request: Target URL and requested totals.

    Returns:
        LoadTestReport with camelCase field names.
    """
    return await load_test_service.run_load_test(
        url=request.url,
        total_requests=request.total_requests,
        concurrent_requests=request.concurrent_requests,
    )


@router.options("/load-testing", include_in_schema=False)
async def load_testing_preflight():
    """Answer a CORS preflight with an empty body."""
    return Response(status_code=200, headers=settings.cors_headers)
