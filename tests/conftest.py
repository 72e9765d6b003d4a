import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.rate_limit import get_rate_limiter
from app.main import app
from app.models.load_test import LoadTestReport
from app.services.load_test_service import LoadTestService

TARGET_URL = "http://target.test/ping"


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with an empty rate limit window."""
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest.fixture
def test_client():
    """Create a test client for the FastAPI app."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def mock_load_test_service():
    """Mock the engine used by the load testing endpoints."""
    with patch("app.routers.v1.load_testing.load_test_service") as mock_service:
        mock_service.run_load_test = AsyncMock()
        yield mock_service


class RecordingTarget:
    """
    Mock target that records every request and the highest number of
    requests it had in flight at once.
    """

    def __init__(self, status_code: int = 200, delay: float = 0.0):
        self.status_code = status_code
        self.delay = delay
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        return httpx.Response(self.status_code, text="ok")


@pytest.fixture
def target_url():
    """URL every mocked load test is pointed at."""
    return TARGET_URL


@pytest.fixture
def recording_target():
    """Factory for mock targets that record concurrency."""
    return RecordingTarget


@pytest.fixture
def service_factory():
    """Build an engine whose requests are answered by ``handler``."""

    def make_service(handler, **kwargs) -> LoadTestService:
        return LoadTestService(transport=httpx.MockTransport(handler), **kwargs)

    return make_service


@pytest.fixture
def sample_report():
    """Provide a report as the engine would build it."""
    return LoadTestReport(
        total_requests=10,
        successful_requests=8,
        failed_requests=2,
        average_response_time_ms=42.5,
        min_response_time_ms=12,
        max_response_time_ms=97,
        requests_per_second=55.3,
        errors=["HTTP 503", "HTTP 503"],
    )


@pytest.fixture
def sample_report_payload(sample_report):
    """Provide the wire form of ``sample_report``."""
    return sample_report.model_dump(by_alias=True)
