"""
Bounded-concurrency HTTP load test engine.

A run issues exactly ``total`` GET requests against one URL in sequential
batches of at most ``concurrency`` requests. Every request of a batch settles
before the next batch starts, so no more than ``concurrency`` requests are in
flight at any time. Per-request failures are data: they are folded into the
report and never abort the run.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.core.metrics import (
    record_load_test_finished,
    record_load_test_rejected,
    record_load_test_request,
    record_load_test_started,
)
from app.core.tracing import add_span_attributes, create_span, record_exception
from app.log.logging import logger
from app.models.load_test import LoadTestReport, RequestOutcome

# Lower bound for the throughput denominator (1 ms)
MIN_ELAPSED_SECONDS = 0.001

ProgressCallback = Callable[[int, int], None]


@dataclass
class _ReportAccumulator:
    """Running aggregate of request outcomes; keeps only the first ``max_errors`` messages."""

    max_errors: int
    count: int = 0
    successful: int = 0
    total_time_ms: int = 0
    min_time_ms: int | None = None
    max_time_ms: int | None = None
    errors: list[str] = field(default_factory=list)

    def add(self, outcome: RequestOutcome) -> None:
        self.count += 1
        self.total_time_ms += outcome.response_time_ms
        if self.min_time_ms is None or outcome.response_time_ms < self.min_time_ms:
            self.min_time_ms = outcome.response_time_ms
        if self.max_time_ms is None or outcome.response_time_ms > self.max_time_ms:
            self.max_time_ms = outcome.response_time_ms

        if outcome.success:
            self.successful += 1
        elif outcome.error and len(self.errors) < self.max_errors:
            self.errors.append(outcome.error)

    def build(self, total_requests: int, elapsed_seconds: float) -> LoadTestReport:
        return LoadTestReport(
            total_requests=total_requests,
            successful_requests=self.successful,
            failed_requests=total_requests - self.successful,
            average_response_time_ms=self.total_time_ms / self.count if self.count else 0.0,
            min_response_time_ms=self.min_time_ms or 0,
            max_response_time_ms=self.max_time_ms or 0,
            requests_per_second=total_requests / max(elapsed_seconds, MIN_ELAPSED_SECONDS),
            errors=list(self.errors),
        )


class LoadTestService:
    """
    Runs load tests against arbitrary HTTP targets.

    The service keeps no state between runs; all limits come from settings
    unless overridden at construction time. ``transport`` lets callers (and
    tests) swap the network layer of the underlying ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        request_timeout: float | None = None,
        user_agent: str | None = None,
        max_total_requests: int | None = None,
        max_concurrent_requests: int | None = None,
        default_total_requests: int | None = None,
        default_concurrent_requests: int | None = None,
        max_errors: int | None = None,
    ):
        self._transport = transport
        self.request_timeout = (
            request_timeout if request_timeout is not None else settings.load_test_request_timeout
        )
        self.user_agent = user_agent or settings.load_test_user_agent
        self.max_total_requests = (
            max_total_requests
            if max_total_requests is not None
            else settings.load_test_max_total_requests
        )
        self.max_concurrent_requests = (
            max_concurrent_requests
            if max_concurrent_requests is not None
            else settings.load_test_max_concurrent_requests
        )
        self.default_total_requests = (
            default_total_requests
            if default_total_requests is not None
            else settings.load_test_default_total_requests
        )
        self.default_concurrent_requests = (
            default_concurrent_requests
            if default_concurrent_requests is not None
            else settings.load_test_default_concurrent_requests
        )
        self.max_errors = max_errors if max_errors is not None else settings.load_test_max_errors

    def resolve_limits(
        self,
        url: str | None,
        total_requests: int | None = None,
        concurrent_requests: int | None = None,
    ) -> tuple[int, int]:
        """
        Validate the configuration and clamp it to the hard ceilings.

        Omitted counts take the defaults, then each value is capped at its
        ceiling (concurrency also at the effective total) and must still be
        at least 1.

        Returns:
            Tuple of (effective_total, effective_concurrency).

        Raises:
            InvalidInputError: URL missing or an effective value below 1.
        """
        if not url:
            raise InvalidInputError("URL is required")

        if total_requests is None:
            total_requests = self.default_total_requests
        if concurrent_requests is None:
            concurrent_requests = self.default_concurrent_requests

        effective_total = min(total_requests, self.max_total_requests)
        if effective_total < 1:
            raise InvalidInputError("Total requests must be at least 1")

        # A batch never holds more requests than the whole run
        effective_concurrency = min(
            concurrent_requests, self.max_concurrent_requests, effective_total
        )
        if effective_concurrency < 1:
            raise InvalidInputError("Concurrent requests must be at least 1")

        return effective_total, effective_concurrency

    async def run_load_test(
        self,
        url: str | None,
        total_requests: int | None = None,
        concurrent_requests: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> LoadTestReport:
        """
        Execute a load test and return its aggregate statistics.

        Args:
            url: Target URL, requested with GET.
            total_requests: Desired request count (default 100, capped at 500).
            concurrent_requests: Desired batch size (default 10, capped at 25).
            progress_callback: Called as ``(completed, total)`` after every batch.

        Returns:
            LoadTestReport covering exactly the effective total of requests.

        Raises:
            InvalidInputError: Configuration rejected before any request is made.
        """
        try:
            total, concurrency = self.resolve_limits(url, total_requests, concurrent_requests)
        except InvalidInputError as e:
            logger.warning(
                "Load test rejected: {reason}",
                reason=e.message,
                url=url,
                total_requests=total_requests,
                concurrent_requests=concurrent_requests,
                event_type="load_test_rejected",
            )
            record_load_test_rejected()
            raise

        logger.info(
            "Starting load test: {total_requests} requests to {url} with {concurrent_requests} concurrent",
            url=url,
            total_requests=total,
            concurrent_requests=concurrency,
            event_type="load_test_started",
        )

        record_load_test_started()
        started = time.perf_counter()
        status = "failed"

        try:
            with create_span(
                "load_test.run",
                {
                    "load_test.url": url,
                    "load_test.total_requests": total,
                    "load_test.concurrent_requests": concurrency,
                },
            ):
                try:
                    report = await self._execute(url, total, concurrency, started, progress_callback)
                except Exception as e:
                    record_exception(e)
                    raise

                add_span_attributes(
                    {
                        "load_test.successful_requests": report.successful_requests,
                        "load_test.failed_requests": report.failed_requests,
                        "load_test.requests_per_second": report.requests_per_second,
                    }
                )
            status = "completed"
        finally:
            record_load_test_finished(status, time.perf_counter() - started)

        logger.info(
            "Load test completed: {successful_requests}/{total_requests} successful",
            url=url,
            total_requests=report.total_requests,
            successful_requests=report.successful_requests,
            failed_requests=report.failed_requests,
            average_response_time_ms=report.average_response_time_ms,
            requests_per_second=report.requests_per_second,
            event_type="load_test_completed",
        )
        return report

    async def _execute(
        self,
        url: str,
        total: int,
        concurrency: int,
        started: float,
        progress_callback: ProgressCallback | None,
    ) -> LoadTestReport:
        accumulator = _ReportAccumulator(max_errors=self.max_errors)
        limits = httpx.Limits(max_connections=concurrency, max_keepalive_connections=concurrency)

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.request_timeout,
            limits=limits,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
        ) as client:
            completed = 0
            batch_number = 0
            while completed < total:
                batch_size = min(concurrency, total - completed)
                batch_number += 1

                # gather preserves issuance order in its results
                outcomes = await asyncio.gather(
                    *(self._perform_request(client, url) for _ in range(batch_size))
                )
                for outcome in outcomes:
                    accumulator.add(outcome)
                    record_load_test_request(outcome.success, outcome.response_time_ms)

                completed += batch_size
                logger.debug(
                    "Load test batch completed",
                    batch=batch_number,
                    batch_size=batch_size,
                    completed=completed,
                    total=total,
                    event_type="load_test_batch_completed",
                )
                if progress_callback is not None:
                    progress_callback(completed, total)

        return accumulator.build(total, time.perf_counter() - started)

    async def _perform_request(self, client: httpx.AsyncClient, url: str) -> RequestOutcome:
        """
        Issue one GET request and time it, turning every failure into an outcome.

        The request settles once the response headers arrive; the body is
        never read, so timings exclude the download and no body is held.
        """
        start = time.perf_counter()
        elapsed_ms = None
        try:
            async with client.stream("GET", url) as response:
                elapsed_ms = _elapsed_ms(start)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            if elapsed_ms is None:
                return RequestOutcome(
                    success=False,
                    response_time_ms=_elapsed_ms(start),
                    error=str(e) or e.__class__.__name__,
                )
            # Closing the unread body failed after the response had settled

        if response.is_success:
            return RequestOutcome(success=True, response_time_ms=elapsed_ms)
        return RequestOutcome(
            success=False, response_time_ms=elapsed_ms, error=f"HTTP {response.status_code}"
        )


def _elapsed_ms(start: float) -> int:
    return max(0, round((time.perf_counter() - start) * 1000))


load_test_service = LoadTestService()
