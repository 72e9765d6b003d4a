"""HTTP client for CLI commands."""

import asyncio
from typing import Any

import httpx

from app.cli.config import get_config


class APIError(Exception):
    """API request error."""

    def __init__(self, status_code: int, message: str, details: dict | None = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{status_code}] {message}")


class APIClient:
    """HTTP client for the Load Test Service API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: int | None = None,
    ):
        config = get_config()
        self.base_url = (base_url or config.api_url).rstrip("/")
        self.token = token or config.api_token
        self.timeout = timeout or config.api_timeout

    def _get_headers(self) -> dict[str, str]:
        """Get request headers including authorization."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response and raise errors if needed."""
        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                raise APIError(response.status_code, response.text)
            message = error_data.get("error", error_data.get("detail", "Unknown error"))
            raise APIError(response.status_code, str(message), error_data)

        if response.status_code == 204:
            return {}

        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
        **kwargs,
    ) -> dict[str, Any]:
        """Make an async HTTP request."""
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(
                method,
                url,
                headers=self._get_headers(),
                params=params,
                json=json,
                **kwargs,
            )
            return self._handle_response(response)

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
        **kwargs,
    ) -> dict[str, Any]:
        """Make a synchronous HTTP request (runs async internally)."""
        return asyncio.run(self._request(method, path, params, json, **kwargs))

    # Convenience methods
    def get(self, path: str, params: dict | None = None, **kwargs) -> dict[str, Any]:
        """Make a GET request."""
        return self.request("GET", path, params=params, **kwargs)

    def post(
        self, path: str, json: dict | None = None, params: dict | None = None, **kwargs
    ) -> dict[str, Any]:
        """Make a POST request."""
        return self.request("POST", path, params=params, json=json, **kwargs)

    # API-specific methods
    def health(self) -> dict[str, Any]:
        """Get full health status."""
        return self.get("/health")

    def health_live(self) -> dict[str, Any]:
        """Get liveness status."""
        return self.get("/health/live")

    def health_ready(self) -> dict[str, Any]:
        """Get readiness status."""
        return self.get("/health/ready")

    def get_metrics(self) -> str:
        """Get Prometheus metrics."""
        url = f"{self.base_url}/metrics"
        with httpx.Client(timeout=self.timeout) as client:
            response = client.get(url, headers=self._get_headers())
            if response.status_code >= 400:
                raise APIError(response.status_code, response.text)
            return response.text

    def run_load_test(
        self,
        url: str,
        total_requests: int | None = None,
        concurrent_requests: int | None = None,
    ) -> dict[str, Any]:
        """Start a load test and wait for its report."""
        body: dict[str, Any] = {"url": url}
        if total_requests is not None:
            body["totalRequests"] = total_requests
        if concurrent_requests is not None:
            body["concurrentRequests"] = concurrent_requests
        return self.post("/v1/load-testing", json=body)


# Global client instance
_client: APIClient | None = None


def get_client() -> APIClient:
    """Get the global API client."""
    global _client
    if _client is None:
        _client = APIClient()
    return _client


def reset_client() -> None:
    """Reset the global client (useful for testing)."""
    global _client
    _client = None
