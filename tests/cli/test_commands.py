"""Tests for CLI commands."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from app.cli.client import APIError
from app.cli.main import app
from app.core.exceptions import InvalidInputError

runner = CliRunner()

REPORT = {
    "totalRequests": 10,
    "successfulRequests": 9,
    "failedRequests": 1,
    "averageResponseTime": 41.6,
    "minResponseTime": 12,
    "maxResponseTime": 97,
    "requestsPerSecond": 55.25,
    "errors": ["HTTP 503"],
}


@pytest.fixture(autouse=True)
def table_output():
    """Keep output format independent of the developer's environment."""
    with patch.dict(os.environ, {"LOAD_TESTER_OUTPUT_FORMAT": "table"}):
        yield


@pytest.fixture
def mock_client():
    with patch("app.cli.commands.loadtest.get_client") as mock_get_client:
        client = MagicMock()
        mock_get_client.return_value = client
        yield client


class TestHealthCommand:
    """Tests for health command."""

    def test_health_command_success(self):
        """Test successful health check."""
        mock_data = {
            "status": "healthy",
            "timestamp": "2025-01-01T00:00:00Z",
            "engine": {"max_total_requests": 500, "max_concurrent_requests": 25},
        }

        with patch("app.cli.commands.health.get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.health.return_value = mock_data
            mock_get_client.return_value = mock_client

            result = runner.invoke(app, ["health"])
            assert result.exit_code == 0
            assert "Health Status" in result.stdout
            assert "Engine Limits" in result.stdout

    def test_health_command_live(self):
        """Test liveness check."""
        mock_data = {"status": "alive", "timestamp": "2025-01-01T00:00:00Z"}

        with patch("app.cli.commands.health.get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.health_live.return_value = mock_data
            mock_get_client.return_value = mock_client

            result = runner.invoke(app, ["health", "--live"])
            assert result.exit_code == 0
            mock_client.health_live.assert_called_once()

    def test_health_command_ready(self):
        """Test readiness check."""
        mock_data = {"status": "ready", "checks": {"load_test_engine": "ready"}}

        with patch("app.cli.commands.health.get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.health_ready.return_value = mock_data
            mock_get_client.return_value = mock_client

            result = runner.invoke(app, ["health", "--ready"])
            assert result.exit_code == 0

    def test_health_command_unhealthy(self):
        """Test unhealthy status returns exit code 1."""
        with patch("app.cli.commands.health.get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.health.return_value = {"status": "unhealthy"}
            mock_get_client.return_value = mock_client

            result = runner.invoke(app, ["health"])
            assert result.exit_code == 1

    def test_health_command_unreachable(self):
        """Test connection failure returns exit code 1."""
        with patch("app.cli.commands.health.get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.health.side_effect = ConnectionError("refused")
            mock_get_client.return_value = mock_client

            result = runner.invoke(app, ["health"])
            assert result.exit_code == 1


class TestLoadTestRunCommand:
    """Tests for the test run command."""

    def test_run_prints_report(self, mock_client):
        mock_client.run_load_test.return_value = REPORT

        result = runner.invoke(app, ["test", "run", "https://example.com", "-n", "10", "-c", "5"])

        assert result.exit_code == 0
        assert "Total Requests" in result.stdout
        assert "90.0%" in result.stdout
        assert "55.25" in result.stdout
        assert "HTTP 503" in result.stdout
        mock_client.run_load_test.assert_called_once_with(
            "https://example.com", total_requests=10, concurrent_requests=5
        )

    def test_run_without_counts_sends_none(self, mock_client):
        mock_client.run_load_test.return_value = REPORT

        result = runner.invoke(app, ["test", "run", "https://example.com"])

        assert result.exit_code == 0
        mock_client.run_load_test.assert_called_once_with(
            "https://example.com", total_requests=None, concurrent_requests=None
        )

    def test_run_max_load(self, mock_client):
        mock_client.run_load_test.return_value = REPORT

        result = runner.invoke(app, ["test", "run", "https://example.com", "--max-load"])

        assert result.exit_code == 0
        mock_client.run_load_test.assert_called_once_with(
            "https://example.com", total_requests=1000, concurrent_requests=50
        )

    def test_run_json_output(self, mock_client):
        mock_client.run_load_test.return_value = REPORT

        with patch.dict(os.environ, {"LOAD_TESTER_OUTPUT_FORMAT": "json"}):
            result = runner.invoke(app, ["test", "run", "https://example.com"])

        assert result.exit_code == 0
        assert '"successfulRequests": 9' in result.stdout

    def test_run_rejected(self, mock_client):
        mock_client.run_load_test.side_effect = APIError(
            400, "Total requests must be at least 1", {"code": "ERR_1001"}
        )

        result = runner.invoke(app, ["test", "run", "https://example.com", "-n", "0"])

        assert result.exit_code == 1

    def test_run_api_unreachable(self, mock_client):
        mock_client.run_load_test.side_effect = ConnectionError("refused")

        result = runner.invoke(app, ["test", "run", "https://example.com"])

        assert result.exit_code == 1

    def test_run_local(self, sample_report):
        with patch("app.services.load_test_service.LoadTestService") as mock_service_cls:
            mock_service_cls.return_value.run_load_test = AsyncMock(return_value=sample_report)

            result = runner.invoke(
                app, ["test", "run", "https://example.com", "--local", "-n", "10", "-c", "5"]
            )

        assert result.exit_code == 0
        assert "Total Requests" in result.stdout
        call = mock_service_cls.return_value.run_load_test.await_args
        assert call.args == ("https://example.com",)
        assert call.kwargs["total_requests"] == 10
        assert call.kwargs["concurrent_requests"] == 5
        assert callable(call.kwargs["progress_callback"])

    def test_run_local_rejected(self):
        with patch("app.services.load_test_service.LoadTestService") as mock_service_cls:
            mock_service_cls.return_value.run_load_test = AsyncMock(
                side_effect=InvalidInputError("Concurrent requests must be at least 1")
            )

            result = runner.invoke(app, ["test", "run", "https://example.com", "--local", "-c", "0"])

        assert result.exit_code == 1


class TestLoadTestPlanCommand:
    """Tests for the test plan command."""

    def test_plan_clamps(self):
        result = runner.invoke(app, ["test", "plan", "-n", "10000", "-c", "1000"])

        assert result.exit_code == 0
        assert "Effective total requests:      500" in result.stdout
        assert "Effective concurrent requests: 25" in result.stdout
        assert "Batches:                       20" in result.stdout

    def test_plan_partial_batch(self):
        result = runner.invoke(app, ["test", "plan", "-n", "7", "-c", "3"])

        assert result.exit_code == 0
        assert "Batches:                       3" in result.stdout
        assert "Last batch sends 1 request(s)" in result.stdout

    def test_plan_concurrency_above_total(self):
        result = runner.invoke(app, ["test", "plan", "-n", "5", "-c", "25"])

        assert result.exit_code == 0
        assert "Effective total requests:      5" in result.stdout
        assert "Effective concurrent requests: 5" in result.stdout
        assert "Batches:                       1" in result.stdout

    def test_plan_defaults(self):
        result = runner.invoke(app, ["test", "plan"])

        assert result.exit_code == 0
        assert "Effective total requests:      100" in result.stdout
        assert "Batches:                       10" in result.stdout

    def test_plan_max_load(self):
        result = runner.invoke(app, ["test", "plan", "--max-load"])

        assert result.exit_code == 0
        assert "Effective total requests:      500" in result.stdout

    def test_plan_rejected(self):
        result = runner.invoke(app, ["test", "plan", "-c", "0"])

        assert result.exit_code == 1


class TestMetricsCommand:
    """Tests for metrics command."""

    METRICS = "\n".join(
        [
            "# HELP load_tests_total Total number of load tests requested",
            'load_tests_total{status="completed"} 3.0',
            "load_tests_in_progress 0.0",
            'http_requests_total{method="GET",endpoint="/health",status_code="200"} 7.0',
        ]
    )

    def test_metrics_summary(self):
        with patch("app.cli.commands.metrics.get_client") as mock_get_client:
            mock_get_client.return_value.get_metrics.return_value = self.METRICS

            result = runner.invoke(app, ["metrics"])

        assert result.exit_code == 0
        assert "Key Metrics" in result.stdout
        assert "Total metrics lines: 3" in result.stdout

    def test_metrics_raw_filtered(self):
        with patch("app.cli.commands.metrics.get_client") as mock_get_client:
            mock_get_client.return_value.get_metrics.return_value = self.METRICS

            result = runner.invoke(app, ["metrics", "--raw", "--filter", "in_progress"])

        assert result.exit_code == 0
        assert "load_tests_in_progress 0.0" in result.stdout
        assert "http_requests_total" not in result.stdout

    def test_metrics_failure(self):
        with patch("app.cli.commands.metrics.get_client") as mock_get_client:
            mock_get_client.return_value.get_metrics.side_effect = APIError(503, "down")

            result = runner.invoke(app, ["metrics"])

        assert result.exit_code == 1


class TestConfigCommand:
    """Tests for config commands."""

    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Current Configuration" in result.stdout
        assert "API URL" in result.stdout

    def test_config_set_invalid_key(self):
        result = runner.invoke(app, ["config", "set", "invalid_key", "value"])

        assert result.exit_code == 1

    def test_config_set_invalid_output(self):
        result = runner.invoke(app, ["config", "set", "output", "yaml"])

        assert result.exit_code == 1

    def test_config_set_invalid_timeout(self):
        result = runner.invoke(app, ["config", "set", "timeout", "soon"])

        assert result.exit_code == 1

    def test_config_set_url(self):
        with patch("app.cli.commands.config.save_config") as mock_save:
            result = runner.invoke(app, ["config", "set", "url", "http://api:8000"])

        assert result.exit_code == 0
        mock_save.assert_called_once_with("api_url", "http://api:8000")

    def test_config_set_token_is_masked(self):
        with patch("app.cli.commands.config.save_config") as mock_save:
            result = runner.invoke(app, ["config", "set", "token", "secret-token"])

        assert result.exit_code == 0
        mock_save.assert_called_once_with("api_token", "secret-token")
        assert "secret-token" not in result.stdout

    def test_config_get_token_hidden(self):
        with patch.dict(os.environ, {"LOAD_TESTER_API_TOKEN": "secret-token"}):
            result = runner.invoke(app, ["config", "get", "token"])

        assert result.exit_code == 0
        assert "secret-token" not in result.stdout
        assert "hidden" in result.stdout

    def test_config_path(self):
        with patch("app.cli.commands.config.get_config_file") as mock_file:
            mock_file.return_value = "/tmp/load-tester/config.env"
            result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "/tmp/load-tester/config.env" in result.stdout


class TestMainApp:
    """Tests for the top-level CLI."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "load-tester version" in result.stdout

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])

        assert "Usage" in result.output
