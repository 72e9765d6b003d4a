"""Tests for the load test rate limiter."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.rate_limit import InMemoryRateLimiter, get_client_identifier


class TestInMemoryRateLimiter:
    """Tests for InMemoryRateLimiter."""

    @pytest.fixture
    def limiter(self):
        return InMemoryRateLimiter()

    @pytest.mark.parametrize(
        "limit,expected",
        [
            ("30/hour", (30, 3600)),
            ("5/minute", (5, 60)),
            ("1/second", (1, 1)),
            ("100/day", (100, 86400)),
        ],
    )
    def test_parse_limit(self, limiter, limit, expected):
        assert limiter._parse_limit(limit) == expected

    @pytest.mark.parametrize("limit", ["30", "30/fortnight", "a/b/c"])
    def test_parse_limit_invalid(self, limiter, limit):
        with pytest.raises(ValueError):
            limiter._parse_limit(limit)

    def test_allows_until_limit(self, limiter):
        results = [limiter.check_rate_limit("ip:1.2.3.4", "3/minute") for _ in range(4)]

        assert [allowed for allowed, *_ in results] == [True, True, True, False]
        assert [remaining for _, remaining, *_ in results[:3]] == [2, 1, 0]

    def test_clients_are_independent(self, limiter):
        limiter.check_rate_limit("ip:1.1.1.1", "1/minute")

        allowed, _, _, _ = limiter.check_rate_limit("ip:2.2.2.2", "1/minute")

        assert allowed is True

    def test_window_expires(self, limiter):
        with patch("app.core.rate_limit.time.time", return_value=1000.0):
            limiter.check_rate_limit("ip:1.1.1.1", "1/minute")
            allowed, *_ = limiter.check_rate_limit("ip:1.1.1.1", "1/minute")
            assert allowed is False

        with patch("app.core.rate_limit.time.time", return_value=1061.0):
            allowed, *_ = limiter.check_rate_limit("ip:1.1.1.1", "1/minute")
            assert allowed is True

    def test_reset(self, limiter):
        limiter.check_rate_limit("ip:1.1.1.1", "1/minute")
        limiter.reset()

        allowed, *_ = limiter.check_rate_limit("ip:1.1.1.1", "1/minute")

        assert allowed is True

    def test_headers(self, limiter):
        _, remaining, limit, reset_at = limiter.check_rate_limit("ip:1.1.1.1", "5/hour")

        headers = limiter.get_headers(remaining, limit, reset_at)

        assert headers["X-RateLimit-Limit"] == "5"
        assert headers["X-RateLimit-Remaining"] == "4"
        assert int(headers["X-RateLimit-Reset"]) == int(reset_at.timestamp())


class TestClientIdentifier:
    """Tests for get_client_identifier."""

    def test_uses_forwarded_for(self):
        request = MagicMock()
        request.headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

        assert get_client_identifier(request) == "ip:203.0.113.7"

    def test_uses_peer_address(self):
        request = MagicMock()
        request.headers = {}
        request.client.host = "198.51.100.2"

        assert get_client_identifier(request) == "ip:198.51.100.2"

    def test_unknown_peer(self):
        request = MagicMock()
        request.headers = {}
        request.client = None

        assert get_client_identifier(request) == "ip:unknown"
