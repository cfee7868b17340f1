"""Tests for backoff and retryable-error detection."""
import asyncio
from unittest.mock import patch

import httpx
import pytest

from refyne_client import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_DELAY_MS,
    calculate_backoff_with_jitter,
    is_retryable_error,
    is_timeout_error,
)


class TestCalculateBackoffWithJitter:
    @pytest.mark.parametrize("attempt", range(1, 12))
    def test_within_bounds(self, attempt):
        base = min(2 ** (attempt - 1) * DEFAULT_BASE_DELAY_MS, DEFAULT_MAX_DELAY_MS)
        for _ in range(50):
            delay = calculate_backoff_with_jitter(attempt)
            assert base <= delay <= base * 1.25
            assert delay <= DEFAULT_MAX_DELAY_MS * 1.25

    def test_no_jitter_values(self):
        with patch("refyne_client.backoff.random.random", return_value=0.0):
            delays = [calculate_backoff_with_jitter(a) for a in range(1, 8)]
        assert delays == [1000, 2000, 4000, 8000, 16000, 30000, 30000]

    def test_max_jitter(self):
        with patch("refyne_client.backoff.random.random", return_value=1.0):
            assert calculate_backoff_with_jitter(1) == 1250
            assert calculate_backoff_with_jitter(10) == 37500

    def test_custom_base_and_cap(self):
        with patch("refyne_client.backoff.random.random", return_value=0.0):
            assert calculate_backoff_with_jitter(3, base_ms=100, max_ms=250) == 250


class TestIsRetryableError:
    def test_connect_error(self):
        request = httpx.Request("GET", "https://api.test")
        assert is_retryable_error(httpx.ConnectError("refused", request=request)) is True

    def test_connection_error(self):
        assert is_retryable_error(ConnectionResetError("reset by peer")) is True

    def test_message_patterns(self):
        assert is_retryable_error(RuntimeError("ECONNRESET")) is True
        assert is_retryable_error(RuntimeError("network unreachable")) is True

    def test_cause_chain(self):
        error = RuntimeError("wrapped")
        error.__cause__ = ConnectionRefusedError()
        assert is_retryable_error(error) is True

    def test_timeouts_not_retryable(self):
        assert is_retryable_error(httpx.ReadTimeout("slow")) is False
        assert is_retryable_error(asyncio.TimeoutError()) is False

    def test_other_errors_not_retryable(self):
        assert is_retryable_error(ValueError("bad json")) is False
        assert is_retryable_error(None) is False


class TestIsTimeoutError:
    def test_timeouts(self):
        assert is_timeout_error(httpx.ConnectTimeout("slow")) is True
        assert is_timeout_error(asyncio.TimeoutError()) is True

    def test_non_timeouts(self):
        assert is_timeout_error(ConnectionError()) is False
