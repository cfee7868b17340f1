"""Pytest configuration and fixtures for refyne_client tests."""
import json
import logging
from typing import Any, Dict, List, Optional

import pytest

from refyne_client import (
    ClientConfig,
    MemoryCacheStore,
    TransportResponse,
    resolve_config,
)

BASE_URL = "https://api.test.local"
API_KEY = "rf_test_key_123456"


def json_response(
    status: int = 200,
    data: Any = None,
    headers: Optional[Dict[str, str]] = None,
    reason: str = "",
) -> TransportResponse:
    """Build a JSON TransportResponse."""
    body = b"" if data is None else json.dumps(data).encode("utf-8")
    return TransportResponse(
        status=status,
        headers={"content-type": "application/json", **(headers or {})},
        body=body,
        reason=reason,
    )


class MockTransport:
    """
    Transport returning scripted responses in order.

    A scripted item that is an exception is raised instead of returned. The
    last item repeats once the script is exhausted.
    """

    def __init__(self, *script: Any) -> None:
        self.script: List[Any] = list(script) or [json_response(200, {"success": True})]
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[bytes],
        timeout: float,
    ) -> TransportResponse:
        self.requests.append(
            {"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout}
        )
        index = min(len(self.requests), len(self.script)) - 1
        item = self.script[index]
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.requests)


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class SleepRecorder:
    """Async sleep that records durations without waiting."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def clock():
    """Fake clock."""
    return FakeClock()


@pytest.fixture
def sleep():
    """Recording sleep."""
    return SleepRecorder()


@pytest.fixture
def logger():
    """Logger for the client under test."""
    return logging.getLogger("refyne_client.tests")


@pytest.fixture
def store(clock, logger):
    """Memory cache store on the fake clock."""
    return MemoryCacheStore(max_entries=100, logger=logger, clock=clock)


@pytest.fixture
def make_config(clock, sleep, store, logger):
    """Factory for resolved configs wired to the fakes."""

    def _make(transport: MockTransport, **overrides: Any):
        options = dict(
            api_key=API_KEY,
            base_url=BASE_URL,
            transport=transport,
            cache=store,
            clock=clock,
            sleep=sleep,
            logger=logger,
        )
        options.update(overrides)
        return resolve_config(ClientConfig(**options))

    return _make
