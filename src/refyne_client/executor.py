"""
Request executor: cache lookup, transport attempts with retry, error
classification and the one-time API version check.
"""
import asyncio
import copy
import json
from typing import Any, Dict, Optional

import httpx

from .backoff import calculate_backoff_with_jitter, is_retryable_error
from .cache import (
    create_cache_entry,
    generate_cache_key,
    hash_string,
    is_cacheable_response,
)
from .config import ResolvedConfig
from .errors import (
    RefyneError,
    create_error_from_response,
    network_error,
    timeout_error,
)
from .parser import get_header_value, parse_retry_after
from .types import ExecuteOptions, TransportResponse
from .version import VersionCompatibilityChecker

API_VERSION_HEADER = "X-API-Version"

# Seconds to wait on a 429 without a usable Retry-After header
DEFAULT_RETRY_AFTER_SECONDS = 1


def _decode_body(body: bytes) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not body:
        return None
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")


def _encode_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


class RequestExecutor:
    """
    Runs one logical API call as a sequential state machine:

        CACHE_LOOKUP (GET only) -> TRANSPORT_ATTEMPT
            -> RETRY_WAIT -> TRANSPORT_ATTEMPT
            -> SUCCESS | FAILURE

    Only 429, 5xx and transient network failures are retried, up to
    ``max_retries`` times. Timeouts and every other non-2xx status fail on
    first occurrence. Many calls may run concurrently on one executor; they
    share the cache store and the version checker.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        headers: Optional[Dict[str, str]] = None,
        version_checker: Optional[VersionCompatibilityChecker] = None,
    ) -> None:
        self._config = config
        self._headers = dict(headers or {})
        self._logger = config.logger
        self._identity_hash = hash_string(config.api_key)
        self._version_checker = version_checker or VersionCompatibilityChecker(
            logger=config.logger
        )

    @property
    def version_checker(self) -> VersionCompatibilityChecker:
        return self._version_checker

    def cache_key(self, method: str, url: str) -> str:
        """Cache key for a request made by this executor's credential."""
        return generate_cache_key(method, url, self._identity_hash)

    async def execute(
        self,
        method: str,
        url: str,
        body: Any = None,
        options: Optional[ExecuteOptions] = None,
    ) -> Any:
        """
        Execute a request.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: JSON-serializable body, str or bytes
            options: Per-call options

        Returns:
            The parsed response body

        Raises:
            RefyneError: exactly one typed error on failure
        """
        method = method.upper()
        opts = options or ExecuteOptions()
        cacheable = self._config.cache_enabled and method == "GET"
        cache_key = self.cache_key(method, url) if cacheable else None

        if cache_key is not None and not opts.skip_cache:
            cached = await self._lookup(cache_key, url)
            if cached is not None:
                return copy.deepcopy(cached.value)

        request_headers = dict(self._headers)
        if opts.headers:
            request_headers.update(opts.headers)
        payload = _encode_body(body)

        response = await self._attempt_loop(method, url, request_headers, payload)

        self._version_checker.check(get_header_value(response.headers, API_VERSION_HEADER))

        value = _decode_body(response.body)

        if cache_key is not None:
            await self._store(cache_key, url, value, response)

        return value

    async def _attempt_loop(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        payload: Optional[bytes],
    ) -> TransportResponse:
        max_retries = self._config.max_retries
        attempt = 1

        while True:
            self._logger.debug(f"Request: method={method}, url={url}, attempt={attempt}")

            try:
                response = await self._send(method, url, headers, payload)
            except RefyneError:
                raise
            except Exception as error:
                if is_retryable_error(error) and attempt <= max_retries:
                    delay_ms = calculate_backoff_with_jitter(attempt)
                    self._logger.warning(
                        f"Network error, retrying: url={url}, attempt={attempt}, "
                        f"error={error!r}, delay_ms={delay_ms}"
                    )
                    await self._config.sleep(delay_ms / 1000)
                    attempt += 1
                    continue
                raise network_error(attempt, error) from error

            if response.status == 429:
                if attempt > max_retries:
                    raise create_error_from_response(response)
                retry_after = self._retry_after_seconds(response)
                self._logger.warning(
                    f"Rate limited, retrying: url={url}, attempt={attempt}, "
                    f"retry_after_seconds={retry_after}"
                )
                await self._config.sleep(retry_after)
                attempt += 1
                continue

            if response.status >= 500:
                if attempt > max_retries:
                    raise create_error_from_response(response)
                delay_ms = calculate_backoff_with_jitter(attempt)
                self._logger.warning(
                    f"Server error, retrying: url={url}, attempt={attempt}, "
                    f"status={response.status}, delay_ms={delay_ms}"
                )
                await self._config.sleep(delay_ms / 1000)
                attempt += 1
                continue

            if not response.ok:
                raise create_error_from_response(response)

            return response

    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        payload: Optional[bytes],
    ) -> TransportResponse:
        """One transport attempt under the per-attempt timeout."""
        timeout = self._config.timeout_seconds
        try:
            return await asyncio.wait_for(
                self._config.transport.send(method, url, headers, payload, timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as error:
            raise timeout_error(url, int(timeout * 1000)) from error

    def _retry_after_seconds(self, response: TransportResponse) -> int:
        retry_after = parse_retry_after(
            get_header_value(response.headers, "Retry-After"),
            DEFAULT_RETRY_AFTER_SECONDS,
        )
        ceiling = self._config.max_retry_after_seconds
        if ceiling is not None and retry_after > ceiling:
            self._logger.warning(
                f"Retry-After {retry_after}s exceeds ceiling, waiting {ceiling}s"
            )
            return ceiling
        return retry_after

    async def _lookup(self, cache_key: str, url: str):
        try:
            cached = await self._config.cache.get(cache_key)
        except Exception as error:
            self._logger.warning(f"Cache get error: url={url}, error={error!r}")
            return None
        if cached is None:
            self._logger.debug(f"Cache miss: url={url}")
        else:
            self._logger.debug(f"Cache hit: url={url}, key={cache_key}")
        return cached

    async def _store(
        self, cache_key: str, url: str, value: Any, response: TransportResponse
    ) -> None:
        cache_control = get_header_value(response.headers, "Cache-Control")
        if not is_cacheable_response("GET", response.status, cache_control):
            self._logger.debug(f"Response not cacheable: url={url}")
            return
        # The caller owns `value`; the entry keeps its own copy
        entry = create_cache_entry(copy.deepcopy(value), cache_control, self._config.clock())
        try:
            await self._config.cache.set(cache_key, entry)
        except Exception as error:
            self._logger.debug(f"Failed to cache response: url={url}, error={error!r}")
            return
        self._logger.debug(f"Cached response: url={url}, key={cache_key}")
