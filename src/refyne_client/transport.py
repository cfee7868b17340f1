"""
Default transport using httpx.
"""
import logging
import os
from typing import Dict, Optional

import httpx

from .types import TransportResponse

logger = logging.getLogger("refyne_client.transport")


def _is_ssl_verify_disabled_by_env() -> bool:
    """Check if SSL verification is disabled via ``SSL_CERT_VERIFY=0``."""
    return os.environ.get("SSL_CERT_VERIFY", "") == "0"


class HttpxTransport:
    """
    Transport backed by ``httpx.AsyncClient``.

    Transport-level failures surface as the httpx exceptions
    (``httpx.TimeoutException``, ``httpx.ConnectError``, ...). HTTP error
    statuses are returned, never raised.

    Example:
        transport = HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    """

    def __init__(self, httpx_client: Optional[httpx.AsyncClient] = None) -> None:
        if httpx_client is not None:
            self._client = httpx_client
            self._owns_client = False
        else:
            verify_ssl = not _is_ssl_verify_disabled_by_env()
            if not verify_ssl:
                logger.warning("SSL certificate verification disabled by environment")
            self._client = httpx.AsyncClient(verify=verify_ssl)
            self._owns_client = True
        self._closed = False

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[bytes],
        timeout: float,
    ) -> TransportResponse:
        """Send one request and return the raw response."""
        if self._closed:
            raise RuntimeError("Transport has been closed")

        response = await self._client.request(
            method=method,
            url=url,
            headers=headers,
            content=body,
            timeout=timeout,
        )

        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            reason=response.reason_phrase or "",
        )

    async def close(self) -> None:
        """Close the transport. A caller-supplied httpx client is left open."""
        self._closed = True
        if self._owns_client:
            await self._client.aclose()
