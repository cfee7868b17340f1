"""
Refyne API client.
"""
from typing import Any, Dict, Optional, Union
from urllib.parse import urlencode, urlparse

from .config import ClientConfig, config_from_env, resolve_config
from .executor import RequestExecutor
from .types import ExecuteOptions, HttpMethod
from .version import (
    MAX_KNOWN_API_VERSION,
    MIN_API_VERSION,
    SDK_VERSION,
    VersionCompatibilityChecker,
    build_user_agent,
)

QueryParams = Dict[str, Union[str, int, bool]]


def build_url(base_url: str, path: str, query: Optional[QueryParams] = None) -> str:
    """Build full URL from base and path."""
    if path.startswith(("http://", "https://")):
        url = path
    else:
        parsed = urlparse(base_url)
        base_path = parsed.path.rstrip("/")
        if path and not path.startswith("/"):
            path = "/" + path
        url = f"{parsed.scheme}://{parsed.netloc}{base_path}{path}"

    if query:
        query_str = urlencode(
            {k: (str(v).lower() if isinstance(v, bool) else str(v)) for k, v in query.items()}
        )
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{query_str}"

    return url


def _mask_headers_for_logging(headers: Dict[str, str]) -> Dict[str, str]:
    """Mask authorization header for safe logging."""
    masked = dict(headers)
    for key in masked:
        if key.lower() == "authorization":
            masked[key] = masked[key][:10] + "***"
    return masked


class RefyneClient:
    """
    Refyne API client.

    The single entry point for API calls is ``execute``; the verb helpers
    are thin wrappers over it.

    Example:
        async with RefyneClient(ClientConfig(api_key=os.environ["REFYNE_API_KEY"])) as client:
            jobs = await client.get("/api/v1/jobs", query={"limit": 10})
            result = await client.post("/api/v1/extract", {"url": url, "schema": schema})
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = resolve_config(config)
        self._owns_transport = config.transport is None
        self._logger = self._config.logger

        headers = dict(self._config.headers)
        headers.update({
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": build_user_agent(self._config.user_agent_suffix),
            "X-SDK-Version": SDK_VERSION,
        })

        self._executor = RequestExecutor(
            self._config,
            headers,
            VersionCompatibilityChecker(MIN_API_VERSION, MAX_KNOWN_API_VERSION, self._logger),
        )
        self._closed = False

        self._logger.debug(
            f"RefyneClient created: base_url={self._config.base_url}, "
            f"headers={_mask_headers_for_logging(headers)}"
        )

    @classmethod
    def from_env(cls, prefix: str = "REFYNE_") -> "RefyneClient":
        """Create a client from ``<prefix>*`` environment variables."""
        return cls(config_from_env(prefix))

    async def execute(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
        skip_cache: bool = False,
        query: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Execute an API call.

        Args:
            method: HTTP method
            path: Path relative to the base URL, or an absolute URL
            body: JSON-serializable request body
            skip_cache: Bypass the cache lookup for this GET
            query: Query parameters
            headers: Extra headers for this call

        Returns:
            The parsed response body

        Raises:
            RefyneError: on any failure
        """
        if self._closed:
            raise RuntimeError("Client has been closed")

        url = build_url(self._config.base_url, path, query)
        return await self._executor.execute(
            method,
            url,
            body,
            ExecuteOptions(skip_cache=skip_cache, headers=headers),
        )

    async def get(self, path: str, **kwargs: Any) -> Any:
        """GET request."""
        return await self.execute("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        """POST request."""
        return await self.execute("POST", path, body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        """PUT request."""
        return await self.execute("PUT", path, body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        """PATCH request."""
        return await self.execute("PATCH", path, body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        """DELETE request."""
        return await self.execute("DELETE", path, **kwargs)

    @property
    def version(self) -> Dict[str, str]:
        """SDK version information."""
        return {
            "sdk": SDK_VERSION,
            "min_api": MIN_API_VERSION,
            "max_known_api": MAX_KNOWN_API_VERSION,
        }

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def close(self) -> None:
        """Close the client. A caller-supplied transport is left open."""
        self._closed = True
        if self._owns_transport:
            await self._config.transport.close()

    async def __aenter__(self) -> "RefyneClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()


def create_client(api_key: str, **kwargs: Any) -> RefyneClient:
    """
    Create a Refyne client.

    Args:
        api_key: Refyne API key
        **kwargs: Any other ``ClientConfig`` field

    Example:
        client = create_client(api_key, timeout_seconds=60, max_retries=5)
    """
    return RefyneClient(ClientConfig(api_key=api_key, **kwargs))
