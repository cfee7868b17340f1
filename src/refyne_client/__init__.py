"""
Refyne API client with response caching, retry with backoff, typed errors
and API version compatibility checking.
"""
from .types import (
    HttpMethod,
    Clock,
    Sleep,
    CacheControlDirectives,
    CacheEntry,
    CacheStore,
    TransportResponse,
    Transport,
    Logger,
    ExecuteOptions,
)
from .parser import (
    parse_cache_control,
    build_cache_control,
    parse_retry_after,
    get_header_value,
)
from .cache import (
    hash_string,
    generate_cache_key,
    create_cache_entry,
    is_cacheable_response,
)
from .stores import (
    MemoryCacheStore,
    MemoryCacheStats,
    create_memory_cache_store,
)
from .backoff import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_DELAY_MS,
    calculate_backoff_with_jitter,
    is_retryable_error,
    is_timeout_error,
    async_sleep,
)
from .errors import (
    ErrorTag,
    ApiErrorKind,
    RateLimited,
    ValidationFailed,
    Unauthorized,
    Forbidden,
    NotFound,
    ProtocolTooOld,
    Timeout,
    NetworkFailure,
    Generic,
    RefyneError,
    create_error_from_response,
)
from .version import (
    SDK_VERSION,
    MIN_API_VERSION,
    MAX_KNOWN_API_VERSION,
    parse_version,
    compare_versions,
    check_api_version_compatibility,
    VersionCompatibilityChecker,
    detect_runtime,
    build_user_agent,
)
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_MAX_RETRIES,
    ClientConfig,
    ResolvedConfig,
    validate_config,
    resolve_config,
    config_from_env,
)
from .transport import HttpxTransport
from .executor import RequestExecutor
from .client import (
    RefyneClient,
    create_client,
    build_url,
)


__all__ = [
    # Types
    "HttpMethod",
    "Clock",
    "Sleep",
    "CacheControlDirectives",
    "CacheEntry",
    "CacheStore",
    "TransportResponse",
    "Transport",
    "Logger",
    "ExecuteOptions",
    # Parser
    "parse_cache_control",
    "build_cache_control",
    "parse_retry_after",
    "get_header_value",
    # Cache
    "hash_string",
    "generate_cache_key",
    "create_cache_entry",
    "is_cacheable_response",
    # Stores
    "MemoryCacheStore",
    "MemoryCacheStats",
    "create_memory_cache_store",
    # Backoff
    "DEFAULT_BASE_DELAY_MS",
    "DEFAULT_MAX_DELAY_MS",
    "calculate_backoff_with_jitter",
    "is_retryable_error",
    "is_timeout_error",
    "async_sleep",
    # Errors
    "ErrorTag",
    "ApiErrorKind",
    "RateLimited",
    "ValidationFailed",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "ProtocolTooOld",
    "Timeout",
    "NetworkFailure",
    "Generic",
    "RefyneError",
    "create_error_from_response",
    # Version
    "SDK_VERSION",
    "MIN_API_VERSION",
    "MAX_KNOWN_API_VERSION",
    "parse_version",
    "compare_versions",
    "check_api_version_compatibility",
    "VersionCompatibilityChecker",
    "detect_runtime",
    "build_user_agent",
    # Config
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_MAX_RETRIES",
    "ClientConfig",
    "ResolvedConfig",
    "validate_config",
    "resolve_config",
    "config_from_env",
    # Transport
    "HttpxTransport",
    # Executor
    "RequestExecutor",
    # Client
    "RefyneClient",
    "create_client",
    "build_url",
]


__version__ = "0.1.0"
