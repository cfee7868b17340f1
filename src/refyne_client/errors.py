"""
Error types for the Refyne client.

Every failed call raises exactly one ``RefyneError``. Its ``kind`` is one of a
closed set of variant dataclasses carrying structured data, and ``tag`` names
the variant so callers can dispatch without isinstance chains:

    try:
        data = await client.execute("GET", "/api/v1/jobs")
    except RefyneError as error:
        if error.tag == ErrorTag.RATE_LIMITED:
            wait(error.kind.retry_after_seconds)
        elif error.tag == ErrorTag.VALIDATION_FAILED:
            show(error.kind.field_errors)
        else:
            raise
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union

from .parser import get_header_value, parse_retry_after
from .types import TransportResponse

DEFAULT_RATE_LIMIT_RETRY_AFTER_SECONDS = 60


class ErrorTag(str, Enum):
    """Error variant tag."""

    RATE_LIMITED = "rate_limited"
    VALIDATION_FAILED = "validation_failed"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    PROTOCOL_TOO_OLD = "protocol_too_old"
    TIMEOUT = "timeout"
    NETWORK_FAILURE = "network_failure"
    GENERIC = "generic"


@dataclass(frozen=True)
class RateLimited:
    retry_after_seconds: int
    tag: ClassVar[ErrorTag] = ErrorTag.RATE_LIMITED


@dataclass(frozen=True)
class ValidationFailed:
    field_errors: Optional[Dict[str, List[str]]] = None
    tag: ClassVar[ErrorTag] = ErrorTag.VALIDATION_FAILED


@dataclass(frozen=True)
class Unauthorized:
    tag: ClassVar[ErrorTag] = ErrorTag.UNAUTHORIZED


@dataclass(frozen=True)
class Forbidden:
    tag: ClassVar[ErrorTag] = ErrorTag.FORBIDDEN


@dataclass(frozen=True)
class NotFound:
    tag: ClassVar[ErrorTag] = ErrorTag.NOT_FOUND


@dataclass(frozen=True)
class ProtocolTooOld:
    server_version: str
    min_supported: str
    max_known: str
    tag: ClassVar[ErrorTag] = ErrorTag.PROTOCOL_TOO_OLD


@dataclass(frozen=True)
class Timeout:
    after_ms: int
    tag: ClassVar[ErrorTag] = ErrorTag.TIMEOUT


@dataclass(frozen=True)
class NetworkFailure:
    cause: str
    tag: ClassVar[ErrorTag] = ErrorTag.NETWORK_FAILURE


@dataclass(frozen=True)
class Generic:
    http_status: int
    detail: Optional[str] = None
    tag: ClassVar[ErrorTag] = ErrorTag.GENERIC


ApiErrorKind = Union[
    RateLimited,
    ValidationFailed,
    Unauthorized,
    Forbidden,
    NotFound,
    ProtocolTooOld,
    Timeout,
    NetworkFailure,
    Generic,
]


class RefyneError(Exception):
    """Raised for every failed Refyne API call."""

    def __init__(
        self,
        kind: ApiErrorKind,
        message: str,
        status: int = 0,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status  # 0 for client-side failures
        self.detail = detail

    @property
    def tag(self) -> ErrorTag:
        return self.kind.tag

    def __repr__(self) -> str:
        return f"RefyneError(tag={self.tag.value!r}, status={self.status}, message={self.message!r})"


def protocol_too_old_error(
    server_version: str, min_supported: str, max_known: str
) -> RefyneError:
    """Build the error raised when the server protocol version is too old."""
    message = (
        f"API version {server_version} is not supported. This SDK requires API "
        f"version >= {min_supported}. Please upgrade the API or use an older SDK version."
    )
    return RefyneError(ProtocolTooOld(server_version, min_supported, max_known), message)


def timeout_error(url: str, after_ms: int) -> RefyneError:
    """Build the error raised when an attempt exceeds its timeout."""
    return RefyneError(Timeout(after_ms), f"Request to {url} timed out after {after_ms}ms")


def network_error(attempts: int, cause: BaseException) -> RefyneError:
    """Build the error raised when the transport fails."""
    reason = str(cause) or type(cause).__name__
    return RefyneError(
        NetworkFailure(reason),
        f"Request failed after {attempts} attempts: {reason}",
    )


def _parse_error_body(body: bytes) -> Dict:
    if not body:
        return {}
    try:
        parsed = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def create_error_from_response(response: TransportResponse) -> RefyneError:
    """
    Create the typed error for a non-2xx response.

    Pure function of the status, headers and body.

    Args:
        response: The failed response

    Returns:
        The error to raise
    """
    error_body = _parse_error_body(response.body)

    message = (
        error_body.get("error")
        or error_body.get("message")
        or response.reason
        or "Unknown error"
    )
    message = str(message)
    detail = error_body.get("detail")
    if detail is not None and not isinstance(detail, str):
        detail = json.dumps(detail)

    status = response.status

    if status == 400:
        field_errors = error_body.get("errors")
        if not isinstance(field_errors, dict):
            field_errors = None
        return RefyneError(ValidationFailed(field_errors), message, status, detail)

    if status == 401:
        return RefyneError(Unauthorized(), message, status, detail)

    if status == 403:
        return RefyneError(Forbidden(), message, status, detail)

    if status == 404:
        return RefyneError(NotFound(), message, status, detail)

    if status == 429:
        retry_after = parse_retry_after(
            get_header_value(response.headers, "Retry-After"),
            DEFAULT_RATE_LIMIT_RETRY_AFTER_SECONDS,
        )
        return RefyneError(RateLimited(retry_after), message, status, detail)

    return RefyneError(Generic(status, detail), message, status, detail)
