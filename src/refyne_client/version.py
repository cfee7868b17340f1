"""
SDK version information and API compatibility checking.
"""
import logging
import platform
import re
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import protocol_too_old_error
from .types import Logger

# Current SDK version
SDK_VERSION = "0.1.0"

# Minimum API version this SDK supports
MIN_API_VERSION = "0.0.0"

# Maximum API version this SDK was built against
MAX_KNOWN_API_VERSION = "0.0.0"

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-(.+))?$")

_default_logger = logging.getLogger("refyne_client.version")


@dataclass(frozen=True)
class ParsedVersion:
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    def triple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def parse_version(version: Optional[str]) -> ParsedVersion:
    """
    Parse a semver string such as ``1.2.3`` or ``1.2.3-beta``.

    Unparsable input parses as ``0.0.0``.
    """
    match = _VERSION_RE.match((version or "").strip())
    if not match:
        return ParsedVersion(0, 0, 0)
    return ParsedVersion(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4),
    )


def compare_versions(a: str, b: str) -> int:
    """
    Compare two versions by (major, minor, patch); prerelease is ignored.

    Returns:
        -1 if a < b, 0 if a == b, 1 if a > b
    """
    va = parse_version(a).triple()
    vb = parse_version(b).triple()
    if va == vb:
        return 0
    return -1 if va < vb else 1


def check_api_version_compatibility(
    api_version: str,
    logger: Optional[Logger] = None,
    min_supported: str = MIN_API_VERSION,
    max_known: str = MAX_KNOWN_API_VERSION,
) -> None:
    """
    Check if an API version is compatible with this SDK.

    Args:
        api_version: The API version from the X-API-Version header
        logger: Logger for warnings
        min_supported: Lowest supported API version
        max_known: Newest API version this SDK was built against

    Raises:
        RefyneError: ProtocolTooOld if the API version is below ``min_supported``
    """
    logger = logger or _default_logger

    if compare_versions(api_version, min_supported) < 0:
        raise protocol_too_old_error(api_version, min_supported, max_known)

    if parse_version(api_version).major > parse_version(max_known).major:
        logger.warning(
            f"API version {api_version} is newer than this SDK was built for ({max_known}). "
            f"There may be breaking changes. Consider upgrading the SDK "
            f"(sdk_version={SDK_VERSION})."
        )


class VersionCompatibilityChecker:
    """
    One-shot API version check, scoped to a client instance.

    The first successful response consumes the flag; concurrent first
    responses race on a lock so exactly one of them evaluates the check.
    A later server downgrade is never detected.
    """

    def __init__(
        self,
        min_supported: str = MIN_API_VERSION,
        max_known: str = MAX_KNOWN_API_VERSION,
        logger: Optional[Logger] = None,
    ) -> None:
        self._min_supported = min_supported
        self._max_known = max_known
        self._logger = logger or _default_logger
        self._checked = False
        self._lock = threading.Lock()

    @property
    def checked(self) -> bool:
        return self._checked

    def _claim(self) -> bool:
        with self._lock:
            if self._checked:
                return False
            self._checked = True
            return True

    def check(self, server_version: Optional[str]) -> bool:
        """
        Run the check if no earlier response has.

        Args:
            server_version: The server's X-API-Version header, if any

        Returns:
            True if this call evaluated the check

        Raises:
            RefyneError: ProtocolTooOld
        """
        if not self._claim():
            return False

        if not server_version:
            self._logger.warning("Server response did not include an API version header")
            return True

        check_api_version_compatibility(
            server_version, self._logger, self._min_supported, self._max_known
        )
        return True


def detect_runtime() -> Tuple[str, str]:
    """Detect the current Python runtime as (name, version)."""
    return platform.python_implementation(), platform.python_version()


def build_user_agent(custom_suffix: Optional[str] = None) -> str:
    """
    Build the User-Agent string for SDK requests.

    Example:
        build_user_agent("MyApp/1.0")
        # "Refyne-SDK-Python/0.1.0 (CPython/3.12.1) MyApp/1.0"
    """
    name, version = detect_runtime()
    user_agent = f"Refyne-SDK-Python/{SDK_VERSION} ({name}/{version})"
    if custom_suffix:
        user_agent += f" {custom_suffix}"
    return user_agent
