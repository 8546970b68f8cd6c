"""Exception hierarchy, HTTP error mapping and retry classification for gceops."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GceOpsError(Exception):
    """
    Base exception for gceops.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidArgumentError(GceOpsError):
    """Raised when request arguments are invalid (HTTP 400, bad handle, bad config)."""


class AuthError(GceOpsError):
    """Raised when credentials are missing or rejected (HTTP 401)."""


class PermissionError(GceOpsError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class NotFoundError(GceOpsError):
    """Raised when a resource or operation is unknown or expired (HTTP 404)."""


class ConflictError(GceOpsError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(GceOpsError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(GceOpsError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GceOpsError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GceOpsError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class OperationError(GceOpsError):
    """The operation reached DONE with a server-reported error."""


class InconsistentStatusError(GceOpsError):
    """The backend reported too many state regressions for one operation."""


class OperationFailedError(GceOpsError):
    """Raised by TrackerResult.raise_for_status() for failed operations."""


class DeadlineExceededError(GceOpsError):
    """Raised by TrackerResult.raise_for_status() when tracking timed out."""


class OperationCancelledError(GceOpsError):
    """Raised by TrackerResult.raise_for_status() when tracking was cancelled."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gceops exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GceOpsError:
    """
    Map an HTTP error to a gceops exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 5xx and anything else -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)


def is_transient(exc: BaseException) -> bool:
    """
    Return True if retrying the same request unchanged may succeed.

    Transient: NetworkError, RateLimitError, and ApiError carrying a 5xx
    status. Everything else (auth, permission, not-found, bad request,
    unclassified errors without a status) is fatal.
    """
    if isinstance(exc, (NetworkError, RateLimitError)):
        return True
    if isinstance(exc, ApiError):
        status_code = exc.details.get("status_code")
        return isinstance(status_code, int) and 500 <= status_code <= 599
    return False
