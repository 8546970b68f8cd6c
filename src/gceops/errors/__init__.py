"""Public error exports for gceops."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    DeadlineExceededError,
    GceOpsError,
    HttpErrorInfo,
    InconsistentStatusError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    OperationCancelledError,
    OperationError,
    OperationFailedError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    is_transient,
    map_http_error,
)

__all__ = [
    "GceOpsError",
    "InvalidArgumentError",
    "AuthError",
    "PermissionError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "OperationError",
    "InconsistentStatusError",
    "OperationFailedError",
    "DeadlineExceededError",
    "OperationCancelledError",
    "HttpErrorInfo",
    "is_transient",
    "map_http_error",
]
