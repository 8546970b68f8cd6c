"""gceops public API."""

from __future__ import annotations

from gceops.controller import ComputeController
from gceops.errors import (
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
from gceops.log import configure_logging
from gceops.models import (
    OperationHandle,
    OperationKind,
    OperationScope,
    OperationState,
    OperationStatus,
    TrackerResult,
)
from gceops.tracker import (
    OperationStatusSource,
    OperationTracker,
    PollConfig,
    await_operation,
)

__all__ = [
    # High-level
    "ComputeController",
    "OperationTracker",
    "await_operation",
    "PollConfig",
    "OperationStatusSource",
    "configure_logging",
    # Models
    "OperationHandle",
    "OperationKind",
    "OperationScope",
    "OperationState",
    "OperationStatus",
    "TrackerResult",
    # Errors
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
