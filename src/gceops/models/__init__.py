"""Public model exports for gceops."""

from __future__ import annotations

from .operation import (
    MEMBERSHIP_KINDS,
    OperationHandle,
    OperationKind,
    OperationScope,
    OperationState,
    OperationStatus,
)
from .results import TrackerResult, TrackerStatus

__all__ = [
    "MEMBERSHIP_KINDS",
    "OperationHandle",
    "OperationKind",
    "OperationScope",
    "OperationState",
    "OperationStatus",
    "TrackerResult",
    "TrackerStatus",
]
