"""Public tracker exports for gceops."""

from __future__ import annotations

from .backoff import Backoff, Interval, preview_intervals
from .config import ENV_PREFIX, PollConfig
from .operation_tracker import (
    OperationStatusSource,
    OperationTracker,
    WaitFunc,
    await_operation,
)

__all__ = [
    "Backoff",
    "Interval",
    "preview_intervals",
    "ENV_PREFIX",
    "PollConfig",
    "OperationStatusSource",
    "OperationTracker",
    "WaitFunc",
    "await_operation",
]
