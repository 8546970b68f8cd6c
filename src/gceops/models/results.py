"""Terminal outcome of tracking one operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional

from gceops.errors import (
    DeadlineExceededError,
    OperationCancelledError,
    OperationFailedError,
)

from .operation import OperationHandle, OperationState

TrackerStatus = Literal["succeeded", "failed", "timed_out", "cancelled"]


@dataclass(slots=True)
class TrackerResult:
    """
    Result of await_operation().

    Only "failed" populates the error_* fields. attempts counts status
    fetches (including failed ones); elapsed_sec is measured from the first
    poll.
    """

    status: TrackerStatus
    handle: OperationHandle
    attempts: int
    elapsed_sec: float

    last_state: Optional[OperationState] = None
    anomalies: int = 0

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    def raise_for_status(self) -> None:
        """Raise the matching gceops error unless the operation succeeded."""
        if self.status == "succeeded":
            return

        details: dict[str, Any] = {
            "operation": self.handle.id,
            "attempts": self.attempts,
            "elapsed_sec": self.elapsed_sec,
        }
        if self.status == "failed":
            details["error_type"] = self.error_type
            if self.error_details:
                details["error_details"] = self.error_details
            raise OperationFailedError(
                self.error_message or f"Operation {self.handle.id} failed",
                details=details,
            )
        if self.status == "timed_out":
            details["last_state"] = self.last_state.value if self.last_state else None
            raise DeadlineExceededError(
                f"Operation {self.handle.id} did not finish before the deadline",
                details=details,
            )
        raise OperationCancelledError(
            f"Tracking of operation {self.handle.id} was cancelled",
            details=details,
        )
