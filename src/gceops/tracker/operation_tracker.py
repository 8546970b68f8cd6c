"""Drive a long-running Compute Engine operation to a terminal state."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from gceops.errors import (
    ApiError,
    GceOpsError,
    InconsistentStatusError,
    NetworkError,
    OperationError,
    is_transient,
)
from gceops.models import (
    OperationHandle,
    OperationState,
    OperationStatus,
    TrackerResult,
    TrackerStatus,
)
from gceops.util.time import Clock, Deadline

from .backoff import Backoff
from .config import PollConfig

logger = logging.getLogger(__name__)

# Returns True if the wait was interrupted by cancellation.
WaitFunc = Callable[[threading.Event, float], bool]


class OperationStatusSource(Protocol):
    """Anything able to fetch the current status of an operation."""

    def fetch_operation_status(
        self,
        handle: OperationHandle,
        *,
        timeout: Optional[float] = None,
    ) -> OperationStatus:
        ...


def _event_wait(cancel: threading.Event, seconds: float) -> bool:
    return cancel.wait(seconds)


@dataclass
class _Run:
    handle: OperationHandle
    deadline: Deadline
    attempts: int = 0
    consecutive_transient: int = 0
    anomalies: int = 0
    last_state: Optional[OperationState] = None


class OperationTracker:
    """
    Poll an operation until DONE, failure, deadline or cancellation.

    The tracker keeps no state between calls; every await_operation() call
    gets its own deadline, backoff schedule and counters, so one tracker may
    serve several threads at once provided the source is thread-safe.
    """

    def __init__(
        self,
        source: OperationStatusSource,
        *,
        clock: Clock = time.monotonic,
        wait: Optional[WaitFunc] = None,
    ) -> None:
        self._source = source
        self._clock = clock
        self._wait = wait or _event_wait

    def await_operation(
        self,
        handle: OperationHandle,
        config: Optional[PollConfig] = None,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> TrackerResult:
        """
        Track ``handle`` to a terminal outcome.

        Returns:
            TrackerResult with status succeeded, failed, timed_out or cancelled.
            Fetch errors are classified here and never raised.
        """
        config = config if config is not None else PollConfig()
        cancel = cancel if cancel is not None else threading.Event()

        backoff = Backoff(config)
        run = _Run(handle=handle, deadline=Deadline(config.deadline, clock=self._clock))

        while True:
            if cancel.is_set():
                return self._finish(run, "cancelled")
            # The first poll always happens, even with a spent budget.
            if run.attempts > 0 and run.deadline.expired():
                return self._finish(run, "timed_out")

            run.attempts += 1
            timeout = self._fetch_timeout(run, config)
            logger.debug(
                "Polling operation %s (%s) attempt=%d timeout=%.1fs",
                handle.id,
                handle.scope,
                run.attempts,
                timeout,
                extra=_log_extra(handle),
            )

            try:
                status = self._source.fetch_operation_status(handle, timeout=timeout)
            except Exception as exc:
                if cancel.is_set():
                    return self._finish(run, "cancelled")
                outcome = self._on_fetch_error(run, config, _as_gceops_error(exc))
            else:
                if cancel.is_set():
                    return self._finish(run, "cancelled")
                outcome = self._on_status(run, config, status)

            if outcome is not None:
                return outcome

            if config.poll_once:
                return self._finish(run, "timed_out")

            step = next(backoff)
            if not run.deadline.allows(step.wait):
                logger.debug(
                    "Next wait %.2fs would pass the deadline for operation %s",
                    step.wait,
                    handle.id,
                )
                return self._finish(run, "timed_out")

            if self._wait(cancel, step.wait):
                return self._finish(run, "cancelled")

    # ----------------------------
    # Internals
    # ----------------------------
    def _fetch_timeout(self, run: _Run, config: PollConfig) -> float:
        remaining = run.deadline.remaining()
        if remaining <= 0:
            return config.fetch_timeout
        return min(config.fetch_timeout, remaining)

    def _on_status(
        self,
        run: _Run,
        config: PollConfig,
        status: OperationStatus,
    ) -> Optional[TrackerResult]:
        run.consecutive_transient = 0
        previous = run.last_state
        run.last_state = status.state

        if previous is not None and status.state.is_regression_from(previous):
            run.anomalies += 1
            logger.warning(
                "Operation %s went back from %s to %s (anomaly %d/%d)",
                run.handle.id,
                previous.value,
                status.state.value,
                run.anomalies,
                config.max_anomalies,
                extra=_log_extra(run.handle),
            )
            if run.anomalies >= config.max_anomalies:
                err = InconsistentStatusError(
                    "Operation status regressed too many times",
                    details={"anomalies": run.anomalies, "state": status.state.value},
                )
                return self._finish(run, "failed", error=err)

        if not status.is_done:
            return None

        if status.error_details:
            err = OperationError(
                _operation_error_message(status.error_details),
                details=dict(status.error_details),
            )
            return self._finish(run, "failed", error=err)
        return self._finish(run, "succeeded")

    def _on_fetch_error(
        self,
        run: _Run,
        config: PollConfig,
        exc: GceOpsError,
    ) -> Optional[TrackerResult]:
        if not is_transient(exc):
            return self._finish(run, "failed", error=exc)

        run.consecutive_transient += 1
        logger.warning(
            "Transient error polling operation %s (%d/%d): %s",
            run.handle.id,
            run.consecutive_transient,
            config.max_transient_retries,
            exc,
            extra=_log_extra(run.handle),
        )
        if run.consecutive_transient >= config.max_transient_retries:
            details = dict(exc.details)
            details["consecutive_transient_errors"] = run.consecutive_transient
            return self._finish(
                run,
                "failed",
                error_type=type(exc).__name__,
                error_message=f"Giving up after {run.consecutive_transient} transient errors: {exc}",
                error_details=details,
            )
        return None

    def _finish(
        self,
        run: _Run,
        status: TrackerStatus,
        *,
        error: Optional[GceOpsError] = None,
        error_type: Optional[str] = None,
        error_message: Optional[str] = None,
        error_details: Optional[dict[str, Any]] = None,
    ) -> TrackerResult:
        if error is not None:
            error_type = type(error).__name__
            error_message = str(error)
            error_details = dict(error.details) or None

        result = TrackerResult(
            status=status,
            handle=run.handle,
            attempts=run.attempts,
            elapsed_sec=run.deadline.elapsed(),
            last_state=run.last_state,
            anomalies=run.anomalies,
            error_type=error_type,
            error_message=error_message,
            error_details=error_details,
        )
        log = logger.info if status == "succeeded" else logger.warning
        log(
            "Operation %s (%s %s) finished tracking: %s after %d attempt(s), %.2fs",
            run.handle.id,
            run.handle.kind.value,
            run.handle.target_resource,
            status,
            result.attempts,
            result.elapsed_sec,
            extra=_log_extra(run.handle),
        )
        return result


def await_operation(
    source: OperationStatusSource,
    handle: OperationHandle,
    config: Optional[PollConfig] = None,
    *,
    cancel: Optional[threading.Event] = None,
    clock: Clock = time.monotonic,
    wait: Optional[WaitFunc] = None,
) -> TrackerResult:
    """Track one operation with a throwaway OperationTracker."""
    tracker = OperationTracker(source, clock=clock, wait=wait)
    return tracker.await_operation(handle, config, cancel=cancel)


def _log_extra(handle: OperationHandle) -> dict[str, str]:
    return {"operation": handle.id, "scope": str(handle.scope)}


def _as_gceops_error(exc: Exception) -> GceOpsError:
    if isinstance(exc, GceOpsError):
        return exc
    if isinstance(exc, (OSError, TimeoutError)):
        return NetworkError("Network error while fetching operation status", cause=exc)
    return ApiError("Unexpected error while fetching operation status", cause=exc)


def _operation_error_message(error_details: dict[str, Any]) -> str:
    """Summarize a Compute Engine Operation.error payload."""
    errors = error_details.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        code = first.get("code")
        message = first.get("message")
        if code and message:
            return f"{code}: {message}"
        if code or message:
            return str(code or message)
    code = error_details.get("code")
    if code:
        return str(code)
    return "Operation finished with an error"
