from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], float]


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp into a tz-aware UTC datetime.

    Compute Engine reports operation times with an offset, e.g.
    ``2025-01-01T12:34:56.123-08:00``; the ``Z`` suffix is accepted too.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    # fromisoformat() rejects 'Z' before 3.11.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        raise ValueError("naive timestamp is not allowed; offset required")
    return dt.astimezone(timezone.utc)


def parse_rfc3339_or_none(value: object) -> Optional[datetime]:
    """Lenient variant for optional response fields."""
    if not isinstance(value, str):
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None


class Deadline:
    """
    Wall-clock budget measured on a monotonic clock.

    A non-positive budget is already expired at start.
    """

    def __init__(self, budget_sec: float, *, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._budget = float(budget_sec)
        self._start = clock()

    @property
    def budget(self) -> float:
        return self._budget

    def elapsed(self) -> float:
        return self._clock() - self._start

    def remaining(self) -> float:
        return max(0.0, self._budget - self.elapsed())

    def expired(self) -> bool:
        return self.elapsed() >= self._budget

    def allows(self, wait_sec: float) -> bool:
        """Return True if waiting ``wait_sec`` still ends before the deadline."""
        return self.elapsed() + wait_sec < self._budget
