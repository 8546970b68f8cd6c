"""Exponential backoff schedule with per-interval jitter."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, Optional

from .config import PollConfig


@dataclass(frozen=True)
class Interval:
    """One step of the schedule: the un-jittered base and the actual wait."""

    base: float
    wait: float


class Backoff:
    """
    Stateful iterator over poll intervals for a single tracking call.

    Each base interval is the previous one times ``multiplier``, capped at
    ``max_interval``. Jitter is drawn fresh for every step from the
    instance's own RNG, so a fixed seed yields a reproducible sequence.
    """

    def __init__(self, config: PollConfig, rng: Optional[random.Random] = None) -> None:
        self._config = config
        self._rng = rng if rng is not None else random.Random(config.seed)
        self._base = config.initial_interval

    def __iter__(self) -> Iterator[Interval]:
        return self

    def __next__(self) -> Interval:
        base = self._base
        step = Interval(base=base, wait=self._jitter(base))
        self._base = min(base * self._config.multiplier, self._config.max_interval)
        return step

    def _jitter(self, base: float) -> float:
        fraction = self._config.jitter_fraction
        if fraction == 0 or base == 0:
            return base
        return base * (1.0 + self._rng.uniform(-fraction, fraction))


def preview_intervals(config: PollConfig, count: int) -> list[Interval]:
    """Return the first ``count`` intervals a tracking call would use."""
    backoff = Backoff(config)
    return [next(backoff) for _ in range(count)]
