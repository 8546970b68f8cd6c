"""Polling configuration for the operation tracker."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from gceops.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

ENV_PREFIX: str = "GCEOPS_POLL"


@dataclass(frozen=True)
class PollConfig:
    """
    Backoff, deadline and retry settings for await_operation().

    All durations are in seconds. A non-positive deadline means "poll once".

    A wait is only started if it ends before the deadline, so tracking can
    stop with budget left over and without a final poll. With the defaults
    and no jitter the waits run 1, 2, 4, 8, 16 and then 30 per step; after
    271s the next 30s wait would cross 300s, so the run times out there.
    """

    initial_interval: float = 1.0
    max_interval: float = 30.0
    multiplier: float = 2.0
    jitter_fraction: float = 0.2
    deadline: float = 300.0
    max_transient_retries: int = 5
    max_anomalies: int = 3
    fetch_timeout: float = 10.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_interval < 0:
            raise InvalidArgumentError("initial_interval must be >= 0")
        if self.max_interval < self.initial_interval:
            raise InvalidArgumentError("max_interval must be >= initial_interval")
        if self.multiplier < 1.0:
            raise InvalidArgumentError("multiplier must be >= 1.0")
        if not 0.0 <= self.jitter_fraction < 1.0:
            raise InvalidArgumentError("jitter_fraction must be in [0, 1)")
        if self.max_transient_retries < 1:
            raise InvalidArgumentError("max_transient_retries must be >= 1")
        if self.max_anomalies < 1:
            raise InvalidArgumentError("max_anomalies must be >= 1")
        if self.fetch_timeout <= 0:
            raise InvalidArgumentError("fetch_timeout must be > 0")

    @property
    def poll_once(self) -> bool:
        return self.deadline <= 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PollConfig":
        """
        Build a config from a dict, ignoring unknown keys.

        String values (as read from env or JSON files) are coerced to the
        field's type.
        """
        values: dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            try:
                values[f.name] = _coerce(f.name, raw)
            except (TypeError, ValueError) as exc:
                raise InvalidArgumentError(
                    f"Invalid value for {f.name}",
                    details={"field": f.name, "value": raw},
                    cause=exc,
                ) from exc

        unknown = set(data) - {f.name for f in dataclasses.fields(cls)}
        if unknown:
            logger.debug("Ignoring unknown poll config keys: %s", sorted(unknown))
        return cls(**values)

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PollConfig":
        """
        Load overrides from environment variables.

        Variables follow PREFIX_FIELD, e.g. GCEOPS_POLL_DEADLINE=120 or
        GCEOPS_POLL_MAX_TRANSIENT_RETRIES=3.
        """
        env = os.environ if environ is None else environ
        data: dict[str, str] = {}
        for key, value in env.items():
            if not key.startswith(f"{prefix}_"):
                continue
            data[key[len(prefix) + 1:].lower()] = value
        return cls.from_mapping(data)


_INT_FIELDS: frozenset[str] = frozenset({"max_transient_retries", "max_anomalies"})


def _coerce(name: str, raw: Any) -> Any:
    if name == "seed":
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        return int(raw)
    if name in _INT_FIELDS:
        return int(raw)
    return float(raw)
