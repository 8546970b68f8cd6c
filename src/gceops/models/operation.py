"""Operation handle and status models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class OperationKind(str, Enum):
    """Kinds of asynchronous mutations tracked by gceops."""

    INSERT = "INSERT"
    DELETE = "DELETE"
    UPDATE = "UPDATE"
    ADD_MEMBERS = "ADD_MEMBERS"
    REMOVE_MEMBERS = "REMOVE_MEMBERS"
    SET_METADATA = "SET_METADATA"


MEMBERSHIP_KINDS: frozenset[OperationKind] = frozenset(
    {OperationKind.ADD_MEMBERS, OperationKind.REMOVE_MEMBERS}
)


class OperationState(str, Enum):
    """Operation states reported by Compute Engine, in lifecycle order."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    DONE = "DONE"

    @property
    def rank(self) -> int:
        return _STATE_RANK[self]

    def is_regression_from(self, previous: "OperationState") -> bool:
        return self.rank < previous.rank


_STATE_RANK: dict[OperationState, int] = {
    OperationState.PENDING: 0,
    OperationState.RUNNING: 1,
    OperationState.DONE: 2,
}


@dataclass(slots=True, frozen=True)
class OperationScope:
    """
    Where an operation lives, which decides the status endpoint.

    kind is one of "zone", "region" or "global"; location is the zone or
    region name and must be None for global operations.
    """

    kind: str
    location: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in ("zone", "region", "global"):
            raise ValueError(f"Unsupported scope kind: {self.kind!r}")
        if self.kind == "global":
            if self.location is not None:
                raise ValueError("global scope takes no location")
            return
        if not isinstance(self.location, str) or not self.location.strip():
            raise ValueError(f"{self.kind} scope requires a location")

    @classmethod
    def zone(cls, name: str) -> "OperationScope":
        return cls("zone", name)

    @classmethod
    def region(cls, name: str) -> "OperationScope":
        return cls("region", name)

    @classmethod
    def global_(cls) -> "OperationScope":
        return cls("global")

    @classmethod
    def from_operation(cls, data: dict[str, Any]) -> "OperationScope":
        """
        Derive scope from an Operation resource.

        Zonal operations carry a ``zone`` URL, regional ones a ``region`` URL,
        global ones neither.
        """
        zone = data.get("zone")
        if isinstance(zone, str) and zone:
            return cls.zone(_last_segment(zone))
        region = data.get("region")
        if isinstance(region, str) and region:
            return cls.region(_last_segment(region))
        return cls.global_()

    def __str__(self) -> str:
        if self.kind == "global":
            return "global"
        return f"{self.kind}s/{self.location}"


@dataclass(slots=True, frozen=True)
class OperationHandle:
    """
    Identifies an accepted asynchronous mutation.

    Notes:
        - id is the operation name as returned by the API (e.g. "operation-1700...").
        - Membership changes act on instance groups, which are zonal or
          regional, so ADD_MEMBERS/REMOVE_MEMBERS cannot be global.
    """

    id: str
    target_resource: str
    kind: OperationKind
    scope: OperationScope
    project: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("OperationHandle.id must be a non-empty string")
        if not isinstance(self.project, str) or not self.project.strip():
            raise ValueError("OperationHandle.project must be a non-empty string")
        if not isinstance(self.kind, OperationKind):
            raise TypeError("OperationHandle.kind must be an OperationKind")
        if not isinstance(self.scope, OperationScope):
            raise TypeError("OperationHandle.scope must be an OperationScope")
        if self.kind in MEMBERSHIP_KINDS and self.scope.kind == "global":
            raise ValueError(f"{self.kind.value} operations cannot be global-scoped")


@dataclass(slots=True, frozen=True)
class OperationStatus:
    """A snapshot of an operation as fetched from the provider."""

    state: OperationState
    error_details: Optional[dict[str, Any]] = None
    progress: Optional[int] = None
    status_message: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def is_done(self) -> bool:
        return self.state is OperationState.DONE

    @property
    def failed(self) -> bool:
        return self.is_done and bool(self.error_details)


def _last_segment(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]
