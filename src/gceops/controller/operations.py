"""Conversions between Compute Engine Operation resources and gceops models."""

from __future__ import annotations

import json
from typing import Any, Optional

from gceops.errors import ApiError, HttpErrorInfo
from gceops.models import (
    OperationHandle,
    OperationKind,
    OperationScope,
    OperationState,
    OperationStatus,
)
from gceops.util.time import parse_rfc3339_or_none

# Compute Engine operationType -> OperationKind.
OPERATION_TYPE_KINDS: dict[str, OperationKind] = {
    "insert": OperationKind.INSERT,
    "delete": OperationKind.DELETE,
    "update": OperationKind.UPDATE,
    "patch": OperationKind.UPDATE,
    "addInstances": OperationKind.ADD_MEMBERS,
    "removeInstances": OperationKind.REMOVE_MEMBERS,
    "setMetadata": OperationKind.SET_METADATA,
    "setCommonInstanceMetadata": OperationKind.SET_METADATA,
    "setNamedPorts": OperationKind.UPDATE,
}


def operation_to_handle(
    data: dict[str, Any],
    *,
    project: str,
    kind: Optional[OperationKind] = None,
) -> OperationHandle:
    """
    Build a handle from the Operation returned by a mutating call.

    kind defaults to the mapping of the resource's operationType; callers
    that know better (e.g. setNamedPorts) pass it explicitly.
    """
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ApiError("Operation resource has no name", details={"operation": data})

    if kind is None:
        op_type = data.get("operationType")
        kind = OPERATION_TYPE_KINDS.get(op_type) if isinstance(op_type, str) else None
        if kind is None:
            raise ApiError(
                "Unsupported operationType",
                details={"operationType": op_type, "operation": name},
            )

    target = data.get("targetLink") or data.get("targetId") or ""
    return OperationHandle(
        id=name,
        target_resource=str(target),
        kind=kind,
        scope=OperationScope.from_operation(data),
        project=project,
    )


def operation_to_status(data: dict[str, Any]) -> OperationStatus:
    """
    Convert an Operation resource into an OperationStatus snapshot.

    Raises:
        ApiError: if the status field is missing or unknown.
    """
    raw_state = data.get("status")
    try:
        state = OperationState(raw_state)
    except ValueError as exc:
        raise ApiError(
            "Unknown operation status",
            details={"status": raw_state, "operation": data.get("name")},
            cause=exc,
        ) from exc

    error = data.get("error")
    error_details = error if isinstance(error, dict) and error else None
    if state is not OperationState.DONE:
        error_details = None

    progress = data.get("progress")
    return OperationStatus(
        state=state,
        error_details=error_details,
        progress=progress if isinstance(progress, int) else None,
        status_message=data.get("statusMessage") or data.get("httpErrorMessage"),
        start_time=parse_rfc3339_or_none(data.get("startTime")),
        end_time=parse_rfc3339_or_none(data.get("endTime")),
    )


def http_error_to_info(exc: Any) -> HttpErrorInfo:
    """Extract status, reason and message from a googleapiclient HttpError."""
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if isinstance(status_code, str) and status_code.isdigit():
        status_code = int(status_code)
    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
