"""Compute Engine API controller."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

from gceops.errors import (
    ApiError,
    AuthError,
    GceOpsError,
    InvalidArgumentError,
    NetworkError,
    is_transient,
    map_http_error,
)
from gceops.models import OperationHandle, OperationKind, OperationStatus, TrackerResult
from gceops.tracker import OperationTracker, PollConfig

from .operations import http_error_to_info, operation_to_handle, operation_to_status

logger = logging.getLogger(__name__)

T = TypeVar("T")

COMPUTE_API_ROOT: str = "https://www.googleapis.com/compute/v1"


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class ComputeController:
    """
    Thin client over the Compute Engine v1 API.

    Notes:
        - project and zone are fixed per controller; nothing is module-global.
        - Mutating calls return an OperationHandle; use wait() to track it.
        - Only idempotent reads are retried here. Operation polling retries
          are owned by the tracker.
    """

    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/cloud-platform",)

    def __init__(
        self,
        project: str,
        zone: str,
        *,
        credentials: Any = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> None:
        _require_name(project, "project")
        _require_name(zone, "zone")
        self._project = project
        self._zone = zone
        self._retry_policy = _RetryPolicy()

        use_scopes = list(scopes) if scopes is not None else list(self.DEFAULT_SCOPES)
        if credentials is None:
            credentials = _default_credentials(use_scopes)
        self._credentials = credentials

        try:
            from googleapiclient.discovery import build
        except ImportError as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                details={"hint": "Install google-api-python-client"},
                cause=exc,
            ) from exc

        try:
            self._service = build(
                "compute", "v1", credentials=credentials, cache_discovery=False
            )
        except Exception as exc:
            raise AuthError("Failed to build Compute service", cause=exc) from exc

    @classmethod
    def from_service(
        cls,
        service: Any,
        project: str,
        zone: str,
    ) -> "ComputeController":
        """Create controller from a pre-built Compute service (useful for tests)."""
        _require_name(project, "project")
        _require_name(zone, "zone")
        obj = cls.__new__(cls)
        obj._project = project
        obj._zone = zone
        obj._retry_policy = _RetryPolicy()
        obj._credentials = None
        obj._service = service
        return obj

    @property
    def project(self) -> str:
        return self._project

    @property
    def zone(self) -> str:
        return self._zone

    def instance_url(self, name: str) -> str:
        """Full resource URL of an instance in this controller's zone."""
        return f"{COMPUTE_API_ROOT}/projects/{self._project}/zones/{self._zone}/instances/{name}"

    # ----------------------------
    # Operations
    # ----------------------------
    def fetch_operation_status(
        self,
        handle: OperationHandle,
        *,
        timeout: Optional[float] = None,
    ) -> OperationStatus:
        """
        Fetch one status snapshot from the endpoint matching handle.scope.

        Raises:
            NotFoundError: operation unknown or expired.
            AuthError / PermissionError: credentials rejected.
            NetworkError / RateLimitError / ApiError: see is_transient().
        """
        scope = handle.scope
        if scope.kind == "zone":
            req = self._service.zoneOperations().get(
                project=handle.project, zone=scope.location, operation=handle.id
            )
        elif scope.kind == "region":
            req = self._service.regionOperations().get(
                project=handle.project, region=scope.location, operation=handle.id
            )
        else:
            req = self._service.globalOperations().get(
                project=handle.project, operation=handle.id
            )

        data = self._execute(self._bind(req, timeout), retry=False)
        return operation_to_status(data)

    def wait(
        self,
        handle: OperationHandle,
        config: Optional[PollConfig] = None,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> TrackerResult:
        """Block until the operation is terminal (see OperationTracker)."""
        return OperationTracker(self).await_operation(handle, config, cancel=cancel)

    # ----------------------------
    # Instances
    # ----------------------------
    def insert_instance(self, body: dict[str, Any]) -> OperationHandle:
        _require_body(body)
        req = self._service.instances().insert(
            project=self._project, zone=self._zone, body=body
        )
        return self._mutate(req, OperationKind.INSERT)

    def delete_instance(self, name: str) -> OperationHandle:
        _require_name(name, "name")
        req = self._service.instances().delete(
            project=self._project, zone=self._zone, instance=name
        )
        return self._mutate(req, OperationKind.DELETE)

    def get_instance(self, name: str) -> dict[str, Any]:
        _require_name(name, "name")
        req = self._service.instances().get(
            project=self._project, zone=self._zone, instance=name
        )
        return self._execute(req.execute)

    def list_instances(self) -> list[dict[str, Any]]:
        """All instances in this controller's zone (every page)."""
        instances = self._service.instances()
        return self._list_all(
            lambda token: instances.list(
                project=self._project, zone=self._zone, pageToken=token
            )
        )

    def aggregated_list_instances(self) -> dict[str, list[dict[str, Any]]]:
        """
        Instances across all zones of the project, keyed by scope.

        Keys look like ``zones/us-east1-b``; scopes without instances are
        left out.
        """
        instances = self._service.instances()
        return self._aggregated_list_all(
            lambda token: instances.aggregatedList(project=self._project, pageToken=token),
            "instances",
        )

    def set_instance_metadata(self, name: str, metadata: dict[str, Any]) -> OperationHandle:
        """
        Replace instance metadata.

        metadata must carry the current ``fingerprint`` from get_instance().
        """
        _require_name(name, "name")
        _require_body(metadata)
        req = self._service.instances().setMetadata(
            project=self._project, zone=self._zone, instance=name, body=metadata
        )
        return self._mutate(req, OperationKind.SET_METADATA)

    # ----------------------------
    # Instance groups
    # ----------------------------
    def insert_instance_group(self, body: dict[str, Any]) -> OperationHandle:
        _require_body(body)
        req = self._service.instanceGroups().insert(
            project=self._project, zone=self._zone, body=body
        )
        return self._mutate(req, OperationKind.INSERT)

    def delete_instance_group(self, name: str) -> OperationHandle:
        """Delete the group; member instances are not deleted."""
        _require_name(name, "name")
        req = self._service.instanceGroups().delete(
            project=self._project, zone=self._zone, instanceGroup=name
        )
        return self._mutate(req, OperationKind.DELETE)

    def get_instance_group(self, name: str) -> dict[str, Any]:
        _require_name(name, "name")
        req = self._service.instanceGroups().get(
            project=self._project, zone=self._zone, instanceGroup=name
        )
        return self._execute(req.execute)

    def list_instance_groups(self) -> list[dict[str, Any]]:
        """All instance groups in this controller's zone (every page)."""
        groups = self._service.instanceGroups()
        return self._list_all(
            lambda token: groups.list(
                project=self._project, zone=self._zone, pageToken=token
            )
        )

    def aggregated_list_instance_groups(self) -> dict[str, list[dict[str, Any]]]:
        """Instance groups across all zones and regions, keyed by scope."""
        groups = self._service.instanceGroups()
        return self._aggregated_list_all(
            lambda token: groups.aggregatedList(project=self._project, pageToken=token),
            "instanceGroups",
        )

    def list_group_instances(
        self,
        group: str,
        *,
        instance_state: str = "ALL",
    ) -> list[dict[str, Any]]:
        """
        Members of an instance group with their named ports.

        instance_state is "ALL" or "RUNNING".
        """
        _require_name(group, "group")
        if instance_state not in ("ALL", "RUNNING"):
            raise InvalidArgumentError(
                "instance_state must be 'ALL' or 'RUNNING'",
                details={"instance_state": instance_state},
            )
        groups = self._service.instanceGroups()
        body = {"instanceState": instance_state}
        return self._list_all(
            lambda token: groups.listInstances(
                project=self._project,
                zone=self._zone,
                instanceGroup=group,
                body=body,
                pageToken=token,
            )
        )

    def add_instances_to_group(
        self,
        group: str,
        instance_urls: Sequence[str],
    ) -> OperationHandle:
        """All instances must share the group's network/subnetwork."""
        _require_name(group, "group")
        body = {"instances": _instance_references(instance_urls)}
        req = self._service.instanceGroups().addInstances(
            project=self._project, zone=self._zone, instanceGroup=group, body=body
        )
        return self._mutate(req, OperationKind.ADD_MEMBERS)

    def remove_instances_from_group(
        self,
        group: str,
        instance_urls: Sequence[str],
    ) -> OperationHandle:
        """Remove members from a group without deleting the instances."""
        _require_name(group, "group")
        body = {"instances": _instance_references(instance_urls)}
        req = self._service.instanceGroups().removeInstances(
            project=self._project, zone=self._zone, instanceGroup=group, body=body
        )
        return self._mutate(req, OperationKind.REMOVE_MEMBERS)

    def set_named_ports(
        self,
        group: str,
        named_ports: Sequence[dict[str, Any]],
        *,
        fingerprint: Optional[str] = None,
    ) -> OperationHandle:
        _require_name(group, "group")
        body: dict[str, Any] = {"namedPorts": list(named_ports)}
        if fingerprint is not None:
            body["fingerprint"] = fingerprint
        req = self._service.instanceGroups().setNamedPorts(
            project=self._project, zone=self._zone, instanceGroup=group, body=body
        )
        return self._mutate(req, OperationKind.UPDATE)

    # ----------------------------
    # Project
    # ----------------------------
    def set_common_instance_metadata(self, metadata: dict[str, Any]) -> OperationHandle:
        """Project-wide metadata; produces a global operation."""
        _require_body(metadata)
        req = self._service.projects().setCommonInstanceMetadata(
            project=self._project, body=metadata
        )
        return self._mutate(req, OperationKind.SET_METADATA)

    # ----------------------------
    # Internals
    # ----------------------------
    def _mutate(self, req: Any, kind: OperationKind) -> OperationHandle:
        data = self._execute(req.execute, retry=False)
        handle = operation_to_handle(data, project=self._project, kind=kind)
        logger.info(
            "Accepted %s on %s as operation %s (%s)",
            kind.value,
            handle.target_resource,
            handle.id,
            handle.scope,
            extra={"operation": handle.id, "scope": str(handle.scope)},
        )
        return handle

    def _list_all(self, make_request: Callable[[Optional[str]], Any]) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            req = make_request(page_token)
            data = self._execute(req.execute)
            items.extend(data.get("items", []) or [])

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return items

    def _aggregated_list_all(
        self,
        make_request: Callable[[Optional[str]], Any],
        resource_key: str,
    ) -> dict[str, list[dict[str, Any]]]:
        by_scope: dict[str, list[dict[str, Any]]] = {}
        page_token: Optional[str] = None

        while True:
            req = make_request(page_token)
            data = self._execute(req.execute)
            for scope, scoped_list in (data.get("items") or {}).items():
                # Empty scopes only carry a "warning" entry.
                resources = scoped_list.get(resource_key) if isinstance(scoped_list, dict) else None
                if resources:
                    by_scope.setdefault(scope, []).extend(resources)

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return by_scope

    def _bind(self, req: Any, timeout: Optional[float]) -> Callable[[], Any]:
        """
        Return a zero-arg executor for req, honoring a per-call timeout.

        httplib2.Http objects are not thread-safe, so each timed call gets
        its own transport. Injected services (from_service) execute as-is.
        """
        if timeout is None or self._credentials is None:
            return req.execute

        import google_auth_httplib2
        import httplib2

        http = google_auth_httplib2.AuthorizedHttp(
            self._credentials, http=httplib2.Http(timeout=timeout)
        )
        return lambda: req.execute(http=http)

    def _execute(self, func: Callable[[], T], *, retry: bool = True) -> T:
        max_retries = self._retry_policy.max_retries if retry else 0
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if is_transient(mapped) and attempt < max_retries:
                    logger.debug("Retrying after %s (attempt %d)", mapped, attempt + 1)
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _map_exception(self, exc: Exception) -> GceOpsError:
        if isinstance(exc, GceOpsError):
            return exc

        from googleapiclient.errors import HttpError
        import httplib2

        if isinstance(exc, HttpError):
            info = http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError, httplib2.HttpLib2Error)):
            return NetworkError("Network error", cause=exc)

        return ApiError("Compute API error", cause=exc)


def _default_credentials(scopes: Sequence[str]) -> Any:
    try:
        import google.auth
        from google.auth.exceptions import DefaultCredentialsError
    except ImportError as exc:  # pragma: no cover
        raise AuthError(
            "google-auth is not available",
            details={"hint": "Install google-auth"},
            cause=exc,
        ) from exc

    try:
        credentials, _ = google.auth.default(scopes=list(scopes))
    except DefaultCredentialsError as exc:
        raise AuthError(
            "Application Default Credentials are not configured",
            details={"hint": "Run `gcloud auth application-default login`"},
            cause=exc,
        ) from exc
    return credentials


def _instance_references(instance_urls: Sequence[str]) -> list[dict[str, str]]:
    if isinstance(instance_urls, str) or not instance_urls:
        raise InvalidArgumentError("instance_urls must be a non-empty sequence of URLs")
    refs = []
    for url in instance_urls:
        _require_name(url, "instance_url")
        refs.append({"instance": url})
    return refs


def _require_name(value: object, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{field_name} must be a non-empty string")


def _require_body(body: object) -> None:
    if not isinstance(body, dict) or not body:
        raise InvalidArgumentError("request body must be a non-empty dict")
