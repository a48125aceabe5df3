"""Thin wrapper over the Kubernetes API used by monitoring and remediation."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from kube_medic.errors import (
    ClusterOperationError,
    CollaboratorUnavailable,
    LogFetchFailure,
    UnsupportedResourceKind,
)
from kube_medic.observation.models import (
    NamespaceSummary,
    PodLogs,
    PodSummary,
    WarningEvent,
)

logger = logging.getLogger(__name__)

# Default number of log lines returned by get_pod_logs
DEFAULT_LOG_TAIL_LINES = 100

# Only logs from the last hour are considered
LOG_SINCE_SECONDS = 3600

# Scale and ConfigMap updates are JSON merge patches
MERGE_PATCH = "application/merge-patch+json"

SUPPORTED_RESOURCE_KINDS = ("Deployment", "Service", "ConfigMap")

# Failures raised by the client for API errors and for transport problems
_CLIENT_ERRORS = (ApiException, HTTPError)


def _load_kube_config(kubeconfig_path: str | None, context: str | None) -> client.Configuration:
    """Load in-cluster or kubeconfig-based configuration."""
    try:
        config.load_incluster_config()
        return client.Configuration.get_default_copy()
    except config.ConfigException:
        pass
    kwargs: dict[str, Any] = {}
    if kubeconfig_path:
        kwargs["config_file"] = str(kubeconfig_path)
    if context:
        kwargs["context"] = context
    config.load_kube_config(**kwargs)
    return client.Configuration.get_default_copy()


def _describe(exc: Exception) -> str:
    """Short human-readable reason for a client failure."""
    if isinstance(exc, ApiException):
        return f"{exc.status} {exc.reason}"
    return str(exc)


def _utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _build_pod_summary(pod: Any) -> PodSummary:
    """Build PodSummary from V1Pod."""
    statuses = getattr(pod.status, "container_statuses", None) or []
    return PodSummary(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace or "default",
        status=getattr(pod.status, "phase", None) or "Unknown",
        containers=[c.name for c in (getattr(pod.spec, "containers", None) or [])],
        restart_count=sum(cs.restart_count or 0 for cs in statuses),
        created=_utc(pod.metadata.creation_timestamp),
        node=getattr(pod.spec, "node_name", None),
    )


def _build_warning_event(ev: Any) -> WarningEvent:
    """Build WarningEvent from CoreV1Event."""
    obj = ev.involved_object
    return WarningEvent(
        namespace=getattr(ev.metadata, "namespace", None),
        reason=ev.reason or "",
        message=ev.message or "",
        type=ev.type or "Warning",
        object=f"{getattr(obj, 'kind', '')}/{getattr(obj, 'name', '')}",
        timestamp=_utc(ev.first_timestamp or getattr(ev, "event_time", None)),
        count=ev.count or 1,
    )


class ClusterClient:
    """Lists, reads and mutates cluster resources on behalf of the engine.

    Every failure from the Kubernetes client is translated into the
    ``kube_medic.errors`` taxonomy so callers never see ``ApiException``.
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        core_api: Any | None = None,
        apps_api: Any | None = None,
    ) -> None:
        self.kubeconfig = kubeconfig
        self.context = context
        self._core_api = core_api
        self._apps_api = apps_api
        self._connect_lock = threading.Lock()

    def _connect(self) -> None:
        # Configuration is loaded on first use so log diagnosis works without a cluster
        with self._connect_lock:
            if self._core_api is not None and self._apps_api is not None:
                return
            try:
                cfg = _load_kube_config(self.kubeconfig, self.context)
            except config.ConfigException as e:
                raise CollaboratorUnavailable(f"No Kubernetes configuration available: {e}") from e
            api_client = client.ApiClient(cfg)
            self._core_api = self._core_api or client.CoreV1Api(api_client)
            self._apps_api = self._apps_api or client.AppsV1Api(api_client)

    @property
    def _core(self) -> Any:
        if self._core_api is None:
            self._connect()
        return self._core_api

    @property
    def _apps(self) -> Any:
        if self._apps_api is None:
            self._connect()
        return self._apps_api

    def list_namespaces(self) -> list[NamespaceSummary]:
        try:
            items = self._core.list_namespace().items
        except _CLIENT_ERRORS as e:
            raise CollaboratorUnavailable(f"Failed to fetch namespaces: {_describe(e)}") from e
        return [
            NamespaceSummary(
                name=ns.metadata.name,
                status=getattr(ns.status, "phase", None),
                created=_utc(ns.metadata.creation_timestamp),
            )
            for ns in items
        ]

    def list_pods(self, namespace: str = "default") -> list[PodSummary]:
        try:
            items = self._core.list_namespaced_pod(namespace=namespace).items
        except _CLIENT_ERRORS as e:
            raise CollaboratorUnavailable(f"Failed to fetch pods in {namespace}: {_describe(e)}") from e
        return [_build_pod_summary(pod) for pod in items]

    def get_pod_logs(
        self,
        namespace: str,
        pod: str,
        container: str | None = None,
        tail_lines: int = DEFAULT_LOG_TAIL_LINES,
    ) -> PodLogs:
        """Read the last ``tail_lines`` lines (with timestamps) of a pod's logs."""
        source = f"{namespace}/{pod}/{container}" if container else f"{namespace}/{pod}"
        kwargs: dict[str, Any] = {
            "name": pod,
            "namespace": namespace,
            "tail_lines": tail_lines,
            "since_seconds": LOG_SINCE_SECONDS,
            "timestamps": True,
        }
        if container:
            kwargs["container"] = container
        try:
            logs = self._core.read_namespaced_pod_log(**kwargs)
        except _CLIENT_ERRORS as e:
            raise LogFetchFailure(f"Failed to fetch pod logs for {source}: {_describe(e)}") from e
        return PodLogs(logs=logs or "", timestamp=datetime.now(timezone.utc), source=source)

    def delete_pod(self, namespace: str, pod: str) -> None:
        try:
            self._core.delete_namespaced_pod(name=pod, namespace=namespace)
        except _CLIENT_ERRORS as e:
            raise ClusterOperationError(f"Failed to restart pod {pod}: {_describe(e)}") from e

    def patch_deployment_replicas(self, namespace: str, deployment: str, replicas: int) -> None:
        body = {"spec": {"replicas": replicas}}
        try:
            self._apps.patch_namespaced_deployment_scale(
                name=deployment, namespace=namespace, body=body, _content_type=MERGE_PATCH
            )
        except _CLIENT_ERRORS as e:
            raise ClusterOperationError(f"Failed to scale deployment {deployment}: {_describe(e)}") from e

    def patch_config_map(self, namespace: str, name: str, data: dict[str, str]) -> None:
        body = {"data": dict(data)}
        try:
            self._core.patch_namespaced_config_map(
                name=name, namespace=namespace, body=body, _content_type=MERGE_PATCH
            )
        except _CLIENT_ERRORS as e:
            raise ClusterOperationError(f"Failed to update ConfigMap {name}: {_describe(e)}") from e

    def create_resource(self, kind: str, namespace: str, doc: dict[str, Any]) -> None:
        """Create a Deployment, Service or ConfigMap from a manifest document."""
        if kind == "Deployment":
            create = self._apps.create_namespaced_deployment
        elif kind == "Service":
            create = self._core.create_namespaced_service
        elif kind == "ConfigMap":
            create = self._core.create_namespaced_config_map
        else:
            raise UnsupportedResourceKind(kind)
        name = (doc.get("metadata") or {}).get("name", "")
        try:
            create(namespace=namespace, body=doc)
        except _CLIENT_ERRORS as e:
            raise ClusterOperationError(f"Failed to create {kind} {namespace}/{name}: {_describe(e)}") from e

    def list_warning_events(self, namespace: str | None = None) -> list[WarningEvent]:
        """Warning/Error events, most recent first."""
        try:
            if namespace:
                items = self._core.list_namespaced_event(namespace=namespace).items
            else:
                items = self._core.list_event_for_all_namespaces().items
        except _CLIENT_ERRORS as e:
            raise CollaboratorUnavailable(f"Failed to fetch cluster events: {_describe(e)}") from e
        events = [_build_warning_event(ev) for ev in items if ev.type in ("Warning", "Error")]
        return sorted(
            events,
            key=lambda e: e.timestamp or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )
