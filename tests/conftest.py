from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest

from kube_medic.config import Settings
from kube_medic.errors import (
    ClusterOperationError,
    CollaboratorUnavailable,
    LogFetchFailure,
    UnsupportedResourceKind,
)
from kube_medic.observation.collector import SUPPORTED_RESOURCE_KINDS
from kube_medic.observation.models import PodLogs, PodSummary, WarningEvent


class FakeCluster:
    """In-memory stand-in for ClusterClient that records every call."""

    def __init__(
        self,
        pods: dict[str, list[PodSummary]] | None = None,
        logs: dict[tuple[str, str, str | None], str] | None = None,
    ) -> None:
        self.pods = pods or {}
        self.logs = logs or {}
        self.events: list[WarningEvent] = []
        self.calls: list[tuple[Any, ...]] = []
        self.unavailable_namespaces: set[str] = set()
        self.failing_logs: set[tuple[str, str, str | None]] = set()
        self.failing_operations: set[str] = set()
        self.on_fetch: Callable[[str, str, str | None], None] | None = None

    def list_pods(self, namespace: str = "default") -> list[PodSummary]:
        self.calls.append(("list_pods", namespace))
        if namespace in self.unavailable_namespaces:
            raise CollaboratorUnavailable(f"Failed to fetch pods in {namespace}: connection refused")
        return list(self.pods.get(namespace, []))

    def get_pod_logs(
        self,
        namespace: str,
        pod: str,
        container: str | None = None,
        tail_lines: int = 100,
    ) -> PodLogs:
        self.calls.append(("get_pod_logs", namespace, pod, container, tail_lines))
        if self.on_fetch is not None:
            self.on_fetch(namespace, pod, container)
        key = (namespace, pod, container)
        if key in self.failing_logs:
            raise LogFetchFailure(f"Failed to fetch pod logs for {namespace}/{pod}/{container}")
        return PodLogs(
            logs=self.logs.get(key, ""),
            timestamp=datetime.now(timezone.utc),
            source=f"{namespace}/{pod}/{container}",
        )

    def _operation(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failing_operations:
            raise ClusterOperationError(f"{name} rejected")

    def delete_pod(self, namespace: str, pod: str) -> None:
        self._operation("delete_pod", namespace, pod)

    def patch_deployment_replicas(self, namespace: str, deployment: str, replicas: int) -> None:
        self._operation("patch_deployment_replicas", namespace, deployment, replicas)

    def patch_config_map(self, namespace: str, name: str, data: dict[str, str]) -> None:
        self._operation("patch_config_map", namespace, name, dict(data))

    def create_resource(self, kind: str, namespace: str, doc: dict[str, Any]) -> None:
        if kind not in SUPPORTED_RESOURCE_KINDS:
            raise UnsupportedResourceKind(kind)
        self._operation("create_resource", kind, namespace, doc["metadata"]["name"])

    def list_warning_events(self, namespace: str | None = None) -> list[WarningEvent]:
        self.calls.append(("list_warning_events", namespace))
        return list(self.events)

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]


class FakeChatClient:
    """Mimics ``OpenAI().chat.completions.create`` returning a fixed answer."""

    def __init__(self, answer: str | None) -> None:
        self.answer = answer
        self.requests: list[dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_pod(name: str, namespace: str = "default", status: str = "Running", containers: list[str] | None = None) -> PodSummary:
    return PodSummary(name=name, namespace=namespace, status=status, containers=containers or ["app"])


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, assistant_api_key="test-key", poll_interval_seconds=0.01)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def chat_client() -> Callable[[str | None], FakeChatClient]:
    def _make(answer: str | None) -> FakeChatClient:
        return FakeChatClient(answer)

    return _make


@pytest.fixture
def pod() -> Callable[..., PodSummary]:
    return make_pod
