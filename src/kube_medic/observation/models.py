"""Structured models for the cluster state consumed by the monitoring engine."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NamespaceSummary(BaseModel):
    """Namespace name and lifecycle phase."""

    name: str
    status: str | None = None  # Active | Terminating
    created: datetime | None = None


class PodSummary(BaseModel):
    """Summary of a pod as needed for log monitoring."""

    name: str
    namespace: str
    status: str  # pod phase: Pending | Running | Succeeded | Failed | Unknown
    containers: list[str] = Field(default_factory=list)
    restart_count: int = 0
    created: datetime | None = None
    node: str | None = None


class PodLogs(BaseModel):
    """A window of container logs as returned by the cluster."""

    logs: str
    timestamp: datetime
    source: str = Field(..., description="namespace/pod[/container] the logs were read from")


class WarningEvent(BaseModel):
    """Kubernetes Warning (or Error) event summary."""

    namespace: str | None = None
    reason: str = ""
    message: str = ""
    type: str = "Warning"
    object: str = ""  # kind/name
    timestamp: datetime | None = None
    count: int = 1


class MonitoringTarget(BaseModel):
    """Identifies where a log window was read."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    pod_name: str
    container_name: str | None = None

    @property
    def source(self) -> str:
        base = f"{self.namespace}/{self.pod_name}"
        return f"{base}/{self.container_name}" if self.container_name else base
