"""Observation layer: read and mutate Kubernetes cluster state."""

from kube_medic.observation.collector import ClusterClient
from kube_medic.observation.models import (
    MonitoringTarget,
    NamespaceSummary,
    PodLogs,
    PodSummary,
    WarningEvent,
)

__all__ = [
    "ClusterClient",
    "MonitoringTarget",
    "NamespaceSummary",
    "PodLogs",
    "PodSummary",
    "WarningEvent",
]
