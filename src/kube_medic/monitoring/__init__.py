"""Monitoring layer: periodic log sweeps across the cluster."""

from kube_medic.monitoring.monitor import LogMonitor, MonitoringSession, SessionState

__all__ = [
    "LogMonitor",
    "MonitoringSession",
    "SessionState",
]
