"""Remediation layer: turn errors into actions and apply them to the cluster."""

from kube_medic.remediation.actions import RemediationDispatcher, parse_manifest
from kube_medic.remediation.gate import AutoApplyGate
from kube_medic.remediation.history import AppliedFix, AppliedFixLog
from kube_medic.remediation.mapper import map_error_batch
from kube_medic.remediation.models import (
    AppliedResource,
    ApplyManifest,
    Confidence,
    FixAction,
    FixKind,
    FixResult,
    RestartPod,
    ScaleDeployment,
    Suggestion,
    UpdateConfig,
)

__all__ = [
    "AppliedFix",
    "AppliedFixLog",
    "AppliedResource",
    "ApplyManifest",
    "AutoApplyGate",
    "Confidence",
    "FixAction",
    "FixKind",
    "FixResult",
    "RemediationDispatcher",
    "RestartPod",
    "ScaleDeployment",
    "Suggestion",
    "UpdateConfig",
    "map_error_batch",
    "parse_manifest",
]
