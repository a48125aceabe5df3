"""Keyword rules that turn the assistant's free text into remediation suggestions."""

from __future__ import annotations

import re

from kube_medic.observation.models import MonitoringTarget
from kube_medic.remediation.models import (
    ApplyManifest,
    Confidence,
    RestartPod,
    ScaleDeployment,
    Suggestion,
    UpdateConfig,
)

DEFAULT_NAMESPACE = "default"
UNKNOWN_POD = "unknown-pod"

# keyword -> (config key, value) added to update_config suggestions
CONFIG_KEYWORDS: tuple[tuple[str, str, str], ...] = (
    ("memory", "MEMORY_LIMIT", "512Mi"),
    ("cpu", "CPU_LIMIT", "500m"),
    ("timeout", "TIMEOUT", "30"),
)

_YAML_BLOCK_RE = re.compile(r"```yaml[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_yaml_blocks(text: str) -> list[str]:
    """Contents of every ```yaml fenced block, exactly as written."""
    return _YAML_BLOCK_RE.findall(text)


def parse_suggestions(
    text: str,
    target: MonitoringTarget | None = None,
    default_replicas: int = 3,
) -> list[Suggestion]:
    """
    Derive suggestions from diagnostic text.

    Each rule is evaluated on its own, so one answer can yield a restart, a
    scale, a config update and any number of manifests at once.
    """
    lowered = text.lower()
    namespace = target.namespace if target else DEFAULT_NAMESPACE
    pod = target.pod_name if target else UNKNOWN_POD
    suggestions: list[Suggestion] = []

    if "restart" in lowered or "delete pod" in lowered:
        action = RestartPod(namespace=namespace, pod_name=pod, reason="Assistant recommends restarting the pod")
        suggestions.append(
            Suggestion(
                kind=action.kind,
                title=f"Restart pod {pod}",
                description="Delete the pod so its controller recreates it.",
                action=action,
                confidence=Confidence.HIGH,
            )
        )

    if "scale" in lowered or "replicas" in lowered:
        deployment = f"{pod}-deployment"
        action = ScaleDeployment(
            namespace=namespace,
            deployment_name=deployment,
            replicas=default_replicas,
            reason="Assistant recommends changing the replica count",
        )
        suggestions.append(
            Suggestion(
                kind=action.kind,
                title=f"Scale {deployment} to {default_replicas} replicas",
                description="Adjust the number of running replicas.",
                action=action,
                confidence=Confidence.MEDIUM,
            )
        )

    if "config" in lowered or "environment" in lowered:
        config_map = f"{pod}-config"
        data = {key: value for keyword, key, value in CONFIG_KEYWORDS if keyword in lowered}
        action = UpdateConfig(
            namespace=namespace,
            config_map_name=config_map,
            data=data,
            reason="Assistant recommends a configuration change",
        )
        suggestions.append(
            Suggestion(
                kind=action.kind,
                title=f"Update ConfigMap {config_map}",
                description=f"Set {', '.join(data) or 'no keys'} in {config_map}.",
                action=action,
                confidence=Confidence.LOW,
            )
        )

    for manifest in extract_yaml_blocks(text):
        action = ApplyManifest(
            manifest=manifest,
            namespace=namespace,
            reason="Manifest proposed by the assistant",
        )
        suggestions.append(
            Suggestion(
                kind=action.kind,
                title="Apply YAML manifest",
                description="Create the resources from the manifest in the assistant's answer.",
                action=action,
                confidence=Confidence.MEDIUM,
            )
        )

    return suggestions
