"""Execute remediation actions against the Kubernetes cluster."""

from __future__ import annotations

import logging
from typing import Any

import yaml

from kube_medic.errors import (
    CollaboratorError,
    ManifestParseFailure,
    UnsupportedFixType,
    UnsupportedResourceKind,
)
from kube_medic.observation.collector import ClusterClient
from kube_medic.remediation.models import (
    AppliedResource,
    ApplyManifest,
    FixAction,
    FixResult,
    RestartPod,
    ScaleDeployment,
    UpdateConfig,
)

logger = logging.getLogger(__name__)


def parse_manifest(manifest: str) -> list[dict[str, Any]]:
    """Split a YAML manifest into resource documents.

    Empty documents (for example a trailing ``---``) are dropped. Every other
    document must be a mapping with ``kind`` and ``metadata.name``.
    """
    try:
        docs = [d for d in yaml.safe_load_all(manifest) if d is not None]
    except yaml.YAMLError as e:
        raise ManifestParseFailure(f"Invalid manifest YAML: {e}") from e
    if not docs:
        raise ManifestParseFailure("Manifest contains no resource documents")
    for index, doc in enumerate(docs, start=1):
        if not isinstance(doc, dict):
            raise ManifestParseFailure(f"Document {index} is not a mapping")
        if not doc.get("kind"):
            raise ManifestParseFailure(f"Document {index} has no kind")
        metadata = doc.get("metadata")
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise ManifestParseFailure(f"Document {index} ({doc['kind']}) has no metadata.name")
    return docs


class RemediationDispatcher:
    """Maps a FixAction to the matching ClusterClient call."""

    def __init__(self, cluster: ClusterClient) -> None:
        self.cluster = cluster

    def apply(self, action: FixAction) -> FixResult:
        """
        Apply a single action and return its FixResult.

        Cluster failures come back as ``FixResult(success=False)``. Malformed
        manifests raise ManifestParseFailure; anything that is not a FixAction
        raises UnsupportedFixType.
        """
        logger.info("Applying automated fix: %r", action)
        try:
            if isinstance(action, RestartPod):
                self.cluster.delete_pod(action.namespace, action.pod_name)
                return FixResult(success=True, message=f"Pod {action.pod_name} deleted and will be recreated")

            if isinstance(action, ScaleDeployment):
                self.cluster.patch_deployment_replicas(action.namespace, action.deployment_name, action.replicas)
                return FixResult(
                    success=True,
                    message=f"Deployment {action.deployment_name} scaled to {action.replicas} replicas",
                )

            if isinstance(action, UpdateConfig):
                self.cluster.patch_config_map(action.namespace, action.config_map_name, action.data)
                return FixResult(success=True, message=f"ConfigMap {action.config_map_name} updated")

            if isinstance(action, ApplyManifest):
                return self._apply_manifest(action)
        except CollaboratorError as e:
            logger.error("Fix failed: %s", e)
            return FixResult(success=False, message=str(e))

        raise UnsupportedFixType(f"Unknown fix action type: {type(action).__name__}")

    def _apply_manifest(self, action: ApplyManifest) -> FixResult:
        applied: list[AppliedResource] = []
        skipped: list[AppliedResource] = []
        for doc in parse_manifest(action.manifest):
            resource = AppliedResource(
                kind=str(doc["kind"]),
                name=str(doc["metadata"]["name"]),
                namespace=str(doc["metadata"].get("namespace") or action.namespace),
            )
            try:
                self.cluster.create_resource(resource.kind, resource.namespace, doc)
            except UnsupportedResourceKind:
                logger.warning("Skipping unsupported resource kind: %s", resource.kind)
                skipped.append(resource)
                continue
            except CollaboratorError as e:
                created = f"; {len(applied)} created before the failure" if applied else ""
                return FixResult(success=False, message=f"{e}{created}", resources=applied, skipped=skipped)
            applied.append(resource)

        message = f"Applied {len(applied)} resources"
        if skipped:
            message += f" ({len(skipped)} skipped: unsupported kind)"
        return FixResult(success=True, message=message, resources=applied, skipped=skipped)
