"""Structured remediation actions and their results."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FixKind(str, Enum):
    """Supported remediation action types."""

    RESTART_POD = "restart_pod"
    SCALE_DEPLOYMENT = "scale_deployment"
    UPDATE_CONFIG = "update_config"
    APPLY_MANIFEST = "apply_manifest"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str = Field(default="", description="Why this action is expected to fix the issue")


class RestartPod(_Action):
    """Delete a pod so its owning controller recreates it."""

    kind: Literal[FixKind.RESTART_POD] = FixKind.RESTART_POD
    namespace: str
    pod_name: str


class ScaleDeployment(_Action):
    """Set the replica count of a deployment."""

    kind: Literal[FixKind.SCALE_DEPLOYMENT] = FixKind.SCALE_DEPLOYMENT
    namespace: str
    deployment_name: str
    replicas: int = Field(..., ge=0)


class UpdateConfig(_Action):
    """Merge key/values into a ConfigMap's data."""

    kind: Literal[FixKind.UPDATE_CONFIG] = FixKind.UPDATE_CONFIG
    namespace: str
    config_map_name: str
    data: dict[str, str] = Field(default_factory=dict)


class ApplyManifest(_Action):
    """Create the resources described by a (multi-document) YAML manifest."""

    kind: Literal[FixKind.APPLY_MANIFEST] = FixKind.APPLY_MANIFEST
    manifest: str
    namespace: str = Field(
        default="default",
        description="Namespace for documents that do not set metadata.namespace",
    )


FixAction = Annotated[
    Union[RestartPod, ScaleDeployment, UpdateConfig, ApplyManifest],
    Field(discriminator="kind"),
]


class AppliedResource(BaseModel):
    """Identity of a resource created from a manifest."""

    kind: str
    name: str
    namespace: str


class FixResult(BaseModel):
    """Outcome of dispatching a FixAction."""

    success: bool
    message: str
    resources: list[AppliedResource] = Field(default_factory=list)
    skipped: list[AppliedResource] = Field(default_factory=list)


class Confidence(str, Enum):
    """How closely a suggestion follows the assistant's advice."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Suggestion(BaseModel):
    """A remediation proposal derived from diagnostic-assistant text."""

    kind: FixKind
    title: str
    description: str = ""
    action: FixAction
    confidence: Confidence

    @model_validator(mode="after")
    def _kind_matches_action(self) -> Suggestion:
        if self.kind != self.action.kind:
            raise ValueError(
                f"suggestion kind {self.kind.value} does not match action kind {self.action.kind.value}"
            )
        return self
