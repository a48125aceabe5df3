"""Exception taxonomy shared by the collaborators and the remediation layer."""

from __future__ import annotations


class KubeMedicError(Exception):
    """Base class for all kube-medic errors."""


class CollaboratorError(KubeMedicError):
    """A call to the cluster control plane failed."""


class CollaboratorUnavailable(CollaboratorError):
    """Listing namespaces, pods or events failed (connection or API error)."""


class LogFetchFailure(CollaboratorError):
    """Reading the logs of a single container failed."""


class ClusterOperationError(CollaboratorError):
    """A mutating call (delete, patch, create) was rejected by the cluster."""


class UnsupportedResourceKind(CollaboratorError):
    """A manifest document has a kind the engine does not know how to create."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unsupported resource kind: {kind}")
        self.kind = kind


class UnsupportedFixType(KubeMedicError):
    """The dispatcher was handed something that is not a FixAction variant."""


class ManifestParseFailure(KubeMedicError):
    """Manifest text is not valid YAML or a document lacks kind/metadata."""


class DiagnosticAssistantError(KubeMedicError):
    """The diagnostic assistant request failed."""
