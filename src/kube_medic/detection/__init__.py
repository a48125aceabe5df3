"""Detection layer: classify log lines into error records."""

from kube_medic.detection.detector import detect, determine_severity, extract_timestamp
from kube_medic.detection.models import ErrorBatch, ErrorRecord, Severity

__all__ = [
    "detect",
    "determine_severity",
    "extract_timestamp",
    "ErrorBatch",
    "ErrorRecord",
    "Severity",
]
