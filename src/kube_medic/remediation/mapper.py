"""Heuristic mapping from detected errors to a remediation action."""

from __future__ import annotations

import logging

from kube_medic.detection.models import ErrorBatch
from kube_medic.remediation.models import FixAction, RestartPod

logger = logging.getLogger(__name__)

CRASH_REASON = "Detected CrashLoopBackOff or exit errors"
CONNECTION_REASON = "Detected connection issues"


def map_error_batch(batch: ErrorBatch) -> FixAction | None:
    """Return at most one action for a batch; the first matching rule wins."""
    texts = [e.content.lower() for e in batch.errors]

    def seen(*needles: str) -> bool:
        return any(n in text for text in texts for n in needles)

    target = batch.target
    if seen("crashloopbackoff", "exit code"):
        return RestartPod(namespace=target.namespace, pod_name=target.pod_name, reason=CRASH_REASON)
    if seen("out of memory", "oom"):
        # Scaling needs a deployment name, which pod-level errors do not carry
        logger.info("OOM detected in %s; no automatic fix without a deployment name", target.source)
        return None
    if seen("connection refused", "timeout"):
        return RestartPod(namespace=target.namespace, pod_name=target.pod_name, reason=CONNECTION_REASON)
    return None
