"""Auto-apply policy for assistant suggestions."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kube_medic.remediation.actions import RemediationDispatcher
from kube_medic.remediation.history import AppliedFix, AppliedFixLog
from kube_medic.remediation.models import Confidence, Suggestion

logger = logging.getLogger(__name__)


class AutoApplyGate:
    """Applies high-confidence suggestions without operator confirmation.

    Suggestions are not deduplicated: the same suggestion produced by two
    diagnoses is applied twice.
    """

    def __init__(
        self,
        dispatcher: RemediationDispatcher,
        fix_log: AppliedFixLog,
        enabled: bool = False,
    ) -> None:
        self.dispatcher = dispatcher
        self.fix_log = fix_log
        self.enabled = enabled

    def process(self, suggestions: Iterable[Suggestion]) -> list[AppliedFix]:
        if not self.enabled:
            return []
        applied: list[AppliedFix] = []
        for suggestion in suggestions:
            if suggestion.confidence != Confidence.HIGH:
                continue
            logger.info("Auto-applying suggestion: %s", suggestion.title)
            result = self.dispatcher.apply(suggestion.action)
            applied.append(self.fix_log.record(suggestion.action, result, origin=suggestion))
        return applied
