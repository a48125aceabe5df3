"""Append-only audit log of dispatched fixes."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from kube_medic.detection.models import ErrorBatch
from kube_medic.remediation.models import FixAction, FixResult, Suggestion


class AppliedFix(BaseModel):
    """A dispatched action together with the cluster's answer."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: FixAction
    result: FixResult
    origin: ErrorBatch | Suggestion | None = Field(
        default=None,
        description="Error batch or suggestion that produced the action; None for manual actions",
    )


class AppliedFixLog:
    """Thread-safe, append-only list of AppliedFix entries."""

    def __init__(self) -> None:
        self._entries: list[AppliedFix] = []
        self._lock = threading.Lock()

    def append(self, fix: AppliedFix) -> AppliedFix:
        with self._lock:
            self._entries.append(fix)
        return fix

    def record(
        self,
        action: FixAction,
        result: FixResult,
        origin: ErrorBatch | Suggestion | None = None,
    ) -> AppliedFix:
        """Build and append an AppliedFix."""
        return self.append(AppliedFix(action=action, result=result, origin=origin))

    def snapshot(self) -> list[AppliedFix]:
        """Copy of the entries recorded so far."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[AppliedFix]:
        return iter(self.snapshot())
