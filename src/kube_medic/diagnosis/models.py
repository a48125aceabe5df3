"""Structured outputs from the diagnosis layer."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from kube_medic.observation.models import MonitoringTarget
from kube_medic.remediation.history import AppliedFix
from kube_medic.remediation.models import Suggestion


class DiagnosisReport(BaseModel):
    """Assistant answer, the suggestions parsed from it and any auto-applied fixes."""

    target: MonitoringTarget | None = None
    response: str
    suggestions: list[Suggestion] = Field(default_factory=list)
    applied: list[AppliedFix] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
