"""Records produced by the error detector."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from kube_medic.observation.models import MonitoringTarget


class Severity(str, Enum):
    """Severity assigned to a matching log line."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ErrorRecord(BaseModel):
    """A log line that matched one of the error patterns."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=1, description="1-based line number within the log window")
    content: str
    timestamp: str | None = None
    severity: Severity


class ErrorBatch(BaseModel):
    """Errors found in one container's log window during one sweep."""

    target: MonitoringTarget
    errors: list[ErrorRecord] = Field(default_factory=list)
    raw_logs: str = ""
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def error_text(self) -> str:
        """Matching lines joined for display or for the diagnostic assistant."""
        return "\n".join(e.content for e in self.errors)
