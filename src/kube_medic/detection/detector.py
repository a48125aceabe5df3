"""Pattern-based error detection over raw log text."""

from __future__ import annotations

import re

from kube_medic.detection.models import ErrorRecord, Severity

ERROR_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"error",
        r"failed",
        r"exception",
        r"panic",
        r"fatal",
        r"timeout",
        r"connection refused",
        r"out of memory",
        r"no space left",
        r"permission denied",
        r"crashloopbackoff",
        r"imagepullbackoff",
        r"evicted",
    )
)

_TIMESTAMP_RE = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})")

# Checked top to bottom; first hit wins
_SEVERITY_RULES: tuple[tuple[re.Pattern[str], Severity], ...] = (
    (re.compile(r"fatal|panic|crash", re.IGNORECASE), Severity.CRITICAL),
    (re.compile(r"error|exception|failed", re.IGNORECASE), Severity.ERROR),
    (re.compile(r"warning|warn", re.IGNORECASE), Severity.WARNING),
)


def extract_timestamp(line: str) -> str | None:
    """Return the first ``YYYY-MM-DDTHH:MM:SS`` substring of a line, if any."""
    match = _TIMESTAMP_RE.search(line)
    return match.group(1) if match else None


def determine_severity(line: str) -> Severity:
    """Classify a line; depends only on its text."""
    for pattern, severity in _SEVERITY_RULES:
        if pattern.search(line):
            return severity
    return Severity.INFO


def detect(text: str) -> list[ErrorRecord]:
    """
    Scan log text and return one ErrorRecord per (line, matching pattern).

    A line matching several patterns is reported once per pattern, so
    ``"fatal error"`` yields two records with the same line and content.
    """
    errors: list[ErrorRecord] = []
    for index, line in enumerate(text.split("\n"), start=1):
        for pattern in ERROR_PATTERNS:
            if pattern.search(line):
                errors.append(
                    ErrorRecord(
                        line=index,
                        content=line.strip(),
                        timestamp=extract_timestamp(line),
                        severity=determine_severity(line),
                    )
                )
    return errors
