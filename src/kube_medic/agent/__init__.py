"""Agent: wiring of monitor → detect → remediate and operator diagnosis."""

from kube_medic.agent.orchestrator import (
    RemediationEngine,
    print_applied_fixes,
    print_error_batch,
    print_events,
    print_report,
    render_report,
)

__all__ = [
    "RemediationEngine",
    "print_applied_fixes",
    "print_error_batch",
    "print_events",
    "print_report",
    "render_report",
]
