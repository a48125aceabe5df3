"""Engine: monitor → detect → (auto-)remediate, plus operator-driven diagnosis."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from kube_medic.agent.prompts import (
    REPORT_HEADER,
    REPORT_NO_SUGGESTIONS,
    REPORT_SECTION_ANALYSIS,
    REPORT_SECTION_APPLIED,
    REPORT_SECTION_SUGGESTIONS,
    REPORT_SECTION_TARGET,
)
from kube_medic.config import Settings, get_settings
from kube_medic.detection import ErrorBatch, ErrorRecord, Severity, detect
from kube_medic.diagnosis import DiagnosisReport, DiagnosticAssistant, parse_suggestions
from kube_medic.errors import ManifestParseFailure
from kube_medic.monitoring import LogMonitor, MonitoringSession
from kube_medic.monitoring.monitor import ErrorBatchCallback
from kube_medic.observation import ClusterClient, MonitoringTarget, PodLogs, WarningEvent
from kube_medic.remediation import (
    AppliedFix,
    AppliedFixLog,
    AutoApplyGate,
    FixAction,
    FixResult,
    RemediationDispatcher,
    RestartPod,
    Suggestion,
    map_error_batch,
)

logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


class RemediationEngine:
    """Owns the monitor, the dispatcher and the shared error/fix history.

    Manual calls (fetch_logs, apply_action, restart_pod, diagnose) may run
    while a monitoring session is active; the shared lists are lock-protected.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        settings: Settings | None = None,
        assistant: DiagnosticAssistant | None = None,
        monitor: LogMonitor | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.cluster = cluster
        self.dispatcher = RemediationDispatcher(cluster)
        self.applied_fixes = AppliedFixLog()
        self.gate = AutoApplyGate(self.dispatcher, self.applied_fixes, enabled=self.settings.auto_apply)
        self.monitor = monitor or LogMonitor(
            cluster,
            interval_seconds=self.settings.poll_interval_seconds,
            tail_lines=self.settings.monitor_tail_lines,
        )
        self.assistant = assistant or DiagnosticAssistant(self.settings)
        self.auto_fix = self.settings.auto_fix
        self._detected: list[ErrorRecord] = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RemediationEngine:
        """Build an engine talking to the cluster described by the settings."""
        opts = settings or get_settings()
        cluster = ClusterClient(
            kubeconfig=str(opts.kubeconfig) if opts.kubeconfig else None,
            context=opts.context,
        )
        return cls(cluster, settings=opts)

    @property
    def auto_apply(self) -> bool:
        return self.gate.enabled

    @auto_apply.setter
    def auto_apply(self, enabled: bool) -> None:
        self.gate.enabled = enabled

    @property
    def detected_errors(self) -> list[ErrorRecord]:
        with self._lock:
            return list(self._detected)

    def _remember(self, errors: Iterable[ErrorRecord]) -> None:
        with self._lock:
            self._detected.extend(errors)

    # Monitoring

    def start_monitoring(
        self,
        namespaces: Iterable[str] | None = None,
        on_error_batch: ErrorBatchCallback | None = None,
        background: bool = True,
    ) -> MonitoringSession | None:
        """Start sweeping; each batch is recorded, auto-fixed if enabled, then passed on."""

        def _on_batch(batch: ErrorBatch) -> None:
            try:
                self.handle_error_batch(batch)
            finally:
                if on_error_batch is not None:
                    on_error_batch(batch)

        targets = list(namespaces) if namespaces else list(self.settings.namespaces)
        return self.monitor.start(targets, _on_batch, background=background)

    def stop_monitoring(self) -> None:
        self.monitor.stop()

    def handle_error_batch(self, batch: ErrorBatch) -> AppliedFix | None:
        """Record the batch's errors and, when auto-fix is on, remediate it."""
        self._remember(batch.errors)
        if self.auto_fix:
            return self.attempt_auto_fix(batch)
        return None

    def attempt_auto_fix(self, batch: ErrorBatch) -> AppliedFix | None:
        action = map_error_batch(batch)
        if action is None:
            return None
        logger.info("Attempting auto-fix for %s: %s", batch.target.source, action.reason)
        try:
            result = self.dispatcher.apply(action)
        except Exception as e:
            logger.exception("Auto-fix failed for %s", batch.target.source)
            result = FixResult(success=False, message=str(e))
        fix = self.applied_fixes.record(action, result, origin=batch)
        logger.info("Auto-fix outcome: %s", result.message)
        return fix

    # Operator actions

    def fetch_logs(
        self,
        namespace: str,
        pod: str,
        container: str | None = None,
        tail_lines: int | None = None,
    ) -> tuple[PodLogs, list[ErrorRecord]]:
        """Read logs on demand and return them with the errors they contain."""
        log_data = self.cluster.get_pod_logs(
            namespace,
            pod,
            container,
            tail_lines or self.settings.fetch_tail_lines,
        )
        errors = detect(log_data.logs)
        self._remember(errors)
        return log_data, errors

    def diagnose(self, log_text: str, target: MonitoringTarget | None = None) -> DiagnosisReport:
        """Ask the assistant about the logs, parse its answer and run the auto-apply gate."""
        response = self.assistant.analyze(log_text, target)
        suggestions = parse_suggestions(response, target, default_replicas=self.settings.default_replicas)
        applied = self.gate.process(suggestions)
        return DiagnosisReport(target=target, response=response, suggestions=suggestions, applied=applied)

    def diagnose_batch(self, batch: ErrorBatch) -> DiagnosisReport:
        return self.diagnose(batch.error_text, batch.target)

    def apply_action(
        self,
        action: FixAction,
        origin: ErrorBatch | Suggestion | None = None,
    ) -> AppliedFix:
        """Dispatch an action and record the outcome, failed or not."""
        try:
            result = self.dispatcher.apply(action)
        except ManifestParseFailure as e:
            result = FixResult(success=False, message=f"Failed to apply manifest: {e}")
        return self.applied_fixes.record(action, result, origin=origin)

    def apply_suggestion(self, suggestion: Suggestion) -> AppliedFix:
        return self.apply_action(suggestion.action, origin=suggestion)

    def restart_pod(self, namespace: str, pod: str) -> FixResult:
        action = RestartPod(namespace=namespace, pod_name=pod, reason="Restart requested by operator")
        return self.apply_action(action).result

    def cluster_events(self, namespace: str | None = None, limit: int = 50) -> list[WarningEvent]:
        return self.cluster.list_warning_events(namespace)[:limit]


def render_report(report: DiagnosisReport) -> str:
    """Render a diagnosis report as Markdown."""
    parts = [REPORT_HEADER]
    if report.target is not None:
        parts.append(REPORT_SECTION_TARGET.format(source=report.target.source))
    parts.append(REPORT_SECTION_ANALYSIS.format(response=report.response))
    if report.suggestions:
        lines = "\n".join(
            f"- **{s.title}** ({s.kind.value}, confidence: {s.confidence.value}): {s.description}"
            for s in report.suggestions
        )
        parts.append(REPORT_SECTION_SUGGESTIONS.format(suggestions=lines))
    else:
        parts.append(REPORT_NO_SUGGESTIONS)
    if report.applied:
        lines = "\n".join(
            f"- **{fix.action.kind.value}**: {'OK' if fix.result.success else 'Failed'} - {fix.result.message}"
            for fix in report.applied
        )
        parts.append(REPORT_SECTION_APPLIED.format(applied=lines))
    return "\n".join(parts)


def print_report(report: DiagnosisReport, console: Console | None = None) -> None:
    """Print a diagnosis report using Rich."""
    c = console or Console()
    c.print(Panel(Markdown(render_report(report)), title="kube-medic diagnosis", border_style="blue"))


def print_error_batch(batch: ErrorBatch, console: Console | None = None) -> None:
    c = console or Console()
    table = Table(title=f"Errors in {batch.target.source}", title_justify="left")
    table.add_column("Line", justify="right")
    table.add_column("Severity")
    table.add_column("Timestamp")
    table.add_column("Content", overflow="fold")
    for e in batch.errors:
        style = SEVERITY_STYLES[e.severity]
        table.add_row(str(e.line), f"[{style}]{e.severity.value}[/{style}]", e.timestamp or "-", e.content)
    c.print(table)


def print_applied_fixes(fixes: Iterable[AppliedFix], console: Console | None = None) -> None:
    c = console or Console()
    table = Table(title="Applied fixes", title_justify="left")
    table.add_column("Time")
    table.add_column("Action")
    table.add_column("Result")
    table.add_column("Message", overflow="fold")
    for fix in fixes:
        outcome = "[green]OK[/green]" if fix.result.success else "[red]Failed[/red]"
        table.add_row(fix.timestamp.strftime("%H:%M:%S"), fix.action.kind.value, outcome, fix.result.message)
    c.print(table)


def print_events(events: Iterable[WarningEvent], console: Console | None = None) -> None:
    c = console or Console()
    table = Table(title="Cluster warning events", title_justify="left")
    table.add_column("Time")
    table.add_column("Namespace")
    table.add_column("Object")
    table.add_column("Reason")
    table.add_column("Count", justify="right")
    table.add_column("Message", overflow="fold")
    for ev in events:
        when = ev.timestamp.isoformat() if ev.timestamp else "-"
        table.add_row(when, ev.namespace or "-", ev.object, ev.reason, str(ev.count), ev.message)
    c.print(table)
