"""CLI entrypoint for kube-medic."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from kube_medic import __version__
from kube_medic.agent import (
    RemediationEngine,
    print_applied_fixes,
    print_error_batch,
    print_events,
    print_report,
)
from kube_medic.config import Settings, get_settings
from kube_medic.detection import ErrorBatch
from kube_medic.diagnosis.suggestions import DEFAULT_NAMESPACE, UNKNOWN_POD
from kube_medic.observation import MonitoringTarget


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="kube-medic: watch Kubernetes logs, detect errors and remediate them.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--kubeconfig",
        type=Path,
        default=None,
        help="Path to kubeconfig (default: KUBECONFIG env or ~/.kube/config)",
    )
    parser.add_argument("--context", default=None, help="Kubernetes context to use")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    monitor = sub.add_parser("monitor", help="Sweep pod logs for errors until interrupted")
    monitor.add_argument(
        "--namespace",
        "-n",
        action="append",
        dest="namespaces",
        default=None,
        help="Namespace to monitor (repeatable; default: from settings)",
    )
    monitor.add_argument("--auto-fix", action="store_true", help="Apply heuristic fixes for detected errors")
    monitor.add_argument("--interval", type=float, default=None, help="Seconds between sweeps")

    diagnose = sub.add_parser("diagnose", help="Ask the diagnostic assistant about a log file")
    diagnose.add_argument("logfile", nargs="?", default="-", help="Log file to analyze, '-' for stdin")
    diagnose.add_argument("--namespace", "-n", default=None, help="Namespace the logs came from")
    diagnose.add_argument("--pod", default=None, help="Pod the logs came from")
    diagnose.add_argument("--container", default=None, help="Container the logs came from")
    diagnose.add_argument(
        "--auto-apply",
        action="store_true",
        help="Apply high-confidence suggestions without confirmation",
    )

    events = sub.add_parser("events", help="Show recent Warning events")
    events.add_argument("--namespace", "-n", default=None, help="Namespace (default: all)")
    events.add_argument("--limit", type=int, default=50, help="Maximum number of events to show")

    restart = sub.add_parser("restart", help="Restart a pod by deleting it")
    restart.add_argument("namespace")
    restart.add_argument("pod")

    return parser.parse_args(argv)


def _run_monitor(engine: RemediationEngine, args: argparse.Namespace, console: Console) -> int:
    if args.auto_fix:
        engine.auto_fix = True
    if args.interval:
        engine.monitor.interval_seconds = args.interval

    def _print_batch(batch: ErrorBatch) -> None:
        print_error_batch(batch, console)

    console.print("[bold]Monitoring started[/bold] (Ctrl+C to stop)")
    try:
        engine.start_monitoring(args.namespaces, _print_batch, background=False)
    except KeyboardInterrupt:
        engine.stop_monitoring()
    fixes = engine.applied_fixes.snapshot()
    if fixes:
        print_applied_fixes(fixes, console)
    return 0


def _run_diagnose(engine: RemediationEngine, args: argparse.Namespace, console: Console) -> int:
    if args.auto_apply:
        engine.auto_apply = True
    if args.logfile == "-":
        text = sys.stdin.read()
    else:
        text = Path(args.logfile).read_text(encoding="utf-8", errors="replace")
    target = None
    if args.namespace or args.pod:
        target = MonitoringTarget(
            namespace=args.namespace or DEFAULT_NAMESPACE,
            pod_name=args.pod or UNKNOWN_POD,
            container_name=args.container,
        )
    report = engine.diagnose(text, target)
    print_report(report, console)
    return 0 if all(fix.result.success for fix in report.applied) else 1


def _run_events(engine: RemediationEngine, args: argparse.Namespace, console: Console) -> int:
    print_events(engine.cluster_events(args.namespace, limit=args.limit), console)
    return 0


def _run_restart(engine: RemediationEngine, args: argparse.Namespace, console: Console) -> int:
    result = engine.restart_pod(args.namespace, args.pod)
    style = "green" if result.success else "red"
    console.print(f"[{style}]{result.message}[/{style}]")
    return 0 if result.success else 1


COMMANDS = {
    "monitor": _run_monitor,
    "diagnose": _run_diagnose,
    "events": _run_events,
    "restart": _run_restart,
}


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    if args.kubeconfig:
        settings.kubeconfig = args.kubeconfig
    if args.context:
        settings.context = args.context
    return settings


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for kube-medic CLI."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    logger = logging.getLogger("kube_medic")
    if not args.verbose:
        logger.setLevel(logging.WARNING)

    console = Console()
    try:
        engine = RemediationEngine.from_settings(_settings_from_args(args))
        return COMMANDS[args.command](engine, args, console)
    except Exception as e:
        logging.exception("Command failed")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
