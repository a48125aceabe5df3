"""Background polling loop that sweeps container logs for errors."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from enum import Enum

from kube_medic.detection import ErrorBatch, detect
from kube_medic.errors import CollaboratorUnavailable, LogFetchFailure
from kube_medic.observation.collector import ClusterClient
from kube_medic.observation.models import MonitoringTarget

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0
DEFAULT_TAIL_LINES = 10

# Pods in other phases have no logs worth sweeping
MONITORED_PHASES = ("Running", "Failed")

ErrorBatchCallback = Callable[[ErrorBatch], None]


class SessionState(str, Enum):
    """Lifecycle of a monitoring session."""

    IDLE = "idle"
    RUNNING = "running"


class MonitoringSession:
    """Handle for one monitoring run; owns its cancellation signal."""

    def __init__(self, namespaces: Iterable[str], on_error_batch: ErrorBatchCallback) -> None:
        self.namespaces = list(namespaces)
        self.on_error_batch = on_error_batch
        self.sweeps_completed = 0
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self._stopped.is_set() else SessionState.RUNNING

    @property
    def active(self) -> bool:
        return not self._stopped.is_set()

    def stop(self) -> None:
        """Ask the loop to exit; an in-flight container fetch still completes."""
        self._stopped.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; returns True as soon as the session is stopped."""
        return self._stopped.wait(timeout)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the background thread, if any, to exit."""
        if self._thread is not None:
            self._thread.join(timeout)


class LogMonitor:
    """Sweeps namespaces -> pods -> containers and reports error batches.

    One session at a time; each sweep is sequential and a new sweep starts
    only after the previous one and the polling interval have elapsed.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        tail_lines: int = DEFAULT_TAIL_LINES,
    ) -> None:
        self.cluster = cluster
        self.interval_seconds = interval_seconds
        self.tail_lines = tail_lines
        self._session: MonitoringSession | None = None
        self._lock = threading.Lock()

    @property
    def session(self) -> MonitoringSession | None:
        return self._session

    @property
    def running(self) -> bool:
        return self._session is not None and self._session.active

    def start(
        self,
        namespaces: Iterable[str],
        on_error_batch: ErrorBatchCallback,
        background: bool = True,
    ) -> MonitoringSession | None:
        """
        Start a monitoring session and return its handle.

        Returns None (and does nothing) if a session is already running. With
        ``background=False`` the loop runs in the calling thread until stopped.
        """
        with self._lock:
            if self.running:
                logger.warning("Log monitoring already running; start request ignored")
                return None
            session = MonitoringSession(namespaces, on_error_batch)
            self._session = session

        logger.info("Starting log monitoring for namespaces: %s", ", ".join(session.namespaces))
        if background:
            session._thread = threading.Thread(
                target=self._run,
                args=(session,),
                name="kube-medic-monitor",
                daemon=True,
            )
            session._thread.start()
        else:
            self._run(session)
        return session

    def stop(self, session: MonitoringSession | None = None) -> None:
        """Stop the given session (default: the current one)."""
        session = session or self._session
        if session is None or not session.active:
            return
        session.stop()
        logger.info("Log monitoring stopped")

    def _run(self, session: MonitoringSession) -> None:
        while session.active:
            try:
                self.sweep(session)
            except Exception:
                logger.exception("Error during log monitoring sweep")
            session.sweeps_completed += 1
            if session.wait(self.interval_seconds):
                break

    def sweep(self, session: MonitoringSession) -> int:
        """Run one pass over all namespaces; returns the number of batches delivered."""
        delivered = 0
        for namespace in session.namespaces:
            if not session.active:
                break
            try:
                pods = self.cluster.list_pods(namespace)
            except CollaboratorUnavailable as e:
                logger.error("Skipping namespace %s this sweep: %s", namespace, e)
                continue

            for pod in pods:
                if pod.status not in MONITORED_PHASES:
                    continue
                for container in pod.containers:
                    if not session.active:
                        return delivered
                    target = MonitoringTarget(namespace=namespace, pod_name=pod.name, container_name=container)
                    batch = self.check_container(target)
                    if batch is None:
                        continue
                    logger.info("Errors detected in %s: %d", target.source, len(batch.errors))
                    try:
                        session.on_error_batch(batch)
                    except Exception:
                        logger.exception("Error callback failed for %s", target.source)
                    delivered += 1
        return delivered

    def check_container(self, target: MonitoringTarget) -> ErrorBatch | None:
        """Read one container's log tail; None when it has no errors or cannot be read."""
        try:
            log_data = self.cluster.get_pod_logs(
                target.namespace,
                target.pod_name,
                target.container_name,
                self.tail_lines,
            )
        except LogFetchFailure as e:
            logger.warning("Failed to get logs for %s: %s", target.source, e)
            return None
        errors = detect(log_data.logs)
        if not errors:
            return None
        return ErrorBatch(
            target=target,
            errors=errors,
            raw_logs=log_data.logs,
            observed_at=datetime.now(timezone.utc),
        )
