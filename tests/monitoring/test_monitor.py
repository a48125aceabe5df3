from __future__ import annotations

import threading
import time
from collections.abc import Callable

from kube_medic.detection import ErrorBatch
from kube_medic.monitoring import LogMonitor, MonitoringSession, SessionState


def _collector() -> tuple[list[ErrorBatch], Callable[[ErrorBatch], None]]:
    batches: list[ErrorBatch] = []
    return batches, batches.append


def test_sweep_delivers_batches_for_running_and_failed_pods(fake_cluster, pod) -> None:
    fake_cluster.pods["shop"] = [
        pod("api", "shop", "Running", ["app", "sidecar"]),
        pod("worker", "shop", "Failed"),
        pod("pending", "shop", "Pending"),
    ]
    fake_cluster.logs[("shop", "api", "app")] = "INFO ok\nERROR boom"
    fake_cluster.logs[("shop", "api", "sidecar")] = "INFO ok"
    fake_cluster.logs[("shop", "worker", "app")] = "panic: nil map"
    fake_cluster.logs[("shop", "pending", "app")] = "ERROR never read"
    batches, on_batch = _collector()
    monitor = LogMonitor(fake_cluster, interval_seconds=0.01)

    delivered = monitor.sweep(MonitoringSession(["shop"], on_batch))

    assert delivered == 2
    assert [b.target.source for b in batches] == ["shop/api/app", "shop/worker/app"]
    assert batches[0].raw_logs == "INFO ok\nERROR boom"
    assert batches[0].errors[0].line == 2
    fetched = [c[2] for c in fake_cluster.calls_named("get_pod_logs")]
    assert "pending" not in fetched


def test_sweep_reads_small_tail(fake_cluster, pod) -> None:
    fake_cluster.pods["default"] = [pod("api")]
    monitor = LogMonitor(fake_cluster)

    monitor.sweep(MonitoringSession(["default"], lambda batch: None))

    assert fake_cluster.calls_named("get_pod_logs") == [("get_pod_logs", "default", "api", "app", 10)]


def test_log_fetch_failure_does_not_abort_sweep(fake_cluster, pod) -> None:
    fake_cluster.pods["default"] = [pod("api", containers=["a", "b"])]
    fake_cluster.failing_logs.add(("default", "api", "a"))
    fake_cluster.logs[("default", "api", "b")] = "timeout talking to redis"
    batches, on_batch = _collector()

    LogMonitor(fake_cluster).sweep(MonitoringSession(["default"], on_batch))

    assert [b.target.container_name for b in batches] == ["b"]


def test_unavailable_namespace_is_skipped(fake_cluster, pod) -> None:
    fake_cluster.unavailable_namespaces.add("broken")
    fake_cluster.pods["ok"] = [pod("api", "ok")]
    fake_cluster.logs[("ok", "api", "app")] = "exception in thread main"
    batches, on_batch = _collector()

    delivered = LogMonitor(fake_cluster).sweep(MonitoringSession(["broken", "ok"], on_batch))

    assert delivered == 1
    assert batches[0].target.namespace == "ok"


def test_callback_failure_does_not_abort_sweep(fake_cluster, pod) -> None:
    fake_cluster.pods["default"] = [pod("a"), pod("b")]
    fake_cluster.logs[("default", "a", "app")] = "error one"
    fake_cluster.logs[("default", "b", "app")] = "error two"
    seen: list[str] = []

    def on_batch(batch: ErrorBatch) -> None:
        seen.append(batch.target.pod_name)
        raise RuntimeError("ui went away")

    delivered = LogMonitor(fake_cluster).sweep(MonitoringSession(["default"], on_batch))

    assert seen == ["a", "b"]
    assert delivered == 2


def test_stop_mid_sweep_finishes_current_container_only(fake_cluster, pod) -> None:
    fake_cluster.pods["default"] = [pod("a"), pod("b")]
    fake_cluster.logs[("default", "a", "app")] = "fatal: disk gone"
    fake_cluster.logs[("default", "b", "app")] = "fatal: disk gone"
    monitor = LogMonitor(fake_cluster, interval_seconds=60)
    batches, on_batch = _collector()

    def stop_during_fetch(namespace: str, pod_name: str, container: str | None) -> None:
        monitor.stop()

    fake_cluster.on_fetch = stop_during_fetch
    started = time.monotonic()
    session = monitor.start(["default"], on_batch, background=False)

    assert session is not None
    assert session.state == SessionState.IDLE
    assert session.sweeps_completed == 1
    # The in-flight fetch completed and was delivered; pod "b" was never read
    assert [b.target.pod_name for b in batches] == ["a"]
    assert len(fake_cluster.calls_named("get_pod_logs")) == 1
    assert len(fake_cluster.calls_named("list_pods")) == 1
    # The 60s interval wait ends as soon as the session is stopped
    assert time.monotonic() - started < 5


def test_start_while_running_is_a_no_op(fake_cluster) -> None:
    monitor = LogMonitor(fake_cluster, interval_seconds=60)
    first = monitor.start(["default"], lambda batch: None)
    try:
        assert first is not None
        assert monitor.running
        assert monitor.start(["other"], lambda batch: None) is None
        assert monitor.session is first
    finally:
        monitor.stop(first)
        first.join(timeout=5)
    assert not monitor.running


def test_background_session_makes_no_calls_after_stop(fake_cluster, pod) -> None:
    fake_cluster.pods["default"] = [pod("api")]
    fake_cluster.logs[("default", "api", "app")] = "ERROR connection refused"
    delivered = threading.Event()
    monitor = LogMonitor(fake_cluster, interval_seconds=0.01)

    session = monitor.start(["default"], lambda batch: delivered.set())
    assert session is not None
    assert delivered.wait(timeout=5)

    monitor.stop(session)
    session.join(timeout=5)
    calls_after_stop = len(fake_cluster.calls)
    time.sleep(0.1)

    assert session.state == SessionState.IDLE
    assert len(fake_cluster.calls) == calls_after_stop


def test_session_can_be_restarted_after_stop(fake_cluster) -> None:
    monitor = LogMonitor(fake_cluster, interval_seconds=60)
    first = monitor.start(["default"], lambda batch: None)
    monitor.stop(first)
    first.join(timeout=5)

    second = monitor.start(["default"], lambda batch: None)
    try:
        assert second is not None
        assert second is not first
    finally:
        monitor.stop(second)
        second.join(timeout=5)
