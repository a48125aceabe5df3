from __future__ import annotations

from pathlib import Path

import pytest
from kubernetes import config

from kube_medic import main as cli
from kube_medic.agent import RemediationEngine
from kube_medic.diagnosis import DiagnosticAssistant, analyzer
from kube_medic.observation import collector


@pytest.fixture
def engine(monkeypatch, fake_cluster, settings, chat_client) -> RemediationEngine:
    assistant = DiagnosticAssistant(settings, client=chat_client("Restart the pod."))
    instance = RemediationEngine(fake_cluster, settings=settings, assistant=assistant)
    monkeypatch.setattr(cli.RemediationEngine, "from_settings", classmethod(lambda cls, s=None: instance))
    return instance


def test_parse_monitor_args() -> None:
    args = cli._parse_args(["monitor", "-n", "shop", "-n", "payments", "--auto-fix", "--interval", "5"])

    assert args.command == "monitor"
    assert args.namespaces == ["shop", "payments"]
    assert args.auto_fix is True
    assert args.interval == 5.0


def test_restart_command(engine, fake_cluster) -> None:
    assert cli.main(["restart", "shop", "api"]) == 0
    assert fake_cluster.calls_named("delete_pod") == [("delete_pod", "shop", "api")]


def test_restart_command_failure(engine, fake_cluster) -> None:
    fake_cluster.failing_operations.add("delete_pod")

    assert cli.main(["restart", "shop", "api"]) == 1


def test_diagnose_command_auto_apply(engine, fake_cluster, tmp_path: Path) -> None:
    log = tmp_path / "app.log"
    log.write_text("ERROR connection refused\n", encoding="utf-8")

    code = cli.main(["diagnose", str(log), "--namespace", "shop", "--pod", "api", "--auto-apply"])

    assert code == 0
    assert fake_cluster.calls_named("delete_pod") == [("delete_pod", "shop", "api")]
    assert len(engine.applied_fixes) == 1


def test_diagnose_namespace_without_pod(engine, fake_cluster, tmp_path: Path) -> None:
    log = tmp_path / "app.log"
    log.write_text("ERROR boom\n", encoding="utf-8")

    assert cli.main(["diagnose", str(log), "--namespace", "shop", "--auto-apply"]) == 0
    assert fake_cluster.calls_named("delete_pod") == [("delete_pod", "shop", "unknown-pod")]


def test_diagnose_without_cluster_configuration(monkeypatch, chat_client, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("KUBECONFIG", str(tmp_path / "missing"))
    monkeypatch.setenv("KUBE_MEDIC_ASSISTANT_API_KEY", "test-key")
    assistant_client = chat_client("Restart the pod.")
    monkeypatch.setattr(analyzer, "_openai_client", lambda settings: assistant_client)
    loads = []

    def _no_cluster(kubeconfig, context):
        loads.append(kubeconfig)
        raise config.ConfigException("Invalid kube-config file. No configuration found.")

    monkeypatch.setattr(collector, "_load_kube_config", _no_cluster)
    log = tmp_path / "app.log"
    log.write_text("ERROR connection refused\n", encoding="utf-8")

    assert cli.main(["diagnose", str(log)]) == 0
    assert len(assistant_client.requests) == 1
    assert loads == []
