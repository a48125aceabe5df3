from __future__ import annotations

from kube_medic.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.namespaces == ["default"]
    assert settings.poll_interval_seconds == 30
    assert settings.monitor_tail_lines == 10
    assert settings.auto_fix is False
    assert settings.auto_apply is False
    assert settings.default_replicas == 3


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("KUBE_MEDIC_NAMESPACES", '["shop", "payments"]')
    monkeypatch.setenv("KUBE_MEDIC_AUTO_FIX", "true")
    monkeypatch.setenv("KUBE_MEDIC_ASSISTANT_API_KEY", "secret")

    settings = Settings(_env_file=None)

    assert settings.namespaces == ["shop", "payments"]
    assert settings.auto_fix is True
    assert settings.assistant_api_key == "secret"
