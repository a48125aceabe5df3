"""Configuration and environment for kube-medic."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_prefix="KUBE_MEDIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Kubernetes
    kubeconfig: Path | None = Field(
        default=None,
        description="Path to kubeconfig; uses KUBECONFIG env or default location if unset",
    )
    context: str | None = Field(default=None, description="Kubernetes context to use")
    namespaces: list[str] = Field(
        default_factory=lambda: ["default"],
        description="Namespaces swept by the monitoring loop",
    )

    # Monitoring
    poll_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Pause between two monitoring sweeps",
    )
    monitor_tail_lines: int = Field(
        default=10,
        ge=1,
        description="Log lines read per container during a sweep",
    )
    fetch_tail_lines: int = Field(
        default=200,
        ge=1,
        description="Log lines read when an operator fetches logs by hand",
    )

    # Remediation policy
    auto_fix: bool = Field(
        default=False,
        description="Dispatch heuristic fixes for errors found by the monitoring loop",
    )
    auto_apply: bool = Field(
        default=False,
        description="Apply high-confidence assistant suggestions without confirmation",
    )
    default_replicas: int = Field(
        default=3,
        ge=0,
        description="Replica count proposed by scale suggestions",
    )

    # Diagnostic assistant (OpenAI-compatible endpoint)
    assistant_api_key: str | None = Field(default=None, description="API key for the diagnostic assistant")
    assistant_base_url: str | None = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible chat completions API",
    )
    model: str = Field(
        default="llama3-8b-8192",
        description="Model name used for log diagnosis",
    )
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="LLM temperature")


def get_settings() -> Settings:
    """Return validated settings instance."""
    return Settings()
