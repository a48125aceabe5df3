"""LLM-based diagnosis of container logs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from openai import OpenAI, OpenAIError

from kube_medic.config import Settings
from kube_medic.errors import DiagnosticAssistantError
from kube_medic.observation.models import MonitoringTarget

logger = logging.getLogger(__name__)

NO_RESPONSE = "No meaningful response."

DIAGNOSIS_SYSTEM_PROMPT = """You are an expert DevOps engineer and Kubernetes SRE.
You help fix deployment, build and runtime errors from container logs.
Be concise and give accurate, actionable solutions.
When a fix involves restarting, scaling or changing configuration, say so explicitly.
Put any Kubernetes manifest in a fenced ```yaml block.
"""

DIAGNOSIS_USER_PROMPT = """Analyze these Kubernetes logs and provide a fix.

Context:
- Namespace: {namespace}
- Pod: {pod}
- Container: {container}
- Timestamp: {timestamp}

Logs:
{logs}

Please provide:
1. Root cause analysis
2. Immediate fix steps
3. Exact kubectl commands to run
4. YAML manifests if needed
5. Prevention recommendations
"""


def build_user_prompt(log_text: str, target: MonitoringTarget | None = None, now: datetime | None = None) -> str:
    """Embed the target context and raw logs into the user prompt."""
    return DIAGNOSIS_USER_PROMPT.format(
        namespace=target.namespace if target else "unknown",
        pod=target.pod_name if target else "unknown",
        container=(target.container_name if target else None) or "default",
        timestamp=(now or datetime.now(timezone.utc)).isoformat(),
        logs=log_text,
    )


def _openai_client(settings: Settings) -> OpenAI:
    """Build OpenAI client from settings (any OpenAI-compatible endpoint)."""
    kwargs: dict[str, Any] = {"api_key": settings.assistant_api_key or "not-needed"}
    if settings.assistant_base_url:
        kwargs["base_url"] = settings.assistant_base_url
    return OpenAI(**kwargs)


class DiagnosticAssistant:
    """Sends log text to a chat-completions model and returns its free-text answer."""

    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _openai_client(self.settings)
        return self._client

    def analyze(self, log_text: str, target: MonitoringTarget | None = None) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.settings.model,
                temperature=self.settings.temperature,
                messages=[
                    {"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(log_text, target)},
                ],
            )
        except OpenAIError as e:
            raise DiagnosticAssistantError(f"Diagnostic assistant request failed: {e}") from e
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.warning("Diagnostic assistant returned an empty answer")
            return NO_RESPONSE
        return content
