"""Diagnosis layer: ask the assistant about logs and parse its advice."""

from kube_medic.diagnosis.analyzer import DiagnosticAssistant, build_user_prompt
from kube_medic.diagnosis.models import DiagnosisReport
from kube_medic.diagnosis.suggestions import extract_yaml_blocks, parse_suggestions

__all__ = [
    "DiagnosisReport",
    "DiagnosticAssistant",
    "build_user_prompt",
    "extract_yaml_blocks",
    "parse_suggestions",
]
