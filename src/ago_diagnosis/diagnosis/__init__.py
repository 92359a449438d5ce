"""Diagnosis orchestration."""

from ago_diagnosis.diagnosis.service import (
    DiagnosisService,
    build_fallback_report,
    rubric_source_for,
)


__all__ = ["DiagnosisService", "build_fallback_report", "rubric_source_for"]
