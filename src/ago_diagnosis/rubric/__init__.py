"""Rubric items, loading and caching."""

from ago_diagnosis.rubric.defaults import DEFAULT_RUBRIC
from ago_diagnosis.rubric.errors import RubricLoadError
from ago_diagnosis.rubric.loader import (
    FileRubricSource,
    parse_csv_rubric,
    parse_yaml_rubric,
)
from ago_diagnosis.rubric.models import EvaluationMethod, RubricItem
from ago_diagnosis.rubric.repository import (
    RubricRepository,
    RubricSource,
    StaticRubricSource,
)


__all__ = [
    "DEFAULT_RUBRIC",
    "EvaluationMethod",
    "FileRubricSource",
    "RubricItem",
    "RubricLoadError",
    "RubricRepository",
    "RubricSource",
    "StaticRubricSource",
    "parse_csv_rubric",
    "parse_yaml_rubric",
]
