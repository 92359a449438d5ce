"""Rubric evaluation: item grading, score policy and report aggregation."""

from ago_diagnosis.evaluation.aggregator import aggregate, format_timestamp
from ago_diagnosis.evaluation.errors import (
    DiagnosisCancelledError,
    EvaluationError,
    RubricRowInvalid,
)
from ago_diagnosis.evaluation.evaluator import (
    ItemEvaluator,
    check_row,
    evaluate_item,
    is_usable_selector,
)
from ago_diagnosis.evaluation.inference import (
    InferenceBasis,
    JudgmentInference,
    classify_judgment,
    infer_score,
    parse_numeric_score,
)
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.evaluation.models import (
    EvaluationFailure,
    EvaluationOutcome,
    FailureKind,
    GradedResult,
    Rank,
    Report,
    ResultSource,
)
from ago_diagnosis.evaluation.policy import (
    MAX_ITEM_SCORE,
    compute_percentage,
    percentage_to_rank,
    score_to_rank,
    select_recommendation,
    summary_for,
)
from ago_diagnosis.evaluation.runner import EvaluationRunner


__all__ = [
    # Evaluation
    "ItemEvaluator",
    "EvaluationRunner",
    "evaluate_item",
    "check_row",
    "is_usable_selector",
    # Aggregation
    "aggregate",
    "format_timestamp",
    # Inference
    "InferenceBasis",
    "JudgmentInference",
    "classify_judgment",
    "infer_score",
    "parse_numeric_score",
    # Policy
    "MAX_ITEM_SCORE",
    "compute_percentage",
    "percentage_to_rank",
    "score_to_rank",
    "select_recommendation",
    "summary_for",
    # Models
    "EvaluationFailure",
    "EvaluationOutcome",
    "FailureKind",
    "GradedResult",
    "Rank",
    "Report",
    "ResultSource",
    # Errors
    "DiagnosisCancelledError",
    "EvaluationError",
    "RubricRowInvalid",
    # Metrics
    "EvaluationMetrics",
]
