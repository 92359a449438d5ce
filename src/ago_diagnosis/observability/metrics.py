"""Combined snapshot of the in-process metric singletons."""

from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.fetch.metrics import FetchMetrics


def metrics_snapshot() -> dict[str, dict[str, object]]:
    """Current fetch and evaluation counters, keyed by layer."""
    return {
        "fetch": FetchMetrics.get_instance().to_dict(),
        "evaluation": EvaluationMetrics.get_instance().to_dict(),
    }


def reset_metrics() -> None:
    """Reset every metric singleton (primarily for testing)."""
    FetchMetrics.reset()
    EvaluationMetrics.reset()
