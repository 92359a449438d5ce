"""Metrics collection for rubric evaluation."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from ago_diagnosis.evaluation.models import ResultSource


@dataclass
class EvaluationMetrics:
    """Process-wide counters for diagnoses and item evaluations.

    Singleton; counters are guarded by a lock because items are evaluated
    on worker threads.
    """

    diagnoses_total: int = 0
    diagnoses_failed: int = 0
    items_total: dict[str, int] = field(default_factory=dict)
    judgment_calls_total: int = 0
    judgment_failures_total: int = 0
    item_timeouts_total: int = 0

    _instance: ClassVar["EvaluationMetrics | None"] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_instance(cls) -> "EvaluationMetrics":
        """Get singleton metrics instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    def record_item(self, source: ResultSource) -> None:
        """Record one graded result by provenance."""
        with self._lock:
            key = source.value
            self.items_total[key] = self.items_total.get(key, 0) + 1

    def record_judgment_call(self) -> None:
        """Record a judgment backend call."""
        with self._lock:
            self.judgment_calls_total += 1

    def record_judgment_failure(self) -> None:
        """Record a failed judgment backend call."""
        with self._lock:
            self.judgment_failures_total += 1

    def record_timeout(self) -> None:
        """Record an item abandoned after its timeout."""
        with self._lock:
            self.item_timeouts_total += 1

    def record_diagnosis(self, *, failed: bool) -> None:
        """Record a finished diagnosis."""
        with self._lock:
            self.diagnoses_total += 1
            if failed:
                self.diagnoses_failed += 1

    def to_dict(self) -> dict[str, object]:
        """Snapshot of the counters."""
        with self._lock:
            return {
                "diagnoses_total": self.diagnoses_total,
                "diagnoses_failed": self.diagnoses_failed,
                "items_total": dict(self.items_total),
                "judgment_calls_total": self.judgment_calls_total,
                "judgment_failures_total": self.judgment_failures_total,
                "item_timeouts_total": self.item_timeouts_total,
            }
