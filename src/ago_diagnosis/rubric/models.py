"""Data models for rubric items."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class EvaluationMethod(str, Enum):
    """How a rubric item is resolved.

    - MACHINE_COUNT: count elements matching the selector
    - AI_JUDGED: ask the judgment backend, infer a score from its reply
    - HYBRID: like AI_JUDGED, with the matched markup embedded as evidence
    """

    MACHINE_COUNT = "0"
    AI_JUDGED = "1"
    HYBRID = "2"

    @classmethod
    def from_code(cls, code: str) -> "EvaluationMethod | None":
        """Resolve a rubric method code.

        Accepts the numeric codes and the aliases ``machine``, ``ai`` and
        ``hybrid`` (case-insensitive).

        Args:
            code: Raw method code from the rubric.

        Returns:
            The matching method, or None when the code is not recognised.
        """
        normalized = code.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return _METHOD_ALIASES.get(normalized)


_METHOD_ALIASES: dict[str, EvaluationMethod] = {
    "machine": EvaluationMethod.MACHINE_COUNT,
    "machine_count": EvaluationMethod.MACHINE_COUNT,
    "ai": EvaluationMethod.AI_JUDGED,
    "ai_judged": EvaluationMethod.AI_JUDGED,
    "hybrid": EvaluationMethod.HYBRID,
}


class RubricItem(BaseModel):
    """One evaluation rule of a rubric.

    Immutable once loaded. ``selector`` is deliberately unvalidated here:
    an unusable selector degrades that single item at evaluation time
    instead of rejecting the whole rubric.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Stable item identifier")]
    label: str = Field(default="", description="Human-readable name")
    selector: str = Field(default="", description="CSS selector for the check")
    method_code: str = Field(default="0", description="Raw evaluation method code")
    prompt_template: str = Field(default="", description="Judgment prompt text")
    recommendation_template: str = Field(
        default="", description="Recommendation, optionally '|'-separated per score"
    )

    @property
    def method(self) -> EvaluationMethod | None:
        """Parsed evaluation method, None for unrecognised codes."""
        return EvaluationMethod.from_code(self.method_code)

    @property
    def display_label(self) -> str:
        """Label, falling back to the id when the label is blank."""
        return self.label or self.id
