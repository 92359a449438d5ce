"""Data models for graded results and reports."""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ago_diagnosis.rubric.models import RubricItem


class Rank(str, Enum):
    """Letter grade shared by item results and the overall report.

    ``UNEVALUATED`` marks items whose method could not be applied; it is
    outside the S-D scale.
    """

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    UNEVALUATED = "-"


class ResultSource(str, Enum):
    """Provenance of a graded result."""

    MACHINE = "machine"
    AI = "ai"
    HYBRID = "hybrid"
    ERROR = "error"
    UNKNOWN = "unknown"
    SYSTEM = "system"


class GradedResult(BaseModel):
    """Outcome of evaluating one rubric item against one document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1)]
    label: str
    score: Annotated[int, Field(ge=0, le=5)]
    rank: Rank
    comment: str
    recommendation: str
    source: ResultSource


class Report(BaseModel):
    """Final diagnosis for one target URL.

    Serialized with camelCase keys; ``target`` mirrors ``url``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    url: str
    timestamp: str
    results: list[GradedResult]
    total_score: int = Field(alias="totalScore", ge=0)
    evaluated_items: int = Field(alias="evaluatedItems", ge=0)
    percentage: Annotated[int, Field(ge=0, le=100)]
    rank: Rank
    summary: str
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def target(self) -> str:
        """Diagnosed URL, kept under its historical key."""
        return self.url

    @property
    def failed(self) -> bool:
        """Whether this is the fetch-failure fallback report."""
        return self.error is not None

    def to_dict(self) -> dict[str, object]:
        """JSON-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FailureKind(str, Enum):
    """Why an item evaluation failed."""

    SELECTOR = "selector"
    JUDGMENT = "judgment"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class EvaluationFailure:
    """Structured reason an item could not be evaluated.

    Attributes:
        kind: Failure classification.
        reason: Human-readable detail.
    """

    kind: FailureKind
    reason: str


ERROR_RECOMMENDATION = (
    "Review the selector and the page content for this check, "
    "then run the diagnosis again."
)


@dataclass(frozen=True)
class EvaluationOutcome:
    """Either a graded result or a failure, for one rubric item.

    Attributes:
        item: The rubric item evaluated.
        result: Graded result on success.
        failure: Failure reason otherwise.
    """

    item: RubricItem
    result: GradedResult | None = None
    failure: EvaluationFailure | None = None

    @classmethod
    def succeeded(cls, item: RubricItem, result: GradedResult) -> "EvaluationOutcome":
        """Build a successful outcome."""
        return cls(item=item, result=result)

    @classmethod
    def failed(
        cls, item: RubricItem, kind: FailureKind, reason: str
    ) -> "EvaluationOutcome":
        """Build a failed outcome."""
        return cls(item=item, failure=EvaluationFailure(kind=kind, reason=reason))

    @property
    def ok(self) -> bool:
        """Whether the item produced a graded result."""
        return self.result is not None

    def to_result(self) -> GradedResult:
        """Graded result, with failures mapped to a zero-scored error result."""
        if self.result is not None:
            return self.result

        reason = self.failure.reason if self.failure else "unknown failure"
        return GradedResult(
            id=self.item.id,
            label=self.item.display_label,
            score=0,
            rank=Rank.D,
            comment=f"Evaluation failed: {reason}",
            recommendation=ERROR_RECOMMENDATION,
            source=ResultSource.ERROR,
        )
