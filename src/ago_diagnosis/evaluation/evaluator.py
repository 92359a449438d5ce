"""Evaluation of a single rubric item against a document."""

import re

import structlog

from ago_diagnosis.document.accessor import HtmlDocument
from ago_diagnosis.document.errors import SelectorError
from ago_diagnosis.evaluation.errors import EvaluationError, RubricRowInvalid
from ago_diagnosis.evaluation.inference import classify_judgment
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.evaluation.models import (
    EvaluationOutcome,
    FailureKind,
    GradedResult,
    Rank,
    ResultSource,
)
from ago_diagnosis.evaluation.policy import (
    MAX_ITEM_SCORE,
    score_to_rank,
    select_recommendation,
)
from ago_diagnosis.llm.errors import LlmApiError
from ago_diagnosis.llm.prompts import build_judgment_prompt
from ago_diagnosis.llm.protocols import JudgmentBackend
from ago_diagnosis.rubric.models import EvaluationMethod, RubricItem


logger = structlog.get_logger()

# Selectors made only of '#', '.' and whitespace name nothing
_DEGENERATE_SELECTOR = re.compile(r"[#.\s]+")

INVALID_SELECTOR_COMMENT = (
    "Selector is not set or invalid; this rubric entry cannot be evaluated."
)
INVALID_SELECTOR_RECOMMENDATION = "Set a valid CSS selector for this rubric entry."
MISSING_ELEMENT_RECOMMENDATION = "Add the missing element checked by this item."
PRESENT_ELEMENT_RECOMMENDATION = "No change needed."
JUDGED_RECOMMENDATION = "Review this aspect of the page using the comment above."
UNSUPPORTED_RECOMMENDATION = (
    "Use evaluation method 0 (machine), 1 (AI) or 2 (hybrid) for this entry."
)


def is_usable_selector(selector: str) -> bool:
    """Whether a selector names something that can be queried.

    Empty, whitespace-only and bare ``#``/``.`` selectors are unusable.
    Syntax errors are only detected when the selector is applied.
    """
    stripped = selector.strip()
    return bool(stripped) and _DEGENERATE_SELECTOR.fullmatch(stripped) is None


def check_row(item: RubricItem) -> None:
    """Reject rubric rows that cannot be evaluated by any method.

    Raises:
        RubricRowInvalid: If the selector is unusable.
    """
    if not is_usable_selector(item.selector):
        raise RubricRowInvalid(item.id, "selector is empty or invalid")


class ItemEvaluator:
    """Grades rubric items against one document.

    Never raises: every failure becomes an ``error`` result for that
    item only. Stateless apart from its collaborators, so one instance
    can serve concurrent evaluations of the same document.
    """

    def __init__(
        self,
        judge: JudgmentBackend | None = None,
        url: str = "",
        metrics: EvaluationMetrics | None = None,
    ) -> None:
        """Initialize the evaluator.

        Args:
            judge: Judgment backend for AI-judged and hybrid items; those
                items fail individually when it is None.
            url: Target URL, available to prompt templates as ``{url}``.
            metrics: Metrics sink (singleton by default).
        """
        self._judge = judge
        self._url = url
        self._metrics = metrics or EvaluationMetrics.get_instance()
        self._log = logger.bind(component="evaluator")

    def evaluate(self, item: RubricItem, doc: HtmlDocument) -> GradedResult:
        """Evaluate one rubric item.

        Args:
            item: Rubric item.
            doc: Parsed document.

        Returns:
            Graded result; ``source=error`` on failure.
        """
        result = self.run(item, doc).to_result()
        self._metrics.record_item(result.source)
        self._log.info(
            "item_evaluated",
            item_id=item.id,
            method=item.method_code,
            score=result.score,
            rank=result.rank.value,
            source=result.source.value,
        )
        return result

    def run(self, item: RubricItem, doc: HtmlDocument) -> EvaluationOutcome:
        """Evaluate one rubric item, keeping failures structured.

        Args:
            item: Rubric item.
            doc: Parsed document.

        Returns:
            EvaluationOutcome carrying a result or a failure reason.
        """
        try:
            check_row(item)
        except RubricRowInvalid as exc:
            self._log.info("rubric_row_unusable", item_id=item.id, reason=exc.reason)
            return EvaluationOutcome.succeeded(item, _invalid_selector_result(item))

        method = item.method
        try:
            if method is None:
                result = _unsupported_method_result(item)
            elif method == EvaluationMethod.MACHINE_COUNT:
                result = self._machine_count(item, doc)
            else:
                result = self._judged(item, doc, method)
        except SelectorError as exc:
            return EvaluationOutcome.failed(item, FailureKind.SELECTOR, str(exc))
        except LlmApiError as exc:
            self._metrics.record_judgment_failure()
            return EvaluationOutcome.failed(
                item, FailureKind.JUDGMENT, f"judgment backend error: {exc}"
            )
        except EvaluationError as exc:
            return EvaluationOutcome.failed(
                item, FailureKind.BACKEND_UNAVAILABLE, str(exc)
            )
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "item_evaluation_unexpected_error",
                item_id=item.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return EvaluationOutcome.failed(
                item, FailureKind.UNEXPECTED, f"{type(exc).__name__}: {exc}"
            )

        return EvaluationOutcome.succeeded(item, result)

    def _machine_count(self, item: RubricItem, doc: HtmlDocument) -> GradedResult:
        """Binary presence check: 5 when anything matches, else 0."""
        count = doc.query(item.selector).length
        score = MAX_ITEM_SCORE if count > 0 else 0
        selector = item.selector.strip()

        if count > 0:
            comment = f"{count} element(s) matching `{selector}` found."
            default = PRESENT_ELEMENT_RECOMMENDATION
        else:
            comment = f"No element matching `{selector}` found."
            default = MISSING_ELEMENT_RECOMMENDATION

        return GradedResult(
            id=item.id,
            label=item.display_label,
            score=score,
            rank=score_to_rank(score),
            comment=comment,
            recommendation=select_recommendation(
                item.recommendation_template, score, default
            ),
            source=ResultSource.MACHINE,
        )

    def _judged(
        self,
        item: RubricItem,
        doc: HtmlDocument,
        method: EvaluationMethod,
    ) -> GradedResult:
        """Ask the judgment backend and infer a score from its reply."""
        if self._judge is None:
            msg = "judgment backend is not configured"
            raise EvaluationError(msg)

        elements = doc.query(item.selector)
        if method == EvaluationMethod.HYBRID:
            content = elements.outer_html()
            source = ResultSource.HYBRID
        else:
            content = elements.text()
            source = ResultSource.AI

        prompt = build_judgment_prompt(item, content, url=self._url)
        self._metrics.record_judgment_call()
        reply = self._judge.complete(prompt).strip()
        if not reply:
            msg = "judgment backend returned an empty reply"
            raise LlmApiError(msg)

        inference = classify_judgment(reply)
        self._log.debug(
            "judgment_scored",
            item_id=item.id,
            score=inference.score,
            basis=inference.basis.value,
        )

        return GradedResult(
            id=item.id,
            label=item.display_label,
            score=inference.score,
            rank=inference.rank,
            comment=reply,
            recommendation=select_recommendation(
                item.recommendation_template, inference.score, JUDGED_RECOMMENDATION
            ),
            source=source,
        )


def _invalid_selector_result(item: RubricItem) -> GradedResult:
    return GradedResult(
        id=item.id,
        label=item.display_label,
        score=0,
        rank=Rank.D,
        comment=INVALID_SELECTOR_COMMENT,
        recommendation=INVALID_SELECTOR_RECOMMENDATION,
        source=ResultSource.MACHINE,
    )


def _unsupported_method_result(item: RubricItem) -> GradedResult:
    return GradedResult(
        id=item.id,
        label=item.display_label,
        score=0,
        rank=Rank.UNEVALUATED,
        comment=f"Evaluation method '{item.method_code}' is not supported.",
        recommendation=UNSUPPORTED_RECOMMENDATION,
        source=ResultSource.UNKNOWN,
    )


def evaluate_item(
    item: RubricItem,
    doc: HtmlDocument,
    judge: JudgmentBackend | None,
    url: str = "",
) -> GradedResult:
    """Evaluate a single item with a throwaway evaluator."""
    return ItemEvaluator(judge=judge, url=url).evaluate(item, doc)
