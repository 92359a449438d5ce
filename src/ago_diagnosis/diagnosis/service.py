"""Diagnosis orchestration: rubric, document, evaluation, report."""

import threading
import time
from datetime import UTC, datetime

import structlog

from ago_diagnosis.document.errors import DocumentFetchError
from ago_diagnosis.document.loader import load_document
from ago_diagnosis.evaluation.aggregator import aggregate, format_timestamp
from ago_diagnosis.evaluation.evaluator import ItemEvaluator
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.evaluation.models import GradedResult, Rank, Report, ResultSource
from ago_diagnosis.evaluation.policy import SUMMARY_LOW
from ago_diagnosis.evaluation.runner import (
    DEFAULT_ITEM_TIMEOUT_SECONDS,
    DEFAULT_MAX_WORKERS,
    EvaluationRunner,
)
from ago_diagnosis.fetch.client import HttpFetcher
from ago_diagnosis.fetch.redact import redact_url
from ago_diagnosis.llm.factory import create_judgment_backend
from ago_diagnosis.llm.protocols import JudgmentBackend
from ago_diagnosis.rubric.defaults import DEFAULT_RUBRIC
from ago_diagnosis.rubric.loader import FileRubricSource
from ago_diagnosis.rubric.repository import (
    RubricRepository,
    RubricSource,
    StaticRubricSource,
)
from ago_diagnosis.settings.app import AppSettings


logger = structlog.get_logger()

SYSTEM_RESULT_ID = "system"
SYSTEM_RESULT_LABEL = "Page retrieval"
FETCH_FAILURE_RECOMMENDATION = (
    "Check that the URL is publicly reachable, returns HTML and responds "
    "within the timeout, then run the diagnosis again."
)


def build_fallback_report(
    url: str,
    error: str,
    now: datetime | None = None,
) -> Report:
    """Report returned when the target page could not be retrieved.

    Holds a single ``system`` result so consumers always receive the
    report shape.

    Args:
        url: Requested URL.
        error: Human-readable failure reason.
        now: Report time; current UTC time when omitted.

    Returns:
        Report with ``error`` set.
    """
    result = GradedResult(
        id=SYSTEM_RESULT_ID,
        label=SYSTEM_RESULT_LABEL,
        score=0,
        rank=Rank.D,
        comment=f"The page could not be retrieved: {error}",
        recommendation=FETCH_FAILURE_RECOMMENDATION,
        source=ResultSource.SYSTEM,
    )
    return Report(
        url=url,
        timestamp=format_timestamp(now or datetime.now(UTC)),
        results=[result],
        total_score=0,
        evaluated_items=1,
        percentage=0,
        rank=Rank.D,
        summary=SUMMARY_LOW,
        error=error,
    )


def rubric_source_for(settings: AppSettings) -> RubricSource:
    """File-backed rubric when ``RUBRIC_PATH`` is set, else the built-in one."""
    if settings.rubric_path is not None:
        return FileRubricSource(settings.rubric_path)
    return StaticRubricSource(DEFAULT_RUBRIC)


class DiagnosisService:
    """Runs one diagnosis per call against a shared rubric.

    Holds no per-request state, so a single instance serves concurrent
    requests. The rubric repository and judgment backend are shared by
    reference; each diagnosis builds its own evaluator and runner.
    """

    def __init__(
        self,
        repository: RubricRepository,
        fetcher: HttpFetcher,
        judge: JudgmentBackend | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        item_timeout: float = DEFAULT_ITEM_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Cached rubric.
            fetcher: HTTP fetcher for target pages.
            judge: Judgment backend; AI items degrade to errors without it.
            max_workers: Concurrent item evaluations per diagnosis.
            item_timeout: Seconds an item may run.
        """
        self._repository = repository
        self._fetcher = fetcher
        self._judge = judge
        self._max_workers = max_workers
        self._item_timeout = item_timeout
        self._metrics = EvaluationMetrics.get_instance()
        self._log = logger.bind(component="diagnosis")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "DiagnosisService":
        """Wire a service from application settings."""
        judge = create_judgment_backend(
            gemini_api_key=settings.gemini_api_key,
            openai_api_key=settings.openai_api_key,
            model=settings.llm_model,
            timeout=settings.llm_timeout_seconds,
        )
        return cls(
            repository=RubricRepository(rubric_source_for(settings)),
            fetcher=HttpFetcher(settings.fetch_config()),
            judge=judge,
            max_workers=settings.max_workers,
            item_timeout=settings.item_timeout_seconds,
        )

    @property
    def repository(self) -> RubricRepository:
        """Shared rubric repository."""
        return self._repository

    @property
    def judge_available(self) -> bool:
        """Whether AI-judged and hybrid items can be graded."""
        return self._judge is not None

    def diagnose(
        self,
        url: str,
        cancel_event: threading.Event | None = None,
    ) -> Report:
        """Diagnose one page.

        Args:
            url: Target page URL.
            cancel_event: Set by the caller to abandon the diagnosis.

        Returns:
            The report, or the fallback report when the page cannot be
            retrieved (``Report.error`` set).

        Raises:
            RubricLoadError: If the rubric cannot be loaded.
            DiagnosisCancelledError: If cancelled before completion.
        """
        start = time.perf_counter()
        log = self._log.bind(url=redact_url(url))
        log.info("diagnosis_started")

        items = self._repository.get()

        try:
            doc = load_document(self._fetcher, url)
        except DocumentFetchError as exc:
            log.warning(
                "diagnosis_fetch_failed",
                error_class=exc.error.error_class.value,
                error=exc.error.message,
            )
            self._metrics.record_diagnosis(failed=True)
            return build_fallback_report(url, exc.error.message)

        evaluator = ItemEvaluator(judge=self._judge, url=url)
        runner = EvaluationRunner(
            evaluator,
            max_workers=self._max_workers,
            item_timeout=self._item_timeout,
        )
        results = runner.run(items, doc, cancel_event=cancel_event)
        report = aggregate(results, url)

        self._metrics.record_diagnosis(failed=False)
        log.info(
            "diagnosis_complete",
            items=report.evaluated_items,
            total_score=report.total_score,
            percentage=report.percentage,
            rank=report.rank.value,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return report
