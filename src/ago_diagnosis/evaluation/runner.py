"""Concurrent evaluation of a rubric against one document."""

import contextvars
import math
import threading
import time
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

import structlog

from ago_diagnosis.document.accessor import HtmlDocument
from ago_diagnosis.evaluation.errors import DiagnosisCancelledError
from ago_diagnosis.evaluation.evaluator import ItemEvaluator
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.evaluation.models import (
    EvaluationOutcome,
    FailureKind,
    GradedResult,
)
from ago_diagnosis.rubric.models import RubricItem


logger = structlog.get_logger()

DEFAULT_MAX_WORKERS = 4
DEFAULT_ITEM_TIMEOUT_SECONDS = 30.0


class EvaluationRunner:
    """Evaluates rubric items in parallel with failure isolation.

    Provides:
    - Bounded parallelism over a ThreadPoolExecutor
    - Per-item timeout measured from when the item starts running
    - A batch deadline for items starved behind stalled workers
    - Cooperative cancellation through a ``threading.Event``

    Results are always returned in rubric order, whatever order the
    items complete in.
    """

    def __init__(
        self,
        evaluator: ItemEvaluator,
        max_workers: int = DEFAULT_MAX_WORKERS,
        item_timeout: float = DEFAULT_ITEM_TIMEOUT_SECONDS,
        poll_interval: float = 0.05,
    ) -> None:
        """Initialize the runner.

        Args:
            evaluator: Evaluator shared by all workers.
            max_workers: Maximum concurrent item evaluations.
            item_timeout: Seconds an item may run before it is abandoned.
            poll_interval: Seconds between cancellation/deadline checks.
        """
        if max_workers < 1:
            msg = f"max_workers must be >= 1, got {max_workers}"
            raise ValueError(msg)
        if item_timeout <= 0:
            msg = f"item_timeout must be > 0, got {item_timeout}"
            raise ValueError(msg)

        self._evaluator = evaluator
        self._max_workers = max_workers
        self._item_timeout = item_timeout
        self._poll_interval = poll_interval
        self._metrics = EvaluationMetrics.get_instance()
        self._log = logger.bind(component="runner")

    def run(
        self,
        items: Sequence[RubricItem],
        doc: HtmlDocument,
        cancel_event: threading.Event | None = None,
    ) -> list[GradedResult]:
        """Evaluate every item and collect results in rubric order.

        Args:
            items: Rubric items.
            doc: Parsed document (read-only).
            cancel_event: Set by the caller to abandon the run.

        Returns:
            One GradedResult per item.

        Raises:
            DiagnosisCancelledError: If ``cancel_event`` is set before
                every item has finished.
        """
        if not items:
            return []

        self._check_cancelled(cancel_event)

        results: list[GradedResult | None] = [None] * len(items)
        started_at: dict[int, float] = {}
        started_lock = threading.Lock()

        def evaluate(index: int) -> GradedResult:
            with started_lock:
                started_at[index] = time.monotonic()
            return self._evaluator.evaluate(items[index], doc)

        waves = math.ceil(len(items) / self._max_workers)
        batch_deadline = time.monotonic() + self._item_timeout * (waves + 1)

        executor = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="evaluate"
        )
        try:
            # Each worker runs in a copy of the caller context so request-bound
            # log fields follow the item onto the worker thread
            pending: dict[Future[GradedResult], int] = {
                executor.submit(contextvars.copy_context().run, evaluate, index): index
                for index in range(len(items))
            }

            while pending:
                self._check_cancelled(cancel_event)

                done, _ = wait(
                    pending, timeout=self._poll_interval, return_when=FIRST_COMPLETED
                )
                for future in done:
                    index = pending.pop(future)
                    results[index] = self._collect(future, items[index])

                now = time.monotonic()
                with started_lock:
                    started = dict(started_at)

                for future, index in list(pending.items()):
                    if future.done():
                        del pending[future]
                        results[index] = self._collect(future, items[index])
                        continue

                    began = started.get(index)
                    item_expired = (
                        began is not None and now - began >= self._item_timeout
                    )
                    if item_expired or now >= batch_deadline:
                        future.cancel()
                        del pending[future]
                        results[index] = self._timed_out(items[index], began is None)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return [result for result in results if result is not None]

    def _check_cancelled(self, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._log.info("evaluation_cancelled")
            msg = "Diagnosis cancelled"
            raise DiagnosisCancelledError(msg)

    def _collect(
        self, future: Future[GradedResult], item: RubricItem
    ) -> GradedResult:
        """Take a finished future's result; evaluators should never raise."""
        try:
            return future.result()
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "item_worker_failed",
                item_id=item.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return EvaluationOutcome.failed(
                item, FailureKind.UNEXPECTED, f"{type(exc).__name__}: {exc}"
            ).to_result()

    def _timed_out(self, item: RubricItem, never_started: bool) -> GradedResult:
        self._metrics.record_timeout()
        self._log.warning(
            "item_timed_out",
            item_id=item.id,
            timeout_seconds=self._item_timeout,
            never_started=never_started,
        )
        reason = (
            "not started before the batch deadline"
            if never_started
            else f"timed out after {self._item_timeout:g}s"
        )
        return EvaluationOutcome.failed(item, FailureKind.TIMEOUT, reason).to_result()
