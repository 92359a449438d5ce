"""Unit tests for concurrent rubric evaluation."""

import threading
import time
from collections.abc import Generator
from unittest.mock import patch

import pytest

from ago_diagnosis.evaluation.errors import DiagnosisCancelledError
from ago_diagnosis.evaluation.evaluator import ItemEvaluator
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.evaluation.models import ResultSource
from ago_diagnosis.evaluation.runner import EvaluationRunner
from ago_diagnosis.rubric.models import RubricItem
from tests.helpers.pages import FakeJudge, load_html


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singleton before and after each test."""
    EvaluationMetrics.reset()
    yield
    EvaluationMetrics.reset()


class BlockingJudge:
    """Judge that blocks until released, for timeout and cancel tests."""

    def __init__(self) -> None:
        self.release = threading.Event()
        self.started = threading.Event()

    def complete(self, prompt: str) -> str:
        self.started.set()
        self.release.wait(timeout=5)
        return "5"


def _machine(item_id: str, selector: str) -> RubricItem:
    return RubricItem(id=item_id, selector=selector, method_code="0")


def _ai(item_id: str, prompt: str = "Judge") -> RubricItem:
    return RubricItem(id=item_id, selector="main", method_code="1", prompt_template=prompt)


class TestEvaluationRunner:
    """Tests for EvaluationRunner.run."""

    def test_results_follow_rubric_order(self) -> None:
        """Output order matches input order regardless of completion order."""
        items = [_machine(f"item-{n}", "h1" if n % 2 else "nav") for n in range(12)]
        runner = EvaluationRunner(ItemEvaluator(), max_workers=4)

        results = runner.run(items, load_html("full_featured.html"))

        assert [r.id for r in results] == [item.id for item in items]

    def test_empty_rubric(self) -> None:
        """No items, no results."""
        runner = EvaluationRunner(ItemEvaluator())

        assert runner.run([], load_html("bare.html")) == []

    def test_one_failing_item_does_not_affect_others(self) -> None:
        """A backend failure for one item leaves the rest untouched."""
        judge = FakeJudge(
            replies={"FAIL-ME": RuntimeError("backend exploded")},
            default="4",
        )
        items = [_machine("h1", "h1"), _ai("bad", "FAIL-ME"), _ai("good", "Fine?")]
        runner = EvaluationRunner(ItemEvaluator(judge=judge), max_workers=3)

        results = runner.run(items, load_html("full_featured.html"))

        by_id = {r.id: r for r in results}
        assert by_id["bad"].source == ResultSource.ERROR
        assert by_id["h1"].score == 5
        assert by_id["good"].score == 4
        assert by_id["good"].source == ResultSource.AI

    def test_slow_item_times_out(self) -> None:
        """An item exceeding its timeout becomes an error result."""
        judge = BlockingJudge()
        items = [_ai("slow"), _machine("h1", "h1")]
        runner = EvaluationRunner(
            ItemEvaluator(judge=judge), max_workers=2, item_timeout=0.2, poll_interval=0.01
        )

        try:
            results = runner.run(items, load_html("full_featured.html"))
        finally:
            judge.release.set()

        assert results[0].source == ResultSource.ERROR
        assert "timed out" in results[0].comment
        assert results[1].score == 5
        assert EvaluationMetrics.get_instance().item_timeouts_total == 1

    def test_item_finished_after_wait_is_not_timed_out(self) -> None:
        """A result that lands after the poll but before the sweep is kept."""

        def late_wait(fs, timeout=None, return_when=None):  # noqa: ANN001, ANN202, ARG001
            time.sleep(0.1)
            return set(), set(fs)

        runner = EvaluationRunner(
            ItemEvaluator(), max_workers=1, item_timeout=0.05, poll_interval=0.01
        )

        with patch("ago_diagnosis.evaluation.runner.wait", side_effect=late_wait):
            results = runner.run([_machine("h1", "h1")], load_html("full_featured.html"))

        assert results[0].source == ResultSource.MACHINE
        assert results[0].score == 5
        assert EvaluationMetrics.get_instance().item_timeouts_total == 0

    def test_cancel_before_start(self) -> None:
        """A pre-set cancel event aborts immediately."""
        cancel = threading.Event()
        cancel.set()
        runner = EvaluationRunner(ItemEvaluator())

        with pytest.raises(DiagnosisCancelledError):
            runner.run([_machine("h1", "h1")], load_html("bare.html"), cancel)

    def test_cancel_while_running(self) -> None:
        """Setting the event mid-run raises without a partial result."""
        judge = BlockingJudge()
        cancel = threading.Event()
        runner = EvaluationRunner(
            ItemEvaluator(judge=judge), max_workers=1, item_timeout=5, poll_interval=0.01
        )

        def cancel_when_started() -> None:
            judge.started.wait(timeout=5)
            cancel.set()

        canceller = threading.Thread(target=cancel_when_started)
        canceller.start()
        start = time.monotonic()
        try:
            with pytest.raises(DiagnosisCancelledError):
                runner.run([_ai("a"), _ai("b")], load_html("full_featured.html"), cancel)
        finally:
            judge.release.set()
            canceller.join()

        assert time.monotonic() - start < 5

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"max_workers": 0}, "max_workers"),
            ({"item_timeout": 0}, "item_timeout"),
        ],
    )
    def test_rejects_invalid_limits(self, kwargs: dict[str, float], message: str) -> None:
        """Non-positive limits are configuration errors."""
        with pytest.raises(ValueError, match=message):
            EvaluationRunner(ItemEvaluator(), **kwargs)  # type: ignore[arg-type]
