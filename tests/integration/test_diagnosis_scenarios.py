"""End-to-end diagnosis scenarios through the HTTP API.

The target site is served by an in-memory httpx transport; rubric files
come from tests/fixtures/rubrics.
"""

from collections.abc import Generator

import httpx
import pytest
from flask.testing import FlaskClient

from ago_diagnosis.api.app import create_app
from ago_diagnosis.diagnosis.service import DiagnosisService
from ago_diagnosis.evaluation.evaluator import INVALID_SELECTOR_COMMENT
from ago_diagnosis.evaluation.metrics import EvaluationMetrics
from ago_diagnosis.fetch.metrics import FetchMetrics
from ago_diagnosis.llm.protocols import JudgmentBackend
from ago_diagnosis.rubric.loader import FileRubricSource
from ago_diagnosis.rubric.repository import RubricRepository
from ago_diagnosis.settings.app import AppSettings
from tests.helpers.pages import (
    RUBRICS_DIR,
    FakeJudge,
    failing_fetcher,
    html_fetcher,
    no_retry_fetcher,
    read_html,
)


TARGET = "https://shop.example/"


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singletons before and after each test."""
    EvaluationMetrics.reset()
    FetchMetrics.reset()
    yield
    EvaluationMetrics.reset()
    FetchMetrics.reset()


def _client(
    rubric_file: str,
    fetcher,  # noqa: ANN001
    judge: JudgmentBackend | None = None,
) -> FlaskClient:
    service = DiagnosisService(
        repository=RubricRepository(FileRubricSource(RUBRICS_DIR / rubric_file)),
        fetcher=fetcher,
        judge=judge,
        max_workers=4,
        item_timeout=10,
    )
    app = create_app(settings=AppSettings(_env_file=None), service=service)
    app.config["TESTING"] = True
    return app.test_client()


class TestDiagnosisScenarios:
    """Whole-pipeline behaviour for representative pages."""

    def test_page_with_json_ld_and_lang_scores_top_rank(self) -> None:
        """Both machine checks pass: 10/10, 100%, rank S."""
        client = _client(
            "two_machine_checks.csv", html_fetcher(read_html("jsonld_and_lang.html"))
        )

        response = client.get("/diagnose", query_string={"url": TARGET})

        assert response.status_code == 200
        data = response.get_json()
        assert data["evaluatedItems"] == 2
        assert data["totalScore"] == 10
        assert data["percentage"] == 100
        assert data["rank"] == "S"
        assert [r["source"] for r in data["results"]] == ["machine", "machine"]

    def test_page_without_features_scores_bottom_rank(self) -> None:
        """Neither check passes: 0/10, 0%, rank D."""
        client = _client("two_machine_checks.csv", html_fetcher(read_html("bare.html")))

        data = client.get("/diagnose", query_string={"url": TARGET}).get_json()

        assert data["totalScore"] == 0
        assert data["percentage"] == 0
        assert data["rank"] == "D"
        assert data["results"][0]["recommendation"] == "Add JSON-LD structured data."

    def test_network_error_returns_system_result(self) -> None:
        """A fetch failure yields an error status and one system result."""
        client = _client("two_machine_checks.csv", failing_fetcher())

        response = client.get("/diagnose", query_string={"url": TARGET})

        assert response.status_code == 500
        data = response.get_json()
        assert len(data["results"]) == 1
        assert data["results"][0]["id"] == "system"
        assert data["results"][0]["source"] == "system"
        assert "error" in data

    def test_whitespace_selector_rows_score_zero(self) -> None:
        """Blank selectors are flagged regardless of method."""
        judge = FakeJudge(default="5")
        client = _client(
            "whitespace_selector.csv",
            html_fetcher(read_html("full_featured.html")),
            judge,
        )

        data = client.get("/diagnose", query_string={"url": TARGET}).get_json()

        by_id = {r["id"]: r for r in data["results"]}
        for item_id in ("blank_machine", "blank_ai"):
            assert by_id[item_id]["score"] == 0
            assert by_id[item_id]["comment"] == INVALID_SELECTOR_COMMENT
            assert by_id[item_id]["source"] == "machine"
        assert by_id["h1"]["score"] == 5
        assert judge.prompts == []

    def test_mixed_methods_with_failing_backend(self) -> None:
        """Judge failures and unknown methods do not disturb machine checks."""
        judge = FakeJudge(default=RuntimeError("backend down"))
        client = _client(
            "mixed_methods.yaml", html_fetcher(read_html("full_featured.html")), judge
        )

        data = client.get("/diagnose", query_string={"url": TARGET}).get_json()

        by_id = {r["id"]: r for r in data["results"]}
        assert by_id["title"]["score"] == 5
        assert by_id["heading_structure"]["source"] == "error"
        assert by_id["legacy"]["rank"] == "-"
        assert by_id["legacy"]["source"] == "unknown"
        assert data["evaluatedItems"] == 3
        assert data["totalScore"] == 5
        assert data["percentage"] == 33

    def test_redirected_page_is_diagnosed(self) -> None:
        """Redirects are followed before parsing."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/":
                return httpx.Response(301, headers={"Location": "/home"})
            return httpx.Response(
                200,
                headers={"content-type": "text/html"},
                content=read_html("jsonld_and_lang.html").encode("utf-8"),
            )

        client = _client("two_machine_checks.csv", no_retry_fetcher(handler))

        data = client.get("/diagnose", query_string={"url": TARGET}).get_json()

        assert data["percentage"] == 100
