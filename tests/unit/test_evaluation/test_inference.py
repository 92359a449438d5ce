"""Unit tests for score inference from judgment replies."""

import pytest

from ago_diagnosis.evaluation.inference import (
    DEFAULT_SCORE,
    MITIGATED_SCORE,
    NEGATIVE_SCORE,
    POSITIVE_SCORE,
    InferenceBasis,
    classify_judgment,
    infer_score,
    parse_numeric_score,
)
from ago_diagnosis.evaluation.models import Rank


class TestParseNumericScore:
    """Tests for explicit score extraction."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("4\nThe headings are clear.", 4),
            ("**5** Excellent structure.", 5),
            ("Score: 3 - some sections lack headings.", 3),
            ("The page deserves 2/5 overall.", 2),
            ("スコア：1 見出しがありません。", 1),
            ("評価は4です。", 4),
            ("I would give this a 3.", 3),
        ],
    )
    def test_recognised_forms(self, text: str, expected: int) -> None:
        """Leading, labelled, fractional and lone digits are read."""
        assert parse_numeric_score(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "The page uses H1 and H2 headings well.",
            "There are 12 links and 3 images.",
            "Version 2.5 of the schema is used.",
            "No numbers at all.",
            "Rated 8 out of 10.",
            "1. The headings are clear.\n2. The title is short.",
            "3) Add a meta description.",
        ],
    )
    def test_ignores_incidental_numbers(self, text: str) -> None:
        """Numbers that are not a 0-5 score are not mistaken for one."""
        assert parse_numeric_score(text) is None


class TestClassifyJudgment:
    """Tests for keyword fallback classification."""

    def test_numbered_list_reply_falls_back_to_keywords(self) -> None:
        """A list marker is not read as a score."""
        inference = classify_judgment("1. The headings are good and well-structured.")

        assert inference.score == POSITIVE_SCORE
        assert inference.basis == InferenceBasis.POSITIVE

    def test_score_line_before_numbered_list(self) -> None:
        """A leading score survives a numbered explanation below it."""
        inference = classify_judgment("4\n1. Clear title.\n2. Missing alt text.")

        assert inference.score == 4
        assert inference.basis == InferenceBasis.NUMERIC

    def test_numeric_wins_over_keywords(self) -> None:
        """An explicit score beats contradicting keywords."""
        inference = classify_judgment("1\nThe description is missing.")

        assert inference.score == 1
        assert inference.basis == InferenceBasis.NUMERIC

    @pytest.mark.parametrize(
        ("text", "score", "basis"),
        [
            ("The structure is good.", POSITIVE_SCORE, InferenceBasis.POSITIVE),
            ("構成は良好です。", POSITIVE_SCORE, InferenceBasis.POSITIVE),
            ("Headings are partially descriptive.", MITIGATED_SCORE,
             InferenceBasis.MITIGATED),
            ("改善の余地があります。", MITIGATED_SCORE, InferenceBasis.MITIGATED),
            ("The FAQ section is missing.", NEGATIVE_SCORE, InferenceBasis.NEGATIVE),
            ("説明が不十分です。", NEGATIVE_SCORE, InferenceBasis.NEGATIVE),
            ("The page is about coffee.", DEFAULT_SCORE, InferenceBasis.DEFAULT),
        ],
    )
    def test_keyword_classes(
        self, text: str, score: int, basis: InferenceBasis
    ) -> None:
        """Keyword classes map to fixed scores, with a neutral default."""
        inference = classify_judgment(text)

        assert inference.score == score
        assert inference.basis == basis

    def test_positive_checked_before_negative(self) -> None:
        """Mixed replies resolve in priority order."""
        assert classify_judgment("Good overall, though alt text is missing.").score == (
            POSITIVE_SCORE
        )

    def test_negated_positive_is_not_positive(self) -> None:
        """'not sufficient' does not count as positive."""
        inference = classify_judgment("The content is not sufficient and lacks depth.")

        assert inference.basis == InferenceBasis.NEGATIVE

    def test_insufficient_is_negative_in_japanese(self) -> None:
        """不十分 must not be read as 十分."""
        assert classify_judgment("情報が不十分").basis == InferenceBasis.NEGATIVE


class TestInferScore:
    """Tests for the (score, rank) helper."""

    def test_returns_score_and_rank(self) -> None:
        """Rank follows the shared scale."""
        assert infer_score("5") == (5, Rank.S)
        assert infer_score("The outline is good.") == (5, Rank.S)
        assert infer_score("Nothing notable.") == (2, Rank.C)

    def test_is_pure(self) -> None:
        """Same input, same output."""
        text = "Score: 4"

        assert infer_score(text) == infer_score(text)
