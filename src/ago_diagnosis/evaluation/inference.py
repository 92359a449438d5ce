"""Score inference from free-text judgment replies.

Replies are read in two passes. A number the model was asked to emit is
trusted first; only when none can be found are keyword classes scanned,
in priority order positive, mitigated, negative, with a neutral default.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ago_diagnosis.evaluation.models import Rank
from ago_diagnosis.evaluation.policy import score_to_rank


POSITIVE_SCORE = 5
MITIGATED_SCORE = 3
NEGATIVE_SCORE = 1
DEFAULT_SCORE = 2


class InferenceBasis(str, Enum):
    """Which rule produced an inferred score."""

    NUMERIC = "numeric"
    POSITIVE = "positive"
    MITIGATED = "mitigated"
    NEGATIVE = "negative"
    DEFAULT = "default"


@dataclass(frozen=True)
class JudgmentInference:
    """Score read from a judgment reply.

    Attributes:
        score: Item score 0-5.
        rank: Rank for the score.
        basis: Rule that produced the score.
    """

    score: int
    rank: Rank
    basis: InferenceBasis


# A digit 0-5 that is not part of a longer number or a decimal
_DIGIT = r"([0-5])(?![\dA-Za-z]|\.\d)"

_LEADING_DIGIT = re.compile(r"^\s*[\*\[\(「【]*" + _DIGIT)
_LABELLED_DIGIT = re.compile(
    r"(?:\b(?:score|rating)|スコア|評価|点数)\s*[:：=]?\s*(?:は\s*)?[\*\[]*" + _DIGIT,
    re.IGNORECASE,
)
_FRACTION = re.compile(r"(?<![\d.])([0-5])\s*/\s*5(?!\d)")
_ANY_NUMBER = re.compile(r"(?<![A-Za-z\d.])\d+(?:\.\d+)?(?![A-Za-z\d]|\.\d)")

# "1. ..." or "2) ..." at the start of a line numbers a list item, not a score
_LIST_MARKER = re.compile(r"^[ \t]*\d+[.)][ \t]+(?=\S)", re.MULTILINE)

POSITIVE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"(?<!not )\bgood\b",
        r"(?<!not )\bsufficient\b",
        r"\bno (?:major )?issues?\b",
        r"(?<!not )\bappropriate\b",
        r"\bexcellent\b",
        r"\bwell[- ](?:structured|organi[sz]ed|written)\b",
        r"良好",
        r"(?<!不)十分",
        r"問題(?:は)?(?:なし|ありません|ない)",
        r"(?<!不)適切",
    )
)

MITIGATED_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bpartial(?:ly)?\b",
        r"\bsomewhat\b",
        r"\bneeds? (?:some )?improvement\b",
        r"\bcould be improved\b",
        r"一部",
        r"やや",
        r"改善の余地",
        r"改善が必要",
    )
)

NEGATIVE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\binsufficient\b",
        r"\black(?:s|ing)?\b",
        r"\bnot found\b",
        r"\bmissing\b",
        r"\bpoor\b",
        r"\binappropriate\b",
        r"不十分",
        r"不足",
        r"見つかりません",
        r"未設定",
        r"不適切",
    )
)

_KeywordClass = tuple[InferenceBasis, int, tuple[re.Pattern[str], ...]]

_KEYWORD_CLASSES: tuple[_KeywordClass, ...] = (
    (InferenceBasis.POSITIVE, POSITIVE_SCORE, POSITIVE_PATTERNS),
    (InferenceBasis.MITIGATED, MITIGATED_SCORE, MITIGATED_PATTERNS),
    (InferenceBasis.NEGATIVE, NEGATIVE_SCORE, NEGATIVE_PATTERNS),
)


def parse_numeric_score(text: str) -> int | None:
    """Read an explicit 0-5 score from a reply.

    Recognized, in order: a leading digit, a labelled score
    (``Score: 4``, ``スコア：4``), a ``n/5`` fraction, or a reply whose
    only number is a single digit 0-5. Numbered-list markers are
    ignored.

    Args:
        text: Judgment reply.

    Returns:
        The score, or None when the reply carries no usable number.
    """
    text = _LIST_MARKER.sub("", text)
    for pattern in (_LEADING_DIGIT, _LABELLED_DIGIT, _FRACTION):
        match = pattern.search(text)
        if match:
            return int(match.group(1))

    numbers = _ANY_NUMBER.findall(text)
    if len(numbers) == 1 and numbers[0].isdigit() and int(numbers[0]) <= 5:  # noqa: PLR2004
        return int(numbers[0])

    return None


def classify_judgment(text: str) -> JudgmentInference:
    """Infer a score, rank and basis from a judgment reply.

    Args:
        text: Free-text reply from the judgment backend.

    Returns:
        JudgmentInference for the reply.
    """
    numeric = parse_numeric_score(text)
    if numeric is not None:
        return JudgmentInference(
            numeric, score_to_rank(numeric), InferenceBasis.NUMERIC
        )

    for basis, score, patterns in _KEYWORD_CLASSES:
        if any(pattern.search(text) for pattern in patterns):
            return JudgmentInference(score, score_to_rank(score), basis)

    return JudgmentInference(
        DEFAULT_SCORE, score_to_rank(DEFAULT_SCORE), InferenceBasis.DEFAULT
    )


def infer_score(text: str) -> tuple[int, Rank]:
    """Infer ``(score, rank)`` from a judgment reply."""
    inference = classify_judgment(text)
    return inference.score, inference.rank
