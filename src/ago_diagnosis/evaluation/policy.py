"""Scoring and rank policy.

One letter scale is used everywhere. Overall percentages map directly;
an item's 0-5 score is projected onto the same scale as ``score * 20``
percent, so 5 -> S, 4 -> A, 3 -> B, 2 -> C, 1 and 0 -> D. Thresholds are
inclusive.
"""

from ago_diagnosis.evaluation.models import Rank


MAX_ITEM_SCORE = 5
MIN_ITEM_SCORE = 0

# (minimum percentage, rank), checked top-down
RANK_THRESHOLDS: tuple[tuple[int, Rank], ...] = (
    (90, Rank.S),
    (75, Rank.A),
    (60, Rank.B),
    (40, Rank.C),
)
LOWEST_RANK = Rank.D

# Summary bands by minimum percentage
SUMMARY_HIGH_THRESHOLD = 75
SUMMARY_MEDIUM_THRESHOLD = 40

SUMMARY_HIGH = (
    "The page is well prepared for AI search: structured data, metadata "
    "and content are in good shape."
)
SUMMARY_MEDIUM = (
    "The page is partly ready for AI search; several signals are missing "
    "or weak and are worth fixing."
)
SUMMARY_LOW = (
    "AI search optimisation is insufficient: key structured data and "
    "metadata are missing, so AI engines will struggle to read and cite "
    "this page."
)

RECOMMENDATION_SEPARATOR = "|"


def clamp_score(score: int) -> int:
    """Clamp an item score to the 0-5 range."""
    return max(MIN_ITEM_SCORE, min(MAX_ITEM_SCORE, score))


def percentage_to_rank(percentage: int | float) -> Rank:
    """Map a 0-100 percentage to a rank.

    Args:
        percentage: Overall percentage.

    Returns:
        Highest rank whose threshold the percentage reaches.
    """
    for threshold, rank in RANK_THRESHOLDS:
        if percentage >= threshold:
            return rank
    return LOWEST_RANK


def score_to_rank(score: int) -> Rank:
    """Map a 0-5 item score to a rank on the shared scale."""
    return percentage_to_rank(clamp_score(score) * 100 // MAX_ITEM_SCORE)


def compute_percentage(total_score: int, evaluated_items: int) -> int:
    """Percentage of the maximum attainable score, rounded half up.

    Returns 0 when nothing was evaluated.
    """
    if evaluated_items <= 0:
        return 0
    max_total = evaluated_items * MAX_ITEM_SCORE
    # floor(100 * total / max_total + 1/2) in integer arithmetic
    return (200 * total_score + max_total) // (2 * max_total)


def summary_for(percentage: int) -> str:
    """Qualitative AI-readiness summary for an overall percentage."""
    if percentage >= SUMMARY_HIGH_THRESHOLD:
        return SUMMARY_HIGH
    if percentage >= SUMMARY_MEDIUM_THRESHOLD:
        return SUMMARY_MEDIUM
    return SUMMARY_LOW


def select_recommendation(template: str, score: int, default: str) -> str:
    """Pick the recommendation for a score from a per-band template.

    The template is a ``|``-separated list indexed by score. An index past
    the end falls back to the last entry; a blank template or a blank
    entry falls back to ``default``.

    Args:
        template: Recommendation template from the rubric.
        score: Item score (0-5).
        default: Text used when the template yields nothing.

    Returns:
        Recommendation text.
    """
    if not template.strip():
        return default

    entries = [entry.strip() for entry in template.split(RECOMMENDATION_SEPARATOR)]
    index = clamp_score(score)
    choice = entries[index] if index < len(entries) else entries[-1]
    return choice or default
