"""Aggregation of graded results into a report."""

from collections.abc import Sequence
from datetime import UTC, datetime

from ago_diagnosis.evaluation.models import GradedResult, Report
from ago_diagnosis.evaluation.policy import (
    compute_percentage,
    percentage_to_rank,
    summary_for,
)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    utc = moment.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def aggregate(
    results: Sequence[GradedResult],
    url: str,
    now: datetime | None = None,
) -> Report:
    """Combine item results into the final report.

    Every result counts towards the maximum attainable score, including
    error and unevaluated ones, so failures lower the percentage.

    Args:
        results: Graded results in rubric order.
        url: Diagnosed URL.
        now: Report time; current UTC time when omitted.

    Returns:
        Report with totals, percentage, rank and summary.
    """
    total = sum(result.score for result in results)
    percentage = compute_percentage(total, len(results))

    return Report(
        url=url,
        timestamp=format_timestamp(now or datetime.now(UTC)),
        results=list(results),
        total_score=total,
        evaluated_items=len(results),
        percentage=percentage,
        rank=percentage_to_rank(percentage),
        summary=summary_for(percentage),
    )
