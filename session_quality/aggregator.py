"""Aggregate scored sessions into distributions and averages."""

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any, Final

from loguru import logger

from .constants import (
    MAX_PERCENTAGE,
    SCORE_DECIMALS,
    AggregateKey,
    AnalysisField,
    NestedField,
    YesNo,
)
from .models import AggregateStats, SessionResult
from .normalizer import decode_level, decode_path, get_path

CATEGORICAL_FIELDS: Final[dict[AggregateKey, tuple[str, ...]]] = {
    AggregateKey.USER_SENTIMENT: (
        AnalysisField.USER_SENTIMENT,
        NestedField.SENTIMENT,
    ),
    AggregateKey.BOT_TONE: (AnalysisField.BOT_TONE, NestedField.TONE),
    AggregateKey.ACCURACY_LEVEL: (AnalysisField.ACCURACY_LEVEL,),
    AggregateKey.ISSUE_RESOLUTION: (AnalysisField.ISSUE_STATUS, NestedField.STATUS),
}

YES_NO_FIELDS: Final[dict[AggregateKey, tuple[str, ...]]] = {
    AggregateKey.CHAT_COMPLETION: (AnalysisField.IS_CHAT_COMPLETED,),
    AggregateKey.REMOTE_ASSISTANCE_REQUIRED: (
        AnalysisField.CONVERSATION_QUALITY,
        NestedField.REQUIRES_REMOTE_ASSISTANCE,
    ),
    AggregateKey.HUMAN_ESCALATION: (
        AnalysisField.HUMAN_ESCALATION,
        NestedField.IS_ESCALATED,
    ),
}

NUMERIC_FIELDS: Final[dict[AggregateKey, tuple[str, ...]]] = {
    AggregateKey.AVERAGE_EXPERIENCE_LEVEL: (
        AnalysisField.USER_EXPERIENCE,
        NestedField.LEVEL,
    ),
    AggregateKey.AVERAGE_EFFORT_LEVEL: (AnalysisField.USER_EFFORT, NestedField.LEVEL),
}


def percentage(count: int, total: int) -> int:
    """Integer percentage of ``count`` over ``total``, rounded half up."""
    if total <= 0:
        return 0
    return (count * 200 + total) // (total * 2)


def distribution(counts: dict[str, int], total: int) -> dict[str, int]:
    """Convert counts into integer percentages of ``total`` that sum to at most 100.

    Each value is rounded half up. When that rounding pushes the sum past 100,
    the surplus is taken back one point at a time from the values that were
    rounded up the most; ties go to the value observed last.
    """
    percentages = {value: percentage(count, total) for value, count in counts.items()}
    surplus = sum(percentages.values()) - MAX_PERCENTAGE
    if surplus <= 0:
        return percentages

    # Smallest remainder means the largest upward rounding
    rounded_up = sorted(
        (
            value
            for value in reversed(counts)
            if percentages[value] * total > counts[value] * MAX_PERCENTAGE
        ),
        key=lambda value: counts[value] * MAX_PERCENTAGE % total,
    )
    for value in rounded_up[:surplus]:
        percentages[value] -= 1
    return percentages


def categorical_distribution(
    analyses: Sequence[dict[str, Any]], path: tuple[str, ...]
) -> dict[str, int]:
    """Percentage of sessions per observed string value at ``path``.

    The denominator is the number of sessions, so sessions without the field
    lower every percentage instead of being dropped.
    """
    counts = Counter(
        value
        for value in (get_path(analysis, path) for analysis in analyses)
        if isinstance(value, str)
    )
    return distribution(dict(counts), len(analyses))


def yes_no_distribution(
    analyses: Sequence[dict[str, Any]], path: tuple[str, ...]
) -> dict[str, int]:
    """Percentage of sessions answering yes and no at ``path``.

    Flags are read case-insensitively and JSON booleans count as yes/no. Both
    keys are always present, 0 when nobody answered that way.
    """
    counts = Counter(decode_path(analysis, path) for analysis in analyses)
    return distribution(
        {
            YesNo.YES.value: counts[YesNo.YES],
            YesNo.NO.value: counts[YesNo.NO],
        },
        len(analyses),
    )


def numeric_average(
    analyses: Sequence[dict[str, Any]], path: tuple[str, ...]
) -> float:
    """Mean of the valid 1-5 levels at ``path``, 0 when no session supplies one."""
    values = [
        level
        for level in (decode_level(get_path(analysis, path)) for analysis in analyses)
        if level is not None
    ]
    if not values:
        return 0
    return round(sum(values) / len(values), SCORE_DECIMALS)


def aggregate_results(results: Iterable[SessionResult]) -> AggregateStats:
    """Reduce a batch of session results into aggregate statistics.

    Failed results are ignored. Every distribution is expressed as an integer
    percentage of the successful sessions; an empty batch yields empty
    categorical distributions, zero yes/no percentages and zero averages.

    Args:
        results: Session results in processing order.

    Returns:
        AggregateStats: Distributions and averages for reporting.
    """
    analyses = [
        result.analysis
        for result in results
        if result.succeeded and isinstance(result.analysis, dict)
    ]
    logger.debug(f"Aggregating {len(analyses)} successful session analyses")

    return AggregateStats(
        sessions_analyzed=len(analyses),
        **{
            name: categorical_distribution(analyses, path)
            for name, path in CATEGORICAL_FIELDS.items()
        },
        **{
            name: yes_no_distribution(analyses, path)
            for name, path in YES_NO_FIELDS.items()
        },
        **{
            name: numeric_average(analyses, path)
            for name, path in NUMERIC_FIELDS.items()
        },
    )
