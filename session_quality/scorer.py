"""Weighted composite scoring of normalized analysis records."""

from typing import Any, Final

from .constants import (
    FACTOR_WEIGHTS,
    LATENCY_PENALTIES,
    MAX_SCORE_POINTS,
    SCORE_DECIMALS,
    UNNECESSARY_ESCALATION_PENALTY,
    AccuracyLevel,
    AnalysisField,
    BotTone,
    IssueStatus,
    NestedField,
    QualityRating,
    ScoreFactor,
    Sentiment,
    YesNo,
)
from .models import ScoreBreakdown
from .normalizer import decode_level, decode_path, get_path

# Points (0-100) before weighting
QUALITY_RATING_POINTS: Final[dict[QualityRating, int]] = {
    QualityRating.EXCELLENT: 100,
    QualityRating.GOOD: 75,
    QualityRating.FAIR: 50,
    QualityRating.POOR: 25,
}

ACCURACY_POINTS: Final[dict[AccuracyLevel, int]] = {
    AccuracyLevel.CORRECT: 100,
    AccuracyLevel.PARTIALLY_CORRECT: 50,
}

SENTIMENT_POINTS: Final[dict[Sentiment, int]] = {
    Sentiment.POSITIVE: 100,
    Sentiment.NEUTRAL: 70,
    Sentiment.NEGATIVE: 30,
    Sentiment.FRUSTRATED: 0,
    Sentiment.UNKNOWN: 70,
}

BOT_TONE_POINTS: Final[dict[BotTone, int]] = {
    BotTone.PROFESSIONAL: 100,
    BotTone.FRIENDLY: 95,
    BotTone.NEUTRAL: 70,
    BotTone.INAPPROPRIATE: 0,
    BotTone.UNKNOWN: 70,
}

# Effort is inverted: less effort is better
EFFORT_LEVEL_POINTS: Final[dict[int, int]] = {1: 100, 2: 80, 3: 60, 4: 40, 5: 20}

RESPONSE_COMPONENT_FIELDS: Final[tuple[NestedField, ...]] = (
    NestedField.IS_CLEAR,
    NestedField.IS_CONCISE,
    NestedField.IS_UNDERSTANDABLE,
    NestedField.IS_RELEVANT,
)

_ISSUE_STATUS_PATH = (AnalysisField.ISSUE_STATUS, NestedField.STATUS)
_ESCALATED_PATH = (AnalysisField.HUMAN_ESCALATION, NestedField.IS_ESCALATED)
_NECESSITY_PATH = (
    AnalysisField.ESCALATION_NECESSITY,
    NestedField.IS_ESCALATION_NECESSARY,
)
_CHAT_COMPLETED_PATH = (AnalysisField.IS_CHAT_COMPLETED,)
_QUALITY_SCORE_PATH = (
    AnalysisField.RESPONSE_QUALITY,
    NestedField.OVERALL_QUALITY_SCORE,
)
_ACCURACY_PATH = (AnalysisField.ACCURACY_LEVEL,)
_SENTIMENT_PATH = (AnalysisField.USER_SENTIMENT, NestedField.SENTIMENT)
_TONE_PATH = (AnalysisField.BOT_TONE, NestedField.TONE)
_LATENCY_PATH = (AnalysisField.OVERALL_LATENCY,)


def _level(analysis: Any, group: AnalysisField) -> int | None:
    """Return the 1-5 level of a group, or None when absent or invalid."""
    return decode_level(get_path(analysis, (group, NestedField.LEVEL)))


def _yes_points(analysis: Any, path: tuple[str, ...]) -> int:
    return MAX_SCORE_POINTS if decode_path(analysis, path) == YesNo.YES else 0


def factor_points(analysis: Any) -> dict[ScoreFactor, float]:
    """Map each weighted factor to its unweighted 0-100 points.

    Missing or unusable data gives 0 points for that factor, except that a
    present but unrecognized sentiment or tone gets the neutral 70 points.

    Args:
        analysis: A normalized analysis record.

    Returns:
        dict[ScoreFactor, float]: Points per weighted factor.
    """
    experience = _level(analysis, AnalysisField.USER_EXPERIENCE)
    effort = _level(analysis, AnalysisField.USER_EFFORT)
    sentiment = decode_path(analysis, _SENTIMENT_PATH)
    tone = decode_path(analysis, _TONE_PATH)

    components = [
        _yes_points(analysis, (AnalysisField.RESPONSE_QUALITY, field))
        for field in RESPONSE_COMPONENT_FIELDS
    ]

    return {
        ScoreFactor.ISSUE_RESOLUTION: (
            MAX_SCORE_POINTS
            if decode_path(analysis, _ISSUE_STATUS_PATH) == IssueStatus.RESOLVED
            else 0
        ),
        ScoreFactor.ESCALATION_AVOIDANCE: (
            MAX_SCORE_POINTS
            if decode_path(analysis, _ESCALATED_PATH) == YesNo.NO
            else 0
        ),
        ScoreFactor.USER_EXPERIENCE: experience * 20 if experience else 0,
        ScoreFactor.CHAT_COMPLETION: _yes_points(analysis, _CHAT_COMPLETED_PATH),
        ScoreFactor.RESPONSE_QUALITY: QUALITY_RATING_POINTS.get(
            decode_path(analysis, _QUALITY_SCORE_PATH), 0
        ),
        ScoreFactor.ACCURACY: ACCURACY_POINTS.get(
            decode_path(analysis, _ACCURACY_PATH), 0
        ),
        ScoreFactor.RESPONSE_COMPONENTS: sum(components) / len(components),
        ScoreFactor.USER_SENTIMENT: SENTIMENT_POINTS.get(sentiment, 0),
        ScoreFactor.USER_EFFORT: EFFORT_LEVEL_POINTS.get(effort, 0),
        ScoreFactor.BOT_TONE: BOT_TONE_POINTS.get(tone, 0),
    }


def penalties(analysis: Any) -> dict[ScoreFactor, float]:
    """Point adjustments applied after weighting.

    An escalation that happened although it was judged unnecessary costs 10
    points; average and bad latency cost 2 and 5 points.
    """
    unnecessary_escalation = (
        decode_path(analysis, _NECESSITY_PATH) == YesNo.NO
        and decode_path(analysis, _ESCALATED_PATH) == YesNo.YES
    )
    latency = decode_path(analysis, _LATENCY_PATH)

    return {
        ScoreFactor.ESCALATION_NECESSITY_PENALTY: (
            UNNECESSARY_ESCALATION_PENALTY if unnecessary_escalation else 0.0
        ),
        ScoreFactor.LATENCY_PENALTY: LATENCY_PENALTIES.get(latency, 0.0),
    }


def score_analysis(analysis: Any) -> ScoreBreakdown:
    """Compute the composite 0-100 quality score of a normalized analysis record.

    Each factor contributes ``points * weight / 100``; the weights add up to
    100 so a record at every factor's maximum scores exactly 100 before
    penalties. Penalties are added unweighted and the total is rounded to two
    decimals and floored at 0. Never raises: absent or malformed fields score 0.

    Args:
        analysis: A normalized analysis record (see ``normalize_analysis``).

    Returns:
        ScoreBreakdown: Weighted contribution per factor and the total score.
    """
    factors: dict[str, float] = {}

    for factor, points in factor_points(analysis).items():
        factors[factor.value] = points * FACTOR_WEIGHTS[factor] / MAX_SCORE_POINTS

    for factor, adjustment in penalties(analysis).items():
        factors[factor.value] = adjustment

    total = round(sum(factors.values()), SCORE_DECIMALS)
    return ScoreBreakdown(factors=factors, total_score=max(0.0, total))
