"""Canonicalization of raw analysis records."""

import copy
from enum import StrEnum
from typing import Any, Final, TypeVar

from loguru import logger

from .constants import (
    MAX_LEVEL,
    MIN_LEVEL,
    AccuracyLevel,
    AnalysisField,
    BotTone,
    IssueStatus,
    LatencyClass,
    NestedField,
    QualityRating,
    Sentiment,
    YesNo,
)

E = TypeVar("E", bound=StrEnum)

# Enum-valued paths that normalize_analysis lower-cases, with their vocabulary
NORMALIZED_FIELD_PATHS: Final[dict[tuple[str, ...], type[StrEnum]]] = {
    (AnalysisField.ACCURACY_LEVEL,): AccuracyLevel,
    (AnalysisField.IS_CHAT_COMPLETED,): YesNo,
    (AnalysisField.OVERALL_LATENCY,): LatencyClass,
    (AnalysisField.HUMAN_ESCALATION, NestedField.IS_ESCALATED): YesNo,
    (AnalysisField.ISSUE_STATUS, NestedField.STATUS): IssueStatus,
    (
        AnalysisField.ESCALATION_NECESSITY,
        NestedField.IS_ESCALATION_NECESSARY,
    ): YesNo,
    (AnalysisField.BOT_TONE, NestedField.TONE): BotTone,
    (AnalysisField.USER_SENTIMENT, NestedField.SENTIMENT): Sentiment,
    (AnalysisField.CONVERSATION_QUALITY, NestedField.RATING): QualityRating,
    (AnalysisField.RESPONSE_QUALITY, NestedField.IS_CLEAR): YesNo,
    (AnalysisField.RESPONSE_QUALITY, NestedField.IS_CONCISE): YesNo,
    (AnalysisField.RESPONSE_QUALITY, NestedField.IS_UNDERSTANDABLE): YesNo,
    (AnalysisField.RESPONSE_QUALITY, NestedField.IS_RELEVANT): YesNo,
    (AnalysisField.RESPONSE_QUALITY, NestedField.OVERALL_QUALITY_SCORE): QualityRating,
}

# Every path read through decode_path; the extra entries keep their original case
DECODED_FIELD_PATHS: Final[dict[tuple[str, ...], type[StrEnum]]] = {
    **NORMALIZED_FIELD_PATHS,
    (
        AnalysisField.CONVERSATION_QUALITY,
        NestedField.REQUIRES_REMOTE_ASSISTANCE,
    ): YesNo,
}


def get_path(data: Any, path: tuple[str, ...]) -> Any:
    """Read a nested value, returning None when any step is missing or not a dict."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def normalize_analysis(raw: Any) -> Any:
    """Lower-case every enum-valued string field of an analysis record.

    Non-string values at those paths are left as they are, no missing key is
    created, and the input is never mutated. Anything that is not a dict is
    returned unchanged. Applying this twice gives the same result as once.

    Args:
        raw: Analysis record as returned by the analysis service.

    Returns:
        A normalized copy of ``raw`` (or ``raw`` itself if it is not a dict).
    """
    if not isinstance(raw, dict):
        return raw

    normalized = copy.deepcopy(raw)
    for path in NORMALIZED_FIELD_PATHS:
        parent = get_path(normalized, path[:-1]) if len(path) > 1 else normalized
        if not isinstance(parent, dict):
            continue
        value = parent.get(path[-1])
        if isinstance(value, str):
            parent[path[-1]] = value.lower()

    return normalized


def decode_enum(enum_cls: type[E], value: Any) -> E | None:
    """Decode a free-form string into a closed vocabulary.

    Returns:
        None if the value is absent or not a string, the matching member for a
        known value, and ``enum_cls.UNKNOWN`` for any other string.
    """
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.lower())
    except ValueError:
        return enum_cls["UNKNOWN"]


def decode_yes_no(value: Any) -> YesNo | None:
    """Decode a yes/no flag sent either as a string or as a JSON boolean."""
    if isinstance(value, bool):
        return YesNo.YES if value else YesNo.NO
    return decode_enum(YesNo, value)


def decode_path(analysis: Any, path: tuple[str, ...]) -> StrEnum | None:
    """Decode the value at ``path`` with the vocabulary registered for it."""
    enum_cls = DECODED_FIELD_PATHS[path]
    value = get_path(analysis, path)
    if enum_cls is YesNo:
        return decode_yes_no(value)
    return decode_enum(enum_cls, value)


def decode_level(value: Any) -> int | None:
    """Decode a 1-5 level, accepting integral floats such as ``5.0``.

    Returns:
        int | None: The level, or None for booleans, fractional numbers,
        non-numbers and values outside 1-5.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int) or not MIN_LEVEL <= value <= MAX_LEVEL:
        return None
    return value


def find_unrecognized(analysis: Any) -> dict[str, str]:
    """Collect string values that fall outside their field's vocabulary.

    Returns:
        dict[str, str]: Dotted field path mapped to the offending value.
    """
    unrecognized: dict[str, str] = {}
    for path, enum_cls in DECODED_FIELD_PATHS.items():
        value = get_path(analysis, path)
        decoded = decode_enum(enum_cls, value)
        if decoded is not None and decoded.name == "UNKNOWN":
            unrecognized[".".join(path)] = value

    if unrecognized:
        logger.debug(f"Unrecognized analysis values: {unrecognized}")
    return unrecognized
