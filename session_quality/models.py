"""Data models for session quality scoring."""

from dataclasses import dataclass
from typing import Any

from .constants import (
    SESSION_ID_FIELDS,
    TIMESTAMP_FIELD_ALIASES,
    AggregateKey,
    ReportKey,
)


@dataclass
class ChatSession:
    """A chat session record as returned by a session store.

    Attributes:
        id: First identifier found under the accepted id fields, or None.
        created_at: First timestamp found under the accepted timestamp aliases.
        raw: The untouched store record.
    """

    id: str | None
    created_at: Any
    raw: dict[str, Any]

    @classmethod
    def from_dict(cls, *, data: dict[str, Any]) -> "ChatSession":
        """Create a ChatSession from a store record.

        Identifiers are stringified so that database object ids and plain
        strings are handled the same way. Empty values are skipped.

        Args:
            data: Session record from the store.

        Returns:
            ChatSession: A view over the record.
        """
        session_id = None
        for key in SESSION_ID_FIELDS:
            value = data.get(key)
            if value is not None and str(value):
                session_id = str(value)
                break

        created_at = None
        for key in TIMESTAMP_FIELD_ALIASES:
            if data.get(key) is not None:
                created_at = data[key]
                break

        return cls(id=session_id, created_at=created_at, raw=data)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Composite score of one analysis record.

    Attributes:
        factors: Weighted point contribution per factor; penalties are negative.
        total_score: Sum of all contributions, rounded to 2 decimals, never below 0.
    """

    factors: dict[str, float]
    total_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            ReportKey.FACTORS: dict(self.factors),
            ReportKey.TOTAL_SCORE: self.total_score,
        }


@dataclass(frozen=True)
class SessionResult:
    """Outcome of scoring a single session.

    Exactly one of ``score`` and ``error`` is set.
    """

    session_id: str | None
    analysis: dict[str, Any] | None = None
    score: ScoreBreakdown | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.score is not None

    @classmethod
    def success(
        cls, *, session_id: str, analysis: dict[str, Any], score: ScoreBreakdown
    ) -> "SessionResult":
        return cls(session_id=session_id, analysis=analysis, score=score)

    @classmethod
    def failure(cls, *, session_id: str | None, error: str) -> "SessionResult":
        return cls(session_id=session_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            ReportKey.SESSION_ID: self.session_id,
            ReportKey.ANALYSIS: self.analysis,
            ReportKey.SCORE: self.score.to_dict() if self.score else None,
            ReportKey.ERROR: self.error,
        }


@dataclass(frozen=True)
class AggregateStats:
    """Distributions and averages over the successful sessions of a batch.

    Categorical distributions map each observed value to an integer percentage
    of ``sessions_analyzed``. Yes/no distributions always carry both keys.

    Attributes:
        sessions_analyzed: Number of successful sessions aggregated.
        chat_completion: Yes/no distribution of chat completion.
        user_sentiment: Distribution of user sentiment values.
        bot_tone: Distribution of bot tone values.
        remote_assistance_required: Yes/no distribution of remote assistance need.
        accuracy_level: Distribution of accuracy levels.
        issue_resolution: Distribution of issue statuses.
        human_escalation: Yes/no distribution of human escalation.
        average_experience_level: Mean user experience level (1-5), 0 when none.
        average_effort_level: Mean user effort level (1-5), 0 when none.
    """

    sessions_analyzed: int
    chat_completion: dict[str, int]
    user_sentiment: dict[str, int]
    bot_tone: dict[str, int]
    remote_assistance_required: dict[str, int]
    accuracy_level: dict[str, int]
    issue_resolution: dict[str, int]
    human_escalation: dict[str, int]
    average_experience_level: float
    average_effort_level: float

    def to_dict(self) -> dict[str, Any]:
        return {
            AggregateKey.SESSIONS_ANALYZED: self.sessions_analyzed,
            AggregateKey.CHAT_COMPLETION: dict(self.chat_completion),
            AggregateKey.USER_SENTIMENT: dict(self.user_sentiment),
            AggregateKey.BOT_TONE: dict(self.bot_tone),
            AggregateKey.REMOTE_ASSISTANCE_REQUIRED: dict(
                self.remote_assistance_required
            ),
            AggregateKey.ACCURACY_LEVEL: dict(self.accuracy_level),
            AggregateKey.ISSUE_RESOLUTION: dict(self.issue_resolution),
            AggregateKey.HUMAN_ESCALATION: dict(self.human_escalation),
            AggregateKey.AVERAGE_EXPERIENCE_LEVEL: self.average_experience_level,
            AggregateKey.AVERAGE_EFFORT_LEVEL: self.average_effort_level,
        }


@dataclass
class BatchReport:
    """Final report of one pipeline run.

    Attributes:
        total_sessions: Sessions selected for processing.
        processed: Sessions that were scored.
        failed: Sessions that could not be scored.
        results: Per-session results in retrieval order.
        aggregate: Aggregate statistics over the scored sessions.
        average_score: Mean total score of the scored sessions, 0 when none.
        processing_time_seconds: Wall-clock duration of the run.
    """

    total_sessions: int
    processed: int
    failed: int
    results: list[SessionResult]
    aggregate: AggregateStats
    average_score: float
    processing_time_seconds: float

    @property
    def failed_results(self) -> list[SessionResult]:
        return [result for result in self.results if not result.succeeded]

    @property
    def success_rate(self) -> float:
        """Percentage of selected sessions that were scored."""
        if not self.total_sessions:
            return 0.0
        return round(self.processed / self.total_sessions * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to plain data for serialization.

        Returns:
            dict[str, Any]: Dictionary representation of the batch report.
        """
        return {
            ReportKey.TOTAL_SESSIONS: self.total_sessions,
            ReportKey.PROCESSED: self.processed,
            ReportKey.FAILED: self.failed,
            ReportKey.RESULTS: [result.to_dict() for result in self.results],
            ReportKey.AGGREGATE: self.aggregate.to_dict(),
            ReportKey.AVERAGE_SCORE: self.average_score,
            ReportKey.PROCESSING_TIME_SECONDS: self.processing_time_seconds,
        }
