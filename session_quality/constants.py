"""Constants and enumerations for chat session quality scoring."""

from enum import StrEnum
from typing import Final


# Session store
DEFAULT_MONGODB_DATABASE: Final[str] = "fraiday-backend"
DEFAULT_MONGODB_COLLECTION: Final[str] = "chat_sessions"
TIMESTAMP_FIELD_ALIASES: Final[tuple[str, ...]] = (
    "createdAt",
    "created_at",
    "timestamp",
    "date",
)
SESSION_ID_FIELDS: Final[tuple[str, ...]] = ("_id", "id", "session_id")

# Analysis service
DEFAULT_REQUEST_TIMEOUT_SECONDS: Final[float] = 50.0
DEFAULT_MAX_ATTEMPTS: Final[int] = 1
WORKFLOW_SUCCESS_STATUS: Final[str] = "success"
DEFAULT_CALLER_METADATA: Final[dict[str, str]] = {
    "session_id": "6791ec1b18070f42a7700e4e",
    "user_id": "abcd",
    "meta_data": "abcd",
    "client_id": "abcd",
}

# Pipeline
DEFAULT_PACING_DELAY_SECONDS: Final[float] = 1.0
DEFAULT_SAMPLE_SIZE: Final[int] = 4
DATE_FORMAT: Final[str] = "%Y-%m-%d"

# Output
DEFAULT_OUTPUT_DIR: Final[str] = "results"
REPORT_FILENAME_TEMPLATE: Final[str] = "session_scores_{}.json"
REPORT_TIMESTAMP_FORMAT: Final[str] = "%Y%m%dT%H%M%S"
JSON_INDENT: Final[int] = 2

# Numeric Constants
EXIT_CODE_ERROR: Final[int] = 1
MAX_SCORE_POINTS: Final[int] = 100
MAX_PERCENTAGE: Final[int] = 100
MIN_LEVEL: Final[int] = 1
MAX_LEVEL: Final[int] = 5
SCORE_DECIMALS: Final[int] = 2


class AnalysisField(StrEnum):
    """Top-level keys of an analysis record."""

    ACCURACY_LEVEL = "accuracy_level"
    IS_CHAT_COMPLETED = "is_chat_completed"
    OVERALL_LATENCY = "overall_latency_classification"
    HUMAN_ESCALATION = "human_escalation"
    ISSUE_STATUS = "issue_status"
    ESCALATION_NECESSITY = "escalation_necessity"
    BOT_TONE = "bot_tone"
    USER_SENTIMENT = "user_sentiment"
    CONVERSATION_QUALITY = "conversation_quality"
    RESPONSE_QUALITY = "response_quality"
    USER_EXPERIENCE = "user_experience"
    USER_EFFORT = "user_effort"


class NestedField(StrEnum):
    """Keys inside the nested analysis groups."""

    IS_ESCALATED = "is_escalated"
    STATUS = "status"
    IS_ESCALATION_NECESSARY = "is_escalation_necessary"
    TONE = "tone"
    SENTIMENT = "sentiment"
    RATING = "rating"
    REQUIRES_REMOTE_ASSISTANCE = "requires_remote_assistance"
    IS_CLEAR = "is_clear"
    IS_CONCISE = "is_concise"
    IS_UNDERSTANDABLE = "is_understandable"
    IS_RELEVANT = "is_relevant"
    OVERALL_QUALITY_SCORE = "overall_quality_score"
    LEVEL = "level"


class YesNo(StrEnum):
    """Yes/no flags emitted by the analysis service."""

    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


class IssueStatus(StrEnum):
    """Issue resolution states."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    UNKNOWN = "unknown"


class AccuracyLevel(StrEnum):
    """Accuracy of the bot's answers."""

    CORRECT = "correct"
    PARTIALLY_CORRECT = "partially correct"
    WRONG = "wrong"
    UNKNOWN = "unknown"


class QualityRating(StrEnum):
    """Four-step quality scale used for responses and conversations."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNKNOWN = "unknown"


class Sentiment(StrEnum):
    """User sentiment over the conversation."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    FRUSTRATED = "frustrated"
    UNKNOWN = "unknown"


class BotTone(StrEnum):
    """Tone of the bot's replies."""

    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    INAPPROPRIATE = "inappropriate"
    UNKNOWN = "unknown"


class LatencyClass(StrEnum):
    """Overall response latency classification."""

    GOOD = "good"
    AVERAGE = "average"
    BAD = "bad"
    UNKNOWN = "unknown"


class ScoreFactor(StrEnum):
    """Names of the composite score factors and adjustments."""

    ISSUE_RESOLUTION = "issue_resolution"
    ESCALATION_AVOIDANCE = "escalation_avoidance"
    USER_EXPERIENCE = "user_experience"
    CHAT_COMPLETION = "chat_completion"
    RESPONSE_QUALITY = "response_quality"
    ACCURACY = "accuracy"
    RESPONSE_COMPONENTS = "response_components"
    USER_SENTIMENT = "user_sentiment"
    USER_EFFORT = "user_effort"
    BOT_TONE = "bot_tone"
    ESCALATION_NECESSITY_PENALTY = "escalation_necessity_penalty"
    LATENCY_PENALTY = "latency_penalty"


# Percentage of the 100 available points carried by each factor
FACTOR_WEIGHTS: Final[dict[ScoreFactor, int]] = {
    ScoreFactor.ISSUE_RESOLUTION: 25,
    ScoreFactor.ESCALATION_AVOIDANCE: 20,
    ScoreFactor.USER_EXPERIENCE: 15,
    ScoreFactor.CHAT_COMPLETION: 10,
    ScoreFactor.RESPONSE_QUALITY: 8,
    ScoreFactor.ACCURACY: 7,
    ScoreFactor.RESPONSE_COMPONENTS: 5,
    ScoreFactor.USER_SENTIMENT: 5,
    ScoreFactor.USER_EFFORT: 3,
    ScoreFactor.BOT_TONE: 2,
}

UNNECESSARY_ESCALATION_PENALTY: Final[float] = -10.0
LATENCY_PENALTIES: Final[dict[LatencyClass, float]] = {
    LatencyClass.AVERAGE: -2.0,
    LatencyClass.BAD: -5.0,
}


class AggregateKey(StrEnum):
    """Aggregate statistics field names."""

    SESSIONS_ANALYZED = "sessions_analyzed"
    CHAT_COMPLETION = "chat_completion"
    USER_SENTIMENT = "user_sentiment"
    BOT_TONE = "bot_tone"
    REMOTE_ASSISTANCE_REQUIRED = "remote_assistance_required"
    ACCURACY_LEVEL = "accuracy_level"
    ISSUE_RESOLUTION = "issue_resolution"
    HUMAN_ESCALATION = "human_escalation"
    AVERAGE_EXPERIENCE_LEVEL = "average_experience_level"
    AVERAGE_EFFORT_LEVEL = "average_effort_level"


class ReportKey(StrEnum):
    """Batch report and session result field names."""

    TOTAL_SESSIONS = "total_sessions"
    PROCESSED = "processed"
    FAILED = "failed"
    RESULTS = "results"
    AGGREGATE = "aggregate"
    AVERAGE_SCORE = "average_score"
    PROCESSING_TIME_SECONDS = "processing_time_seconds"
    SESSION_ID = "session_id"
    ANALYSIS = "analysis"
    SCORE = "score"
    ERROR = "error"
    FACTORS = "factors"
    TOTAL_SCORE = "total_score"


class WorkflowKey(StrEnum):
    """Analysis service request and response keys."""

    ID = "id"
    INPUT_ARGS = "input_args"
    HUMAN_MSG = "human_msg"
    STATUS = "status"
    RESULT = "result"


class LogMessage(StrEnum):
    """Log message templates."""

    PARSING_DATE = "Parsing date input: '{}'"
    DATE_WINDOW = "Date range: {} to {}"
    CONNECTING_STORE = "Connecting to MongoDB..."
    CONNECTED_STORE = "Successfully connected to MongoDB"
    STORE_CLOSED = "MongoDB connection closed"
    SEARCHING_SESSIONS = "Searching for chat sessions between {} and {}"
    FOUND_SESSIONS = "Found {} sessions matching the date filter"
    NO_SESSIONS = "No sessions found for the specified date range"
    SAMPLED_SESSIONS = "Randomly selected {} sessions from {} total sessions"
    PROCESSING_SESSION = "Processing session {}/{}: {}"
    INVOKING_WORKFLOW = "Invoking workflow for session ID: {}"
    WORKFLOW_STATUS = "Response status code: {}"
    SESSION_SCORED = "Session {} scored {}"
    SESSION_FAILED = "Session {} failed: {}"
    UNRECOGNIZED_VALUES = "Session {} has unrecognized analysis values: {}"
    BATCH_COMPLETE = "Processing complete: {} processed, {} failed, average score {}"
    SAVED_REPORT = "Saved batch report to {}"
    SAVED_SCORES_CSV = "Saved {} session scores to {}"
    ERROR_OCCURRED = "Error occurred: {}"


class CliHelp(StrEnum):
    """CLI help messages."""

    APP = "Chat session quality scoring tool"
    START_DATE = "First day to process (YYYY-MM-DD, UTC)."
    END_DATE = "Last day to process (YYYY-MM-DD, UTC). Defaults to START_DATE."
    SESSIONS_DIR = "Read sessions from JSON files in this directory instead of MongoDB."
    SAMPLE = "Score a uniform random sample of at most N sessions instead of the full batch."
    SEED = "Random seed for --sample."
    PACING_DELAY = "Seconds to wait between consecutive analysis requests."
    MAX_RATE = "Cap analysis requests per second instead of using a fixed delay."
    TIMEOUT = "Timeout in seconds for each analysis request."
    MAX_ATTEMPTS = "Attempts per analysis request on transport errors."
    OUTPUT_DIR = "Directory where the batch report is written."
    OUTPUT_FILENAME = "File name for the JSON batch report."
    CSV = "Also write a per-session scores CSV next to the JSON report."
    VERBOSE = "Enable debug logging."
