"""Chat session quality scoring package."""

from .aggregator import aggregate_results
from .exceptions import (
    AnalysisServiceError,
    MissingSessionIdError,
    PerSessionError,
    RetrievalError,
    SessionQualityError,
    ValidationError,
)
from .models import (
    AggregateStats,
    BatchReport,
    ChatSession,
    ScoreBreakdown,
    SessionResult,
)
from .normalizer import normalize_analysis
from .pipeline import SelectionPolicy, SessionPipeline
from .scorer import score_analysis
from .storage import ReportStorage
from .stores import JsonDirectorySessionStore, MongoSessionStore
from .workflow import WorkflowClient

__all__ = [
    "AggregateStats",
    "AnalysisServiceError",
    "BatchReport",
    "ChatSession",
    "JsonDirectorySessionStore",
    "MissingSessionIdError",
    "MongoSessionStore",
    "PerSessionError",
    "ReportStorage",
    "RetrievalError",
    "ScoreBreakdown",
    "SelectionPolicy",
    "SessionPipeline",
    "SessionQualityError",
    "SessionResult",
    "ValidationError",
    "WorkflowClient",
    "aggregate_results",
    "normalize_analysis",
    "score_analysis",
]
