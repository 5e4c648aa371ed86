"""Shared fixtures for the session quality tests."""

import sys
from typing import Any

import pytest
from loguru import logger

from session_quality.dates import DateWindow
from session_quality.exceptions import AnalysisServiceError


@pytest.fixture(autouse=True)
def reset_logger():
    """Restore the default loguru sink after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def full_marks_analysis() -> dict[str, Any]:
    """Analysis record where every factor is at its best mapping, in mixed case."""
    return {
        "accuracy_level": "Correct",
        "is_chat_completed": "YES",
        "overall_latency_classification": "Good",
        "human_escalation": {"is_escalated": "No"},
        "issue_status": {"status": "RESOLVED"},
        "escalation_necessity": {"is_escalation_necessary": "no"},
        "bot_tone": {"tone": "Professional"},
        "user_sentiment": {"sentiment": "Positive"},
        "conversation_quality": {
            "rating": "Excellent",
            "requires_remote_assistance": "No",
        },
        "response_quality": {
            "is_clear": "Yes",
            "is_concise": "yes",
            "is_understandable": "YES",
            "is_relevant": "Yes",
            "overall_quality_score": "EXCELLENT",
        },
        "user_experience": {"level": 5},
        "user_effort": {"level": 1},
    }


class FakeAnalysisService:
    """Analysis service returning canned results per session id.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[str] = []

    async def analyze(self, *, session_id: str) -> dict[str, Any]:
        self.calls.append(session_id)
        response = self.responses.get(session_id)
        if response is None:
            raise AnalysisServiceError(f"No analysis for {session_id}")
        if isinstance(response, Exception):
            raise response
        return response


class InMemorySessionStore:
    """Session store over a fixed list of records."""

    def __init__(self, records: list[dict[str, Any]], error: Exception | None = None):
        self.records = records
        self.error = error
        self.windows: list[DateWindow] = []

    async def find_sessions(self, *, window: DateWindow) -> list[dict[str, Any]]:
        self.windows.append(window)
        if self.error is not None:
            raise self.error
        return list(self.records)


class RecordingPacer:
    """Pacer that records when it was awaited relative to analysis calls."""

    def __init__(self, service: FakeAnalysisService | None = None):
        self.service = service
        self.waits: list[int] = []

    async def wait(self) -> None:
        self.waits.append(len(self.service.calls) if self.service else 0)


@pytest.fixture
def fake_service():
    return FakeAnalysisService


@pytest.fixture
def memory_store():
    return InMemorySessionStore


@pytest.fixture
def recording_pacer():
    return RecordingPacer
