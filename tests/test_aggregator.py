"""Tests for batch aggregation."""

import pytest

from session_quality.aggregator import aggregate_results, distribution, percentage
from session_quality.models import ScoreBreakdown, SessionResult


def _scored(session_id: str, analysis: dict) -> SessionResult:
    return SessionResult.success(
        session_id=session_id,
        analysis=analysis,
        score=ScoreBreakdown(factors={}, total_score=50.0),
    )


class TestPercentage:
    """Tests for percentage rounding."""

    @pytest.mark.parametrize(
        ("count", "total", "expected"),
        [(1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 2, 50), (0, 5, 0), (3, 0, 0)],
    )
    def test_rounds_half_up(self, count, total, expected) -> None:
        assert percentage(count, total) == expected


class TestDistribution:
    """Tests for distribution."""

    def test_rounding_surplus_is_taken_back(self) -> None:
        assert distribution({"a": 3, "b": 3, "c": 2}, 8) == {"a": 38, "b": 37, "c": 25}

    def test_yes_no_surplus_is_taken_back(self) -> None:
        assert distribution({"yes": 3, "no": 5}, 8) == {"yes": 38, "no": 62}

    def test_keeps_half_up_values_without_surplus(self) -> None:
        assert distribution({"a": 1, "b": 1}, 3) == {"a": 33, "b": 33}

    def test_empty(self) -> None:
        assert distribution({}, 0) == {}


class TestAggregateResults:
    """Tests for aggregate_results."""

    def test_empty_batch(self) -> None:
        stats = aggregate_results([])

        assert stats.sessions_analyzed == 0
        assert stats.user_sentiment == {}
        assert stats.bot_tone == {}
        assert stats.accuracy_level == {}
        assert stats.issue_resolution == {}
        assert stats.chat_completion == {"yes": 0, "no": 0}
        assert stats.remote_assistance_required == {"yes": 0, "no": 0}
        assert stats.human_escalation == {"yes": 0, "no": 0}
        assert stats.average_experience_level == 0
        assert stats.average_effort_level == 0

    def test_only_failures_behaves_like_empty(self) -> None:
        stats = aggregate_results(
            [SessionResult.failure(session_id="a", error="HTTP 500")]
        )

        assert stats == aggregate_results([])

    def test_distributions(self) -> None:
        results = [
            _scored(
                "a",
                {
                    "is_chat_completed": "yes",
                    "user_sentiment": {"sentiment": "positive"},
                    "bot_tone": {"tone": "friendly"},
                    "human_escalation": {"is_escalated": "no"},
                    "conversation_quality": {"requires_remote_assistance": True},
                    "user_experience": {"level": 5},
                    "user_effort": {"level": 1},
                },
            ),
            _scored(
                "b",
                {
                    "is_chat_completed": "no",
                    "user_sentiment": {"sentiment": "positive"},
                    "bot_tone": {"tone": "neutral"},
                    "human_escalation": {"is_escalated": "yes"},
                    "conversation_quality": {"requires_remote_assistance": "no"},
                    "user_experience": {"level": 4},
                },
            ),
            _scored(
                "c",
                {
                    "is_chat_completed": "yes",
                    "user_sentiment": {"sentiment": "frustrated"},
                    "accuracy_level": "partially correct",
                    "issue_status": {"status": "resolved"},
                },
            ),
            SessionResult.failure(session_id="d", error="timeout"),
        ]

        stats = aggregate_results(results)

        assert stats.sessions_analyzed == 3
        assert stats.chat_completion == {"yes": 67, "no": 33}
        assert stats.user_sentiment == {"positive": 67, "frustrated": 33}
        assert stats.bot_tone == {"friendly": 33, "neutral": 33}
        assert stats.human_escalation == {"yes": 33, "no": 33}
        assert stats.remote_assistance_required == {"yes": 33, "no": 33}
        assert stats.accuracy_level == {"partially correct": 33}
        assert stats.issue_resolution == {"resolved": 33}
        assert stats.average_experience_level == 4.5
        assert stats.average_effort_level == 1

    def test_missing_fields_stay_in_denominator(self) -> None:
        results = [
            _scored("a", {"bot_tone": {"tone": "professional"}}),
            _scored("b", {}),
            _scored("c", {}),
            _scored("d", {}),
        ]

        stats = aggregate_results(results)

        assert stats.bot_tone == {"professional": 25}

    def test_exact_shares_sum_to_one_hundred(self) -> None:
        tones = ["professional", "friendly", "neutral", "professional", "friendly"]
        results = [
            _scored(str(i), {"bot_tone": {"tone": tone}})
            for i, tone in enumerate(tones)
        ]

        stats = aggregate_results(results)

        assert stats.bot_tone == {"professional": 40, "friendly": 40, "neutral": 20}
        assert sum(stats.bot_tone.values()) <= 100

    def test_average_rounding(self) -> None:
        results = [
            _scored("a", {"user_experience": {"level": 1}}),
            _scored("b", {"user_experience": {"level": 2}}),
            _scored("c", {"user_experience": {"level": 2}}),
        ]

        assert aggregate_results(results).average_experience_level == 1.67

    def test_to_dict_is_plain_data(self) -> None:
        data = aggregate_results([_scored("a", {"is_chat_completed": "yes"})]).to_dict()

        assert data["sessions_analyzed"] == 1
        assert data["chat_completion"] == {"yes": 100, "no": 0}
        assert data["average_effort_level"] == 0

    def test_tone_distribution_never_exceeds_one_hundred(self) -> None:
        tones = ["professional"] * 3 + ["friendly"] * 3 + ["neutral"] * 2
        results = [
            _scored(str(i), {"bot_tone": {"tone": tone}})
            for i, tone in enumerate(tones)
        ]

        stats = aggregate_results(results)

        assert stats.bot_tone == {"professional": 38, "friendly": 37, "neutral": 25}
        assert sum(stats.bot_tone.values()) == 100

    def test_remote_assistance_is_case_insensitive(self) -> None:
        results = [
            _scored(
                session_id,
                {"conversation_quality": {"requires_remote_assistance": flag}},
            )
            for session_id, flag in (("a", "YES"), ("b", "No"))
        ]

        stats = aggregate_results(results)

        assert stats.remote_assistance_required == {"yes": 50, "no": 50}

    def test_boolean_flags_count_as_yes_no(self) -> None:
        results = [
            _scored("a", {"is_chat_completed": True}),
            _scored("b", {"human_escalation": {"is_escalated": False}}),
        ]

        stats = aggregate_results(results)

        assert stats.chat_completion == {"yes": 50, "no": 0}
        assert stats.human_escalation == {"yes": 0, "no": 50}

    def test_averages_use_valid_levels_only(self) -> None:
        results = [
            _scored("a", {"user_experience": {"level": 5.0}}),
            _scored("b", {"user_experience": {"level": 3}}),
            _scored("c", {"user_experience": {"level": 4.5}}),
            _scored("d", {"user_experience": {"level": True}}),
            _scored("e", {"user_experience": {"level": 9}}),
        ]

        assert aggregate_results(results).average_experience_level == 4
