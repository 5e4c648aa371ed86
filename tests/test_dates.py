"""Tests for date parsing and UTC windows."""

from datetime import datetime, timedelta, timezone

import pytest

from session_quality.dates import date_range_window, day_window, format_utc, parse_date
from session_quality.exceptions import ValidationError


class TestParseDate:
    """Tests for parse_date."""

    def test_returns_midnight_utc(self) -> None:
        assert parse_date("2025-03-20") == datetime(2025, 3, 20, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "value", [None, "", "20-03-2025", "2025/03/20", "2025-3-20", "yesterday"]
    )
    def test_rejects_malformed_input(self, value) -> None:
        with pytest.raises(ValidationError):
            parse_date(value)

    def test_rejects_impossible_calendar_date(self) -> None:
        with pytest.raises(ValidationError, match="2025-02-30"):
            parse_date("2025-02-30")


class TestDayWindow:
    """Tests for single-day windows."""

    def test_window_bounds(self) -> None:
        window = day_window("2025-03-20")

        assert window.describe() == (
            "2025-03-20T00:00:00.000Z",
            "2025-03-20T23:59:59.999Z",
        )

    def test_contains_is_inclusive(self) -> None:
        window = day_window("2025-03-20")

        assert window.contains(window.start)
        assert window.contains(window.end)
        assert not window.contains(window.start - timedelta(milliseconds=1))
        assert not window.contains(window.end + timedelta(milliseconds=1))

    def test_naive_moments_are_utc(self) -> None:
        window = day_window("2025-03-20")

        assert window.contains(datetime(2025, 3, 20, 12, 0))
        assert not window.contains(datetime(2025, 3, 21, 0, 0))


class TestDateRangeWindow:
    """Tests for multi-day windows."""

    def test_spans_both_days(self) -> None:
        window = date_range_window("2025-03-18", "2025-03-20")

        assert window.describe() == (
            "2025-03-18T00:00:00.000Z",
            "2025-03-20T23:59:59.999Z",
        )

    def test_rejects_reversed_range(self) -> None:
        with pytest.raises(ValidationError, match="before start date"):
            date_range_window("2025-03-20", "2025-03-19")

    def test_rejects_malformed_end(self) -> None:
        with pytest.raises(ValidationError):
            date_range_window("2025-03-20", "soon")


class TestFormatUtc:
    """Tests for format_utc."""

    def test_converts_offsets_to_utc(self) -> None:
        moment = datetime(2025, 3, 20, 2, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_utc(moment) == "2025-03-20T00:00:00.000Z"
