"""Date input parsing and UTC day windows."""

import re
from dataclasses import dataclass
from datetime import datetime, time, timezone

from loguru import logger

from .constants import DATE_FORMAT, LogMessage
from .exceptions import ValidationError

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive UTC retrieval window.

    Attributes:
        start: Midnight UTC of the first day.
        end: 23:59:59.999 UTC of the last day.
    """

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        """Return True if ``moment`` falls inside the window (both ends inclusive)."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return self.start <= moment <= self.end

    def describe(self) -> tuple[str, str]:
        """Return the window bounds as millisecond-precision ISO strings."""
        return format_utc(self.start), format_utc(self.end)


def format_utc(moment: datetime) -> str:
    """Format a UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_date(date_str: str | None) -> datetime:
    """Parse a ``YYYY-MM-DD`` string into midnight UTC of that day.

    Raises:
        ValidationError: If the value is missing, not in ``YYYY-MM-DD`` form,
            or not a real calendar date.
    """
    logger.debug(LogMessage.PARSING_DATE.format(date_str))

    if not date_str or not isinstance(date_str, str):
        raise ValidationError("Date parameter is required (YYYY-MM-DD).")

    if not _DATE_PATTERN.match(date_str):
        raise ValidationError(
            f"Invalid date format '{date_str}'. Please use YYYY-MM-DD format."
        )

    try:
        parsed = datetime.strptime(date_str, DATE_FORMAT)
    except ValueError as e:
        raise ValidationError(f"Invalid date '{date_str}': {e}") from e

    return parsed.replace(tzinfo=timezone.utc)


def day_window(date_str: str) -> DateWindow:
    """Build the inclusive UTC window covering a single day."""
    return date_range_window(date_str, date_str)


def date_range_window(start_date: str, end_date: str) -> DateWindow:
    """Build the inclusive UTC window from the start of one day to the end of another.

    Args:
        start_date: First day, ``YYYY-MM-DD``.
        end_date: Last day, ``YYYY-MM-DD``.

    Returns:
        DateWindow: ``[start_date 00:00:00.000Z, end_date 23:59:59.999Z]``.

    Raises:
        ValidationError: If either date is malformed or the range is reversed.
    """
    start_day = parse_date(start_date)
    end_day = parse_date(end_date)

    if end_day < start_day:
        raise ValidationError(
            f"End date {end_date} is before start date {start_date}."
        )

    window = DateWindow(
        start=start_day,
        end=datetime.combine(end_day.date(), _END_OF_DAY, tzinfo=timezone.utc),
    )
    logger.info(LogMessage.DATE_WINDOW.format(*window.describe()))
    return window
