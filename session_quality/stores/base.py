"""Session store protocol and timestamp helpers shared by the stores."""

from datetime import datetime, timezone
from typing import Any, Protocol

from ..constants import TIMESTAMP_FIELD_ALIASES
from ..dates import DateWindow


class SessionStore(Protocol):
    """Anything that can list the chat sessions recorded inside a date window.

    Implementations raise ``RetrievalError`` when the backing store cannot be
    reached or queried. They keep no per-query state, so one store can serve
    several pipeline runs at once.
    """

    async def find_sessions(self, *, window: DateWindow) -> list[dict[str, Any]]: ...


def build_date_filter(window: DateWindow) -> dict[str, Any]:
    """Build a query matching a session if any timestamp alias falls inside the window.

    Args:
        window: Inclusive UTC window.

    Returns:
        dict[str, Any]: MongoDB ``$or`` filter over every timestamp alias.
    """
    return {
        "$or": [
            {alias: {"$gte": window.start, "$lte": window.end}}
            for alias in TIMESTAMP_FIELD_ALIASES
        ]
    }


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings,
    milliseconds since the epoch, and extended-JSON ``{"$date": ...}``
    wrappers. Returns None for anything else.
    """
    if isinstance(value, dict) and "$date" in value:
        value = value["$date"]
        if isinstance(value, dict) and "$numberLong" in value:
            value = value["$numberLong"]

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        return None

    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        if value.isdigit():
            return parse_timestamp(int(value))
        try:
            return parse_timestamp(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None

    return None


def matches_window(record: dict[str, Any], window: DateWindow) -> bool:
    """Return True if any timestamp alias of ``record`` falls inside ``window``."""
    for alias in TIMESTAMP_FIELD_ALIASES:
        moment = parse_timestamp(record.get(alias))
        if moment is not None and window.contains(moment):
            return True
    return False
