"""Session stores for retrieving chat sessions by date."""

from .base import SessionStore, build_date_filter, parse_timestamp
from .files import JsonDirectorySessionStore
from .mongo import MongoSessionStore

__all__ = [
    "JsonDirectorySessionStore",
    "MongoSessionStore",
    "SessionStore",
    "build_date_filter",
    "parse_timestamp",
]
