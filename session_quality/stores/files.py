"""Session store over a directory of exported session JSON files."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from ..dates import DateWindow
from ..exceptions import RetrievalError
from .base import matches_window


class JsonDirectorySessionStore:
    """Reads chat sessions from ``*.json`` files in a directory.

    Each file holds either one session object or a list of them. Files are
    read in name order, so retrieval order is stable between runs.

    Attributes:
        sessions_dir: Directory containing the exported sessions.
    """

    def __init__(self, *, sessions_dir: Path | str):
        self.sessions_dir = Path(sessions_dir)

    def _load_file(self, path: Path) -> list[dict[str, Any]]:
        try:
            with path.open("r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load {path}: {e}")
            return []

        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]

        logger.warning(f"Skipping {path}: expected a session object or a list")
        return []

    async def find_sessions(self, *, window: DateWindow) -> list[dict[str, Any]]:
        """Return every stored session whose timestamp aliases fall inside the window.

        Raises:
            RetrievalError: If the directory does not exist or cannot be listed.
        """
        if not self.sessions_dir.is_dir():
            raise RetrievalError(
                f"Sessions directory {self.sessions_dir} does not exist"
            )

        try:
            files = sorted(self.sessions_dir.glob("*.json"))
        except OSError as e:
            raise RetrievalError(f"Cannot list {self.sessions_dir}: {e}") from e

        logger.debug(f"Scanning {len(files)} session files in {self.sessions_dir}")

        sessions: list[dict[str, Any]] = []
        for path in files:
            sessions.extend(
                record
                for record in self._load_file(path)
                if matches_window(record, window)
            )
        return sessions
