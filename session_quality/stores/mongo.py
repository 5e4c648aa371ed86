"""MongoDB-backed session store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from ..constants import (
    DEFAULT_MONGODB_COLLECTION,
    DEFAULT_MONGODB_DATABASE,
    LogMessage,
)
from ..dates import DateWindow
from ..exceptions import RetrievalError
from .base import build_date_filter


class MongoSessionStore:
    """Reads chat sessions from a MongoDB collection.

    The store wraps a collection handle and keeps no state between queries.
    Use ``MongoSessionStore.connect`` to scope a client to one run, or build
    the store directly around a collection from an externally managed client.

    Attributes:
        collection: Async collection holding the chat session documents.
    """

    def __init__(self, *, collection: Any):
        self.collection = collection

    @classmethod
    @asynccontextmanager
    async def connect(
        cls,
        *,
        uri: str,
        database: str = DEFAULT_MONGODB_DATABASE,
        collection: str = DEFAULT_MONGODB_COLLECTION,
    ) -> AsyncIterator["MongoSessionStore"]:
        """Open a client, verify it with a ping, and close it on exit.

        Args:
            uri: MongoDB connection string.
            database: Database holding the sessions.
            collection: Collection holding the sessions.

        Yields:
            MongoSessionStore: Store bound to the requested collection.

        Raises:
            RetrievalError: If the client cannot be created or the ping fails.
        """
        logger.info(LogMessage.CONNECTING_STORE)
        try:
            client: AsyncMongoClient = AsyncMongoClient(uri)
        except PyMongoError as e:
            raise RetrievalError(f"Failed to connect to MongoDB: {e}") from e

        try:
            try:
                await client.admin.command("ping")
            except PyMongoError as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise RetrievalError(f"Failed to connect to MongoDB: {e}") from e

            logger.success(LogMessage.CONNECTED_STORE)
            logger.debug(f"Using database '{database}', collection '{collection}'")
            yield cls(collection=client[database][collection])
        finally:
            await client.close()
            logger.info(LogMessage.STORE_CLOSED)

    async def find_sessions(self, *, window: DateWindow) -> list[dict[str, Any]]:
        """Return every session whose timestamp aliases fall inside the window.

        Args:
            window: Inclusive UTC window.

        Returns:
            list[dict[str, Any]]: Matching session documents in natural order.

        Raises:
            RetrievalError: If the query fails.
        """
        query = build_date_filter(window)
        logger.debug(f"Using filter: {query}")

        try:
            cursor = self.collection.find(query)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error querying database: {e}")
            raise RetrievalError(f"Error querying database: {e}") from e
