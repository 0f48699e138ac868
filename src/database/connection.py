"""Scoped connection borrowing."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, TypeVar

from database.pool import ConnectionPool

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionBorrower:
    """
    The only way handlers get a connection.

    One connection per logical operation; it goes back to the pool on every
    exit path. A failing release is logged and never replaces the outcome of
    the operation itself.
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    @asynccontextmanager
    async def borrow(self):
        """Get a connection from the pool for the duration of the block."""
        connection = await self.pool.acquire()
        try:
            yield connection
        finally:
            try:
                await self.pool.release(connection)
            except Exception as e:
                logger.error(f"Error closing connection: {e}")

    async def with_connection(self, fn: Callable[[Any], Awaitable[T]]) -> T:
        """Run ``fn`` with a borrowed connection and return its result."""
        async with self.borrow() as connection:
            return await fn(connection)
