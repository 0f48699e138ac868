"""Per-operation transaction policies."""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

READ_ONLY_SQL = "SET TRANSACTION READ ONLY"


class TransactionPolicy(Enum):
    """How a borrowed connection runs an operation's statements."""
    READ_ONLY = "read_only"      # read-only transaction, always rolled back
    AUTOCOMMIT = "autocommit"    # every statement commits on success


@asynccontextmanager
async def transaction_scope(connection: Any, policy: TransactionPolicy):
    """Configure ``connection`` for ``policy`` around the enclosed statements.

    READ_ONLY does not trust the caller's SQL to be read-only: the session is
    put in a read-only transaction and rolled back on the way out whatever
    happened, which also releases locks taken by dictionary lookups. A failing
    rollback is logged and never masks the primary result.

    AUTOCOMMIT commits each statement as it succeeds; nothing spans statements.
    """
    if policy is TransactionPolicy.READ_ONLY:
        connection.autocommit = False
        try:
            await connection.execute(READ_ONLY_SQL)
            yield connection
        finally:
            try:
                await connection.rollback()
            except Exception as e:
                logger.warning(f"Error during rollback: {e}")
    else:
        connection.autocommit = True
        yield connection
