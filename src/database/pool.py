"""Bounded Oracle connection pool with admission control."""

import asyncio
import logging
from typing import Any, Dict, Optional

import oracledb

from core.config import DatabaseConfig, PoolConfig
from core.exceptions import AcquireTimeoutError, PoolClosedError, PoolInitError

logger = logging.getLogger(__name__)

# Driver error raised when its own pool wait expires
DRIVER_POOL_TIMEOUT_CODE = "DPY-4005"

CHECK_SQL = "SELECT 1 FROM DUAL"


def _is_driver_pool_timeout(error: Exception) -> bool:
    error_obj = error.args[0] if error.args else None
    return getattr(error_obj, "full_code", None) == DRIVER_POOL_TIMEOUT_CODE


class ConnectionPool:
    """
    Async connection pool over python-oracledb.

    Live connections stay within [min_size, max_size]. Callers beyond
    max_size wait on an admission semaphore for at most acquire_timeout_ms
    and then fail with AcquireTimeoutError, which is distinct from any
    statement error.

    Note: Call initialize() after creation to open the pool.
    """

    def __init__(self, config: DatabaseConfig, pool_config: Optional[PoolConfig] = None):
        self.config = config
        self.pool_config = pool_config or PoolConfig.from_env()
        self._pool = None
        self._slots = asyncio.Semaphore(self.pool_config.max_size)
        self._initialized = False
        self._closed = False

    def _create_driver_pool(self):
        """Create the python-oracledb async pool."""
        # CLOBs as str and BLOBs as bytes, so rows serialize directly
        oracledb.defaults.fetch_lobs = False

        return oracledb.create_pool_async(
            user=self.config.user,
            password=self.config.password,
            dsn=self.config.dsn,
            min=self.pool_config.min_size,
            max=self.pool_config.max_size,
            increment=self.pool_config.increment,
            timeout=self.pool_config.idle_timeout_seconds,
            wait_timeout=self.pool_config.acquire_timeout_ms,
            getmode=oracledb.POOL_GETMODE_TIMEDWAIT
        )

    async def initialize(self):
        """
        Open the pool and check one connection.

        Raises:
            PoolInitError: If the pool cannot be created or the database is unreachable
        """
        if self._initialized:
            logger.warning("ConnectionPool already initialized")
            return

        try:
            self._pool = self._create_driver_pool()
            connection = await self._pool.acquire()
            try:
                await connection.execute(CHECK_SQL)
            finally:
                await self._pool.release(connection)
        except Exception as e:
            logger.error(f"Failed to initialize Oracle connection pool: {e}")
            if self._pool is not None:
                try:
                    await self._pool.close(force=True)
                except Exception as close_error:
                    logger.warning(f"Error closing half-open pool: {close_error}")
                self._pool = None
            raise PoolInitError(
                f"Error creating connection pool: {e}",
                {"dsn": self.config.dsn, "user": self.config.user}
            ) from e

        self._initialized = True
        logger.info(
            f"Oracle connection pool created successfully "
            f"(dsn={self.config.dsn}, min={self.pool_config.min_size}, max={self.pool_config.max_size})"
        )

    async def acquire(self) -> Any:
        """
        Borrow a connection, waiting up to acquire_timeout_ms.

        Raises:
            PoolClosedError: If the pool is not open
            AcquireTimeoutError: If no connection became available in time
        """
        if self._closed or self._pool is None:
            raise PoolClosedError("Connection pool is not open")

        timeout = self.pool_config.acquire_timeout_seconds
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out after {self.pool_config.acquire_timeout_ms}ms waiting for a connection")
            raise AcquireTimeoutError(
                f"Timed out after {self.pool_config.acquire_timeout_ms}ms waiting for a database connection",
                {"max_size": self.pool_config.max_size}
            )

        try:
            return await self._pool.acquire()
        except Exception as e:
            self._slots.release()
            if _is_driver_pool_timeout(e):
                raise AcquireTimeoutError(
                    f"Timed out after {self.pool_config.acquire_timeout_ms}ms waiting for a database connection",
                    {"max_size": self.pool_config.max_size}
                ) from e
            raise

    async def release(self, connection: Any):
        """Return a connection to the pool. The admission slot is freed even if the driver fails."""
        try:
            await self._pool.release(connection)
        finally:
            self._slots.release()

    def stats(self) -> Dict[str, Any]:
        """Current pool occupancy."""
        if self._pool is None:
            return {"opened": 0, "busy": 0, "max_size": self.pool_config.max_size}
        return {
            "opened": self._pool.opened,
            "busy": self._pool.busy,
            "max_size": self.pool_config.max_size
        }

    async def close(self):
        """Close the pool and all of its connections."""
        if self._pool is not None and not self._closed:
            await self._pool.close(force=True)
            logger.info("Oracle connection pool closed")
        self._closed = True
        self._initialized = False

    @classmethod
    async def create_and_initialize(
        cls,
        config: DatabaseConfig,
        pool_config: Optional[PoolConfig] = None
    ) -> "ConnectionPool":
        """Factory method to create and open a pool."""
        pool = cls(config, pool_config)
        await pool.initialize()
        return pool
