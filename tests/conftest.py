"""
pytest configuration

Puts src/ on the path, loads .env, and wires the dispatcher to the in-memory
driver stand-ins from fakes.py so it can be exercised without a database.
"""

import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(Path(__file__).parent))

load_dotenv()

from core.config import AppConfig, DatabaseConfig, HTTPConfig, PoolConfig, QueryConfig  # noqa: E402
from database.pool import ConnectionPool  # noqa: E402
from fakes import FakeConnection, FakeDriverPool  # noqa: E402


@pytest.fixture
def db_config():
    return DatabaseConfig(
        user="scott",
        password="tiger",
        host="localhost",
        port=1521,
        service_name="XEPDB1"
    )


@pytest.fixture
def pool_config():
    return PoolConfig(min_size=1, max_size=2, increment=1, idle_timeout_seconds=60, acquire_timeout_ms=200)


@pytest.fixture
def app_config(db_config, pool_config):
    return AppConfig(
        database=db_config,
        pool_config=pool_config,
        query_config=QueryConfig(max_query_rows=1000, max_table_rows=100),
        http_config=HTTPConfig()
    )


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def driver_pool(fake_connection):
    return FakeDriverPool(fake_connection)


@pytest.fixture
def pool(db_config, pool_config, driver_pool):
    """ConnectionPool attached to the fake driver pool (as if initialize() ran)."""
    connection_pool = ConnectionPool(db_config, pool_config)
    connection_pool._pool = driver_pool
    connection_pool._initialized = True
    return connection_pool


@pytest.fixture
def components(pool, app_config):
    from main import build_components
    return build_components(pool, app_config)


@pytest.fixture
def registry(components):
    return components[0]


@pytest.fixture
def introspector(components):
    return components[1]
