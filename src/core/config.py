"""Configuration management for the Oracle MCP server."""

import os
import re
from typing import Optional
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from core.exceptions import ConfigurationError


def _load_env_file():
    """Load .env from ENV_FILE_PATH, the working directory or the project root."""
    explicit = os.getenv("ENV_FILE_PATH")
    candidates = [Path(explicit)] if explicit else []
    candidates += [Path.cwd() / ".env", Path(__file__).parent.parent.parent / ".env"]

    for env_path in candidates:
        if env_path.exists():
            load_dotenv(str(env_path), override=False)
            return
    load_dotenv()


_load_env_file()

CONNECTION_STRING_FORMAT = "user/password@host:port/service_name"
RESOURCE_SCHEME = "oracle"

# Greedy password group: the last '@' separates credentials from the host
_CONNECTION_STRING_PATTERN = re.compile(r"^(.+)/(.+)@(.+):(\d+)/(.+)$")


class DatabaseConfig(BaseModel):
    """Oracle connection target and credentials."""

    user: str = Field(description="Database username")
    password: str = Field(description="Database password", repr=False)
    host: str = Field(description="Database server hostname or IP")
    port: int = Field(default=1521, description="Listener port")
    service_name: str = Field(description="Oracle service name")

    @classmethod
    def from_connection_string(cls, connection_string: Optional[str]) -> "DatabaseConfig":
        """Parse a ``user/password@host:port/service_name`` descriptor.

        Raises:
            ConfigurationError: If the descriptor is missing or malformed
        """
        if not connection_string:
            raise ConfigurationError(
                "Please provide a database connection string",
                {"format": CONNECTION_STRING_FORMAT}
            )

        match = _CONNECTION_STRING_PATTERN.match(connection_string.strip())
        if not match:
            raise ConfigurationError(
                f"Invalid connection string format. Use: {CONNECTION_STRING_FORMAT}",
                {"format": CONNECTION_STRING_FORMAT}
            )

        user, password, host, port, service_name = match.groups()
        return cls(
            user=user,
            password=password,
            host=host,
            port=int(port),
            service_name=service_name
        )

    @property
    def dsn(self) -> str:
        """Easy Connect string used by the driver."""
        return f"{self.host}:{self.port}/{self.service_name}"

    @property
    def resource_base_url(self) -> str:
        """Base URI for table resources. Never embeds the password."""
        return f"{RESOURCE_SCHEME}://{self.user}@{self.host}:{self.port}/{self.service_name}/"


class PoolConfig(BaseModel):
    """Connection pool sizing and timeouts."""

    min_size: int = 1
    max_size: int = 5
    increment: int = 1
    idle_timeout_seconds: int = 60  # 0 keeps idle connections open
    acquire_timeout_ms: int = 60000

    def __init__(self, **data):
        super().__init__(**data)
        if self.min_size < 1 or self.max_size < self.min_size:
            raise ConfigurationError(
                f"Invalid pool sizing: min={self.min_size}, max={self.max_size}",
                {"min_size": self.min_size, "max_size": self.max_size}
            )
        if self.increment < 1:
            raise ConfigurationError(f"Invalid pool increment: {self.increment}")
        if self.idle_timeout_seconds < 0:
            raise ConfigurationError(
                f"Pool idle timeout cannot be negative: {self.idle_timeout_seconds}",
                {"idle_timeout_seconds": self.idle_timeout_seconds}
            )
        if self.acquire_timeout_ms <= 0:
            raise ConfigurationError(
                f"Pool acquire timeout must be positive: {self.acquire_timeout_ms}",
                {"acquire_timeout_ms": self.acquire_timeout_ms}
            )

    @classmethod
    def from_env(cls) -> "PoolConfig":
        """Create pool configuration from environment variables."""
        return cls(
            min_size=int(os.getenv("DB_POOL_MIN", "1")),
            max_size=int(os.getenv("DB_POOL_MAX", "5")),
            increment=int(os.getenv("DB_POOL_INCREMENT", "1")),
            idle_timeout_seconds=int(os.getenv("DB_POOL_IDLE_TIMEOUT", "60")),
            acquire_timeout_ms=int(os.getenv("DB_POOL_ACQUIRE_TIMEOUT_MS", "60000"))
        )

    @property
    def acquire_timeout_seconds(self) -> float:
        return self.acquire_timeout_ms / 1000.0


class QueryConfig(BaseModel):
    """Row caps and statement limits."""

    max_query_rows: int = 1000      # Hard ceiling for the query tool
    max_table_rows: int = 1000      # Upper bound for get_table_data's limit
    max_query_length: int = 50000   # Maximum SQL text length in characters

    @classmethod
    def from_env(cls) -> "QueryConfig":
        """Create query configuration from environment variables."""
        return cls(
            max_query_rows=int(os.getenv("MAX_QUERY_ROWS", "1000")),
            max_table_rows=int(os.getenv("MAX_TABLE_ROWS", "1000")),
            max_query_length=int(os.getenv("MAX_QUERY_LENGTH", "50000"))
        )


class HTTPConfig(BaseModel):
    """HTTP server configuration including rate limiting and CORS."""

    rate_limit_default: str = Field(
        default="100/minute",
        description="Default rate limit for all endpoints"
    )
    rate_limit_tools: str = Field(
        default="30/minute",
        description="Rate limit for tool invocation endpoints"
    )
    cors_preflight_max_age: int = Field(
        default=600,
        description="CORS preflight max age in seconds"
    )

    @classmethod
    def from_env(cls) -> "HTTPConfig":
        """Create HTTP configuration from environment variables."""
        return cls(
            rate_limit_default=os.getenv("RATE_LIMIT_DEFAULT", "100/minute"),
            rate_limit_tools=os.getenv("RATE_LIMIT_TOOLS", "30/minute"),
            cors_preflight_max_age=int(os.getenv("CORS_PREFLIGHT_MAX_AGE", "600"))
        )


class AppConfig(BaseModel):
    """Application configuration combining all configs."""

    database: DatabaseConfig
    pool_config: PoolConfig
    query_config: QueryConfig
    http_config: HTTPConfig
    server_name: str = Field(default="oracle-mcp-server", description="MCP server name identifier")
    server_version: str = Field(default="0.1.0", description="MCP server version")

    @classmethod
    def from_env(cls, database: DatabaseConfig) -> "AppConfig":
        """Create full application configuration.

        The database part comes from the command line; everything else
        comes from environment variables.
        """
        return cls(
            database=database,
            pool_config=PoolConfig.from_env(),
            query_config=QueryConfig.from_env(),
            http_config=HTTPConfig.from_env(),
            server_name=os.getenv("MCP_SERVER_NAME", "oracle-mcp-server")
        )
