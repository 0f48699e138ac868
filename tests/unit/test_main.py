"""
Entry point unit tests

Argument parsing, startup failures and wiring of the components.
"""

from unittest.mock import AsyncMock, patch

import pytest

import main
from core.config import CONNECTION_STRING_FORMAT
from core.exceptions import PoolInitError
from database.introspector import OracleSchemaIntrospector
from tools.registry import ToolRegistry


class TestParseArgs:
    """Command line"""

    def test_stdio_default(self):
        """✅ Positional descriptor, STDIO mode by default"""
        args = main.parse_args(["scott/tiger@localhost:1521/XEPDB1"])

        assert args.connection_string == "scott/tiger@localhost:1521/XEPDB1"
        assert args.http is False

    def test_http_options(self):
        """✅ HTTP mode with host and port"""
        args = main.parse_args(["scott/tiger@localhost:1521/XEPDB1", "--http", "--host", "0.0.0.0", "--port", "9000"])

        assert args.http is True
        assert args.host == "0.0.0.0"
        assert args.port == 9000


class TestMain:
    """Startup"""

    def test_missing_descriptor_exits(self, capsys):
        """❌ No descriptor prints the expected format and exits nonzero"""
        with pytest.raises(SystemExit) as exc_info:
            main.main([])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Please provide a database connection string" in err
        assert f"Format: {CONNECTION_STRING_FORMAT}" in err

    def test_malformed_descriptor_exits(self, capsys):
        """❌ Malformed descriptor"""
        with pytest.raises(SystemExit) as exc_info:
            main.main(["not-a-descriptor"])

        assert exc_info.value.code == 1
        assert "Invalid connection string format" in capsys.readouterr().err

    def test_stdio_mode_started(self):
        """✅ Valid descriptor starts STDIO mode"""
        with patch.object(main, "run_stdio_mode", new_callable=AsyncMock) as run_stdio:
            main.main(["scott/tiger@localhost:1521/XEPDB1"])

        app_config = run_stdio.call_args.args[0]
        assert app_config.database.user == "scott"
        assert app_config.database.service_name == "XEPDB1"

    def test_http_mode_started(self, monkeypatch):
        """✅ --http starts HTTP mode on the default address"""
        monkeypatch.delenv("HTTP_HOST", raising=False)
        monkeypatch.delenv("HTTP_PORT", raising=False)

        with patch.object(main, "run_http_mode", new_callable=AsyncMock) as run_http:
            main.main(["scott/tiger@localhost:1521/XEPDB1", "--http"])

        _, host, port = run_http.call_args.args
        assert host == "127.0.0.1"
        assert port == 8000

    @pytest.mark.asyncio
    async def test_unreachable_database_exits(self, app_config):
        """❌ Pool initialization failure is fatal"""
        failing = AsyncMock(side_effect=PoolInitError("Error creating connection pool: ORA-12541"))

        with patch.object(main.ConnectionPool, "create_and_initialize", failing):
            with pytest.raises(SystemExit) as exc_info:
                await main.open_pool(app_config)

        assert exc_info.value.code == 1


class TestBuildComponents:
    """Composition root"""

    def test_components_share_pool(self, pool, app_config):
        """✅ Registry and introspector borrow from the same pool"""
        registry, introspector = main.build_components(pool, app_config)

        assert isinstance(registry, ToolRegistry)
        assert isinstance(introspector, OracleSchemaIntrospector)
        assert registry.borrower.pool is pool
        assert introspector.borrower.pool is pool
        assert registry.context.introspector is introspector
        assert introspector.resource_base_url == "oracle://scott@localhost:1521/XEPDB1/"
