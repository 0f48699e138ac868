"""
Tool registry unit tests

Catalog exposure and the dispatch pipeline: validation, borrowing,
transaction policy and normalization.
"""

import asyncio

import pytest

from core.error_handling import POOL_EXHAUSTED_SUGGESTION, envelope_payload
from core.exceptions import UnknownOperationError
from database.transaction import READ_ONLY_SQL, TransactionPolicy
from tools.definitions import ALL_TOOL_NAMES
from fakes import FakeResult, ora_error


class TestToolCatalog:
    """Tool listing"""

    def test_all_tools_registered(self, registry):
        """✅ Six tools in catalog order"""
        tools = registry.list_tools()

        assert [tool.name for tool in tools] == list(ALL_TOOL_NAMES)
        assert [tool.name for tool in tools] == [
            "query",
            "execute",
            "check_user_exists",
            "create_user",
            "grant_privileges",
            "get_table_data",
        ]

    def test_input_schemas(self, registry):
        """✅ Required arguments and defaults are declared"""
        tools = {tool.name: tool for tool in registry.list_tools()}

        create_user = tools["create_user"].inputSchema
        assert create_user["required"] == ["username", "password"]
        assert create_user["properties"]["tablespace"]["default"] == "USERS"
        assert create_user["properties"]["tempTablespace"]["default"] == "TEMP"

        grant = tools["grant_privileges"].inputSchema
        assert grant["properties"]["privileges"] == {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of privileges to grant (e.g. CREATE SESSION, CREATE TABLE)",
        }

        table_data = tools["get_table_data"].inputSchema
        assert table_data["required"] == ["tableName"]
        assert table_data["properties"]["limit"] == {"type": "number", "default": 10}

    def test_policies(self, registry):
        """✅ Read operations run read-only, write operations autocommit"""
        policies = {name: handler.policy for name, handler in registry.handlers.items()}

        assert policies["query"] is TransactionPolicy.READ_ONLY
        assert policies["get_table_data"] is TransactionPolicy.READ_ONLY
        assert policies["execute"] is TransactionPolicy.AUTOCOMMIT
        assert policies["create_user"] is TransactionPolicy.AUTOCOMMIT
        assert policies["grant_privileges"] is TransactionPolicy.AUTOCOMMIT

    def test_is_tool_registered(self, registry):
        """✅ Lookup by name"""
        assert registry.is_tool_registered("query") is True
        assert registry.is_tool_registered("drop_database") is False


class TestDispatch:
    """Dispatch pipeline"""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry, driver_pool):
        """❌ Unknown names raise instead of producing an envelope"""
        with pytest.raises(UnknownOperationError) as exc_info:
            await registry.dispatch("drop_database", {})

        assert "Unknown tool: drop_database" in exc_info.value.message
        assert driver_pool.acquired == 0

    @pytest.mark.asyncio
    async def test_validation_failure_borrows_nothing(self, registry, driver_pool):
        """❌ Invalid arguments are rejected before a connection is borrowed"""
        envelope = await registry.dispatch("query", {})
        payload = envelope_payload(envelope)

        assert envelope["isError"] is True
        assert payload["errorType"] == "ArgumentValidationError"
        assert "Missing required argument 'sql'" in payload["error"]
        assert payload["suggestion"] == registry.handlers["query"].suggestion
        assert driver_pool.acquired == 0

    @pytest.mark.asyncio
    async def test_none_arguments(self, registry, driver_pool):
        """❌ Missing arguments object behaves like an empty one"""
        envelope = await registry.dispatch("check_user_exists", None)

        assert envelope["isError"] is True
        assert driver_pool.acquired == 0

    @pytest.mark.asyncio
    async def test_connection_released_after_success(self, registry, driver_pool):
        """✅ Exactly one borrow and one release per call"""
        await registry.dispatch("execute", {"sql": "INSERT INTO t VALUES (1)"})

        assert driver_pool.acquired == 1
        assert driver_pool.released == 1
        assert driver_pool.busy == 0

    @pytest.mark.asyncio
    async def test_connection_released_after_failure(self, registry, driver_pool, fake_connection):
        """✅ Connection returned when the statement fails"""
        fake_connection.when("FROM MISSING", ora_error(942, "table or view does not exist"))

        envelope = await registry.dispatch("query", {"sql": "SELECT * FROM missing"})

        assert envelope["isError"] is True
        assert driver_pool.released == 1
        assert driver_pool.busy == 0

    @pytest.mark.asyncio
    async def test_release_failure_keeps_result(self, registry, driver_pool, fake_connection):
        """✅ A failing release does not replace the envelope"""
        driver_pool.fail_release = True
        fake_connection.when("FROM DUAL", FakeResult(rows=[{"X": 1}]))

        envelope = await registry.dispatch("query", {"sql": "SELECT 1 AS x FROM dual"})

        assert envelope["isError"] is False
        assert envelope_payload(envelope) == [{"X": 1}]

    @pytest.mark.asyncio
    async def test_read_only_policy_applied(self, registry, fake_connection):
        """✅ Read operations run inside a read-only transaction that is rolled back"""
        await registry.dispatch("query", {"sql": "SELECT 1 FROM dual"})

        assert fake_connection.statements()[0] == READ_ONLY_SQL
        assert fake_connection.rollbacks == 1

    @pytest.mark.asyncio
    async def test_write_rejected_by_read_only_transaction(self, registry, fake_connection):
        """❌ Writes through query fail with the database's read-only error"""
        fake_connection.when(
            "DELETE FROM EMP", ora_error(1456, "may not perform insert/delete/update operation inside a READ ONLY transaction")
        )

        envelope = await registry.dispatch("query", {"sql": "DELETE FROM emp"})
        payload = envelope_payload(envelope)

        assert envelope["isError"] is True
        assert payload["errorCode"] == 1456
        assert fake_connection.rollbacks == 1

    @pytest.mark.asyncio
    async def test_pool_exhausted(self, registry, pool):
        """❌ Pool exhaustion is reported distinctly"""
        held = [await pool.acquire(), await pool.acquire()]

        envelope = await registry.dispatch("query", {"sql": "SELECT 1 FROM dual"})
        payload = envelope_payload(envelope)

        assert envelope["isError"] is True
        assert payload["errorType"] == "AcquireTimeoutError"
        assert payload["suggestion"] == POOL_EXHAUSTED_SUGGESTION

        for connection in held:
            await pool.release(connection)

    @pytest.mark.asyncio
    async def test_closed_pool(self, registry, pool):
        """❌ Calls after shutdown produce an error envelope"""
        await pool.close()

        envelope = await registry.dispatch("query", {"sql": "SELECT 1 FROM dual"})

        assert envelope["isError"] is True
        assert envelope_payload(envelope)["errorType"] == "PoolClosedError"

    @pytest.mark.asyncio
    async def test_concurrent_calls_release_every_connection(self, registry, driver_pool, fake_connection):
        """✅ Concurrent calls beyond max_size all complete and release once each"""
        fake_connection.when("FROM FAILS", ora_error(942, "table or view does not exist"))
        calls = [
            registry.dispatch("query", {"sql": "SELECT 1 FROM dual"}),
            registry.dispatch("query", {"sql": "SELECT * FROM fails"}),
            registry.dispatch("execute", {"sql": "UPDATE emp SET sal = sal"}),
            registry.dispatch("check_user_exists", {"username": "scott"}),
            registry.dispatch("query", {"sql": "SELECT 2 FROM dual"}),
        ]

        envelopes = await asyncio.gather(*calls)

        assert [envelope["isError"] for envelope in envelopes] == [False, True, False, False, False]
        assert driver_pool.acquired == 5
        assert driver_pool.released == 5
        assert driver_pool.busy == 0
