"""
MCP protocol callback unit tests

Tool calls and table schema resources as seen by an MCP client.
"""

import json

import mcp.types as types
import pytest

from core.exceptions import ResourceNotFoundError, UnknownOperationError
from database.introspector import table_from_resource_uri
from protocol.base_server import BaseMCPServer, envelope_to_result
from fakes import FakeResult

RESOURCE_URI = "oracle://scott@localhost:1521/XEPDB1/EMP/schema"


@pytest.fixture
def mcp_server(registry, introspector, app_config):
    return BaseMCPServer(registry, introspector, app_config)


def script_emp_schema(connection):
    connection.when("SELECT OWNER FROM (", FakeResult(rows=[{"OWNER": "SCOTT"}]))
    connection.when("FROM ALL_TAB_COLUMNS", FakeResult(rows=[
        {"COLUMN_NAME": "EMPNO", "DATA_TYPE": "NUMBER", "NULLABLE": "N", "COLUMN_ID": 1},
        {"COLUMN_NAME": "DEPTNO", "DATA_TYPE": "NUMBER", "NULLABLE": "Y", "COLUMN_ID": 2},
    ]))
    connection.when("CONSTRAINT_TYPE = 'P'", FakeResult(rows=[{"COLUMN_NAME": "EMPNO"}]))
    connection.when("CONSTRAINT_TYPE = 'R'", FakeResult(rows=[{
        "COLUMN_NAME": "DEPTNO",
        "CONSTRAINT_NAME": "FK_DEPTNO",
        "REFERENCED_TABLE": "DEPT",
        "REFERENCED_OWNER": "SCOTT",
    }]))


class TestResourceUri:
    """Resource URI parsing"""

    def test_table_name_extracted(self):
        """✅ Table is the path segment before /schema"""
        assert table_from_resource_uri(RESOURCE_URI) == "EMP"

    def test_lower_case_upper_cased(self):
        """✅ Table names are upper-cased"""
        assert table_from_resource_uri("oracle://scott@localhost:1521/XEPDB1/emp/schema") == "EMP"

    @pytest.mark.parametrize("uri", [
        "oracle://scott@localhost:1521/XEPDB1/EMP",
        "oracle://scott@localhost:1521/XEPDB1/EMP/data",
        "oracle://scott@localhost:1521/schema",
    ])
    def test_invalid_uri(self, uri):
        """❌ URIs not ending in /<TABLE>/schema"""
        with pytest.raises(ResourceNotFoundError):
            table_from_resource_uri(uri)


class TestIntrospector:
    """Schema introspection"""

    @pytest.mark.asyncio
    async def test_list_table_resources(self, introspector, fake_connection, driver_pool):
        """✅ Accessible tables become resources"""
        fake_connection.when("FROM USER_TABLES", FakeResult(rows=[{"TABLE_NAME": "DEPT"}, {"TABLE_NAME": "EMP"}]))

        resources = await introspector.list_table_resources()

        assert resources == [
            {
                "uri": "oracle://scott@localhost:1521/XEPDB1/DEPT/schema",
                "mimeType": "application/json",
                "name": '"DEPT" database schema',
            },
            {
                "uri": "oracle://scott@localhost:1521/XEPDB1/EMP/schema",
                "mimeType": "application/json",
                "name": '"EMP" database schema',
            },
        ]
        assert fake_connection.rollbacks == 1
        assert driver_pool.busy == 0

    @pytest.mark.asyncio
    async def test_describe_table(self, introspector, fake_connection):
        """✅ Columns, primary keys and foreign keys"""
        script_emp_schema(fake_connection)

        info = await introspector.describe_table("emp")

        assert info["tableName"] == "EMP"
        assert info["owner"] == "SCOTT"
        assert [column["COLUMN_NAME"] for column in info["columns"]] == ["EMPNO", "DEPTNO"]
        assert info["primaryKeys"] == ["EMPNO"]
        assert info["foreignKeys"] == [{
            "column": "DEPTNO",
            "constraintName": "FK_DEPTNO",
            "referencedTable": "DEPT",
            "referencedOwner": "SCOTT",
        }]

    @pytest.mark.asyncio
    async def test_describe_binds_owner(self, introspector, fake_connection):
        """✅ Dictionary queries are bound to the resolved owner"""
        script_emp_schema(fake_connection)

        await introspector.describe_table("emp")

        binds = [params for sql, params, _ in fake_connection.executed if "ALL_TAB_COLUMNS" in sql]
        assert binds == [{"tableName": "EMP", "owner": "SCOTT"}]

    @pytest.mark.asyncio
    async def test_describe_missing_table(self, introspector, fake_connection, driver_pool):
        """❌ Invisible table"""
        fake_connection.when("SELECT OWNER FROM (", FakeResult(rows=[], columns=["OWNER"]))

        with pytest.raises(ResourceNotFoundError):
            await introspector.describe_table("nope")

        assert driver_pool.busy == 0


class TestProtocolCallbacks:
    """MCP request handlers"""

    def test_envelope_to_result(self):
        """✅ Envelope maps onto CallToolResult"""
        result = envelope_to_result({
            "content": [{"type": "text", "text": "{}"}],
            "isError": True,
        })

        assert result.isError is True
        assert result.content[0].text == "{}"

    @pytest.mark.asyncio
    async def test_call_tool(self, mcp_server, fake_connection):
        """✅ Tool call returns the envelope as a CallToolResult"""
        fake_connection.when("FROM DBA_USERS", FakeResult(rows=[{"EXIST_COUNT": 1}]))
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="check_user_exists", arguments={"username": "scott"}),
        )

        result = (await mcp_server.handle_call_tool(request)).root

        assert isinstance(result, types.CallToolResult)
        assert result.isError is False
        assert json.loads(result.content[0].text) == {"username": "SCOTT", "exists": True}

    @pytest.mark.asyncio
    async def test_call_tool_error_flag(self, mcp_server, driver_pool):
        """❌ Failures keep isError on the protocol result"""
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="query", arguments={}),
        )

        result = (await mcp_server.handle_call_tool(request)).root

        assert result.isError is True
        assert driver_pool.acquired == 0

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self, mcp_server):
        """❌ Unknown tools become protocol errors"""
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="nope", arguments={}),
        )

        with pytest.raises(UnknownOperationError):
            await mcp_server.handle_call_tool(request)

    @pytest.mark.asyncio
    async def test_read_resource(self, mcp_server, fake_connection):
        """✅ Resource read returns the table description as JSON"""
        script_emp_schema(fake_connection)
        request = types.ReadResourceRequest(
            method="resources/read",
            params=types.ReadResourceRequestParams(uri=RESOURCE_URI),
        )

        result = (await mcp_server.handle_read_resource(request)).root
        contents = result.contents[0]

        assert contents.mimeType == "application/json"
        assert json.loads(contents.text)["primaryKeys"] == ["EMPNO"]

    @pytest.mark.asyncio
    async def test_read_invalid_resource(self, mcp_server):
        """❌ Malformed resource URIs"""
        request = types.ReadResourceRequest(
            method="resources/read",
            params=types.ReadResourceRequestParams(uri="oracle://scott@localhost:1521/XEPDB1/EMP"),
        )

        with pytest.raises(ResourceNotFoundError):
            await mcp_server.handle_read_resource(request)

    def test_handlers_registered(self, mcp_server):
        """✅ All four MCP callbacks are installed"""
        handlers = mcp_server.server.request_handlers

        assert types.ListToolsRequest in handlers
        assert types.ListResourcesRequest in handlers
        assert handlers[types.CallToolRequest] == mcp_server.handle_call_tool
        assert handlers[types.ReadResourceRequest] == mcp_server.handle_read_resource
