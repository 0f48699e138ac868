"""Oracle schema introspection for MCP resources."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from core.exceptions import ResourceNotFoundError
from database.connection import ConnectionBorrower
from database.statements import fetch_rows
from database.transaction import TransactionPolicy, transaction_scope

logger = logging.getLogger(__name__)

SCHEMA_PATH = "schema"
RESOURCE_MIME_TYPE = "application/json"

ACCESSIBLE_TABLES_SQL = """
SELECT table_name
FROM user_tables
UNION ALL
SELECT table_name
FROM all_tables
WHERE owner != USER
AND (owner, table_name) IN (
    SELECT table_owner, table_name
    FROM user_tab_privs
    WHERE privilege IN ('SELECT', 'INSERT', 'UPDATE', 'DELETE', 'ALTER', 'ALL')
)
ORDER BY table_name
"""

# The connected user's own table wins over same-named tables in other schemas
TABLE_OWNER_SQL = """
SELECT owner FROM (
    SELECT owner
    FROM all_tables
    WHERE table_name = :tableName
    ORDER BY CASE WHEN owner = USER THEN 0 ELSE 1 END, owner
)
WHERE rownum = 1
"""

COLUMNS_SQL = """
SELECT
    column_name,
    data_type,
    data_length,
    data_precision,
    data_scale,
    nullable,
    column_id,
    default_length,
    data_default
FROM all_tab_columns
WHERE table_name = :tableName
AND owner = :owner
ORDER BY column_id
"""

PRIMARY_KEYS_SQL = """
SELECT cols.column_name
FROM all_constraints cons, all_cons_columns cols
WHERE cons.constraint_type = 'P'
AND cons.constraint_name = cols.constraint_name
AND cons.owner = cols.owner
AND cols.table_name = :tableName
AND cons.owner = :owner
"""

FOREIGN_KEYS_SQL = """
SELECT
    a.column_name,
    a.constraint_name,
    c_pk.table_name AS referenced_table,
    c_pk.owner AS referenced_owner
FROM all_cons_columns a
JOIN all_constraints c ON a.owner = c.owner
    AND a.constraint_name = c.constraint_name
JOIN all_constraints c_pk ON c.r_owner = c_pk.owner
    AND c.r_constraint_name = c_pk.constraint_name
WHERE c.constraint_type = 'R'
AND a.table_name = :tableName
AND c.owner = :owner
"""


def table_from_resource_uri(uri: str) -> str:
    """Extract the table name from ``oracle://user@host:port/service/TABLE/schema``.

    Raises:
        ResourceNotFoundError: If the URI does not end in ``/<TABLE>/schema``
    """
    path_components = urlparse(str(uri)).path.split("/")
    schema = path_components.pop() if path_components else ""
    table_name = path_components.pop() if path_components else ""

    if schema != SCHEMA_PATH or not table_name:
        raise ResourceNotFoundError("Invalid resource URI", {"uri": str(uri)})

    return table_name.upper()


class OracleSchemaIntrospector:
    """Lists accessible tables and describes their structure."""

    def __init__(self, borrower: ConnectionBorrower, resource_base_url: str):
        self.borrower = borrower
        self.resource_base_url = resource_base_url

    def resource_uri(self, table_name: str) -> str:
        return f"{self.resource_base_url}{table_name}/{SCHEMA_PATH}"

    async def list_table_resources(self) -> List[Dict[str, Any]]:
        """Tables owned by the user plus tables it holds privileges on."""
        async with self.borrower.borrow() as connection:
            async with transaction_scope(connection, TransactionPolicy.READ_ONLY):
                rows = await fetch_rows(connection, ACCESSIBLE_TABLES_SQL)

        return [
            {
                "uri": self.resource_uri(row["TABLE_NAME"]),
                "mimeType": RESOURCE_MIME_TYPE,
                "name": f'"{row["TABLE_NAME"]}" database schema'
            }
            for row in rows
        ]

    async def resolve_owner(self, connection: Any, table_name: str) -> Optional[str]:
        """Owning schema of ``table_name``, or None when it is not visible."""
        rows = await fetch_rows(connection, TABLE_OWNER_SQL, {"tableName": table_name.upper()})
        return rows[0]["OWNER"] if rows else None

    async def describe_table(self, table_name: str) -> Dict[str, Any]:
        """
        Columns, primary keys and foreign keys of a table.

        Raises:
            ResourceNotFoundError: If the table is not visible to the user
        """
        table_name = table_name.upper()

        async with self.borrower.borrow() as connection:
            async with transaction_scope(connection, TransactionPolicy.READ_ONLY):
                owner = await self.resolve_owner(connection, table_name)
                if not owner:
                    raise ResourceNotFoundError(f"Table {table_name} not found", {"table": table_name})

                binds = {"tableName": table_name, "owner": owner}
                columns = await fetch_rows(connection, COLUMNS_SQL, binds)
                primary_keys = await fetch_rows(connection, PRIMARY_KEYS_SQL, binds)
                foreign_keys = await fetch_rows(connection, FOREIGN_KEYS_SQL, binds)

        return {
            "tableName": table_name,
            "owner": owner,
            "columns": columns,
            "primaryKeys": [row["COLUMN_NAME"] for row in primary_keys],
            "foreignKeys": [
                {
                    "column": row["COLUMN_NAME"],
                    "constraintName": row["CONSTRAINT_NAME"],
                    "referencedTable": row["REFERENCED_TABLE"],
                    "referencedOwner": row["REFERENCED_OWNER"]
                }
                for row in foreign_keys
            ]
        }
