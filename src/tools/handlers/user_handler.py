"""User management handlers."""

import logging
from typing import Any, Dict

from core.error_handling import extract_driver_error, format_failure_response
from database.statements import execute_statement, fetch_value
from database.transaction import TransactionPolicy
from tools.base import ArgumentSpec, ToolContext, ToolHandler
from tools.definitions import TOOL_CHECK_USER_EXISTS, TOOL_CREATE_USER

logger = logging.getLogger(__name__)

USER_EXISTS_SQL = "SELECT COUNT(*) AS EXIST_COUNT FROM dba_users WHERE username = :username"


async def user_exists(connection: Any, username: str) -> bool:
    """Whether ``username`` (already upper-cased) is a database user."""
    count = await fetch_value(connection, USER_EXISTS_SQL, {"username": username})
    return bool(count)


class CheckUserExistsHandler(ToolHandler):
    """Handler for user existence checks."""

    name = TOOL_CHECK_USER_EXISTS
    description = "Check if a user already exists in Oracle"
    policy = TransactionPolicy.AUTOCOMMIT
    suggestion = "Check that the connected user can read DBA_USERS"
    arguments = [
        ArgumentSpec(name="username", type="string", required=True, format="identifier"),
    ]

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        username = arguments["username"].upper()
        exists = await user_exists(connection, username)
        return self._success_response({"username": username, "exists": exists})


class CreateUserHandler(ToolHandler):
    """
    Handler for user creation.

    Three steps: existence check, CREATE USER, then ALTER USER for the
    tablespaces and quota. Each statement autocommits on its own. Oracle DDL
    is not transactional, so a failure in the ALTER step leaves a created but
    unconfigured user; that outcome is reported as an error envelope and is
    not compensated.
    """

    name = TOOL_CREATE_USER
    description = "Create a new Oracle user with basic permissions"
    policy = TransactionPolicy.AUTOCOMMIT
    suggestion = "Check the syntax and the privileges required to create users"
    arguments = [
        ArgumentSpec(name="username", type="string", required=True, format="identifier"),
        ArgumentSpec(name="password", type="string", required=True, format="password"),
        ArgumentSpec(name="tablespace", type="string", default="USERS", format="identifier"),
        ArgumentSpec(name="tempTablespace", type="string", default="TEMP", format="identifier"),
    ]

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        username = arguments["username"].upper()
        password = arguments["password"]
        tablespace = arguments["tablespace"].upper()
        temp_tablespace = arguments["tempTablespace"].upper()

        if await user_exists(connection, username):
            return self._error_response(
                f"User {username} already exists",
                "AlreadyExists",
                "Use a different username or drop the existing user first"
            )

        await execute_statement(connection, f'CREATE USER {username} IDENTIFIED BY "{password}"')
        logger.info(f"Created user {username}")

        try:
            await execute_statement(
                connection,
                f"ALTER USER {username} DEFAULT TABLESPACE {tablespace} "
                f"TEMPORARY TABLESPACE {temp_tablespace} "
                f"QUOTA UNLIMITED ON {tablespace}"
            )
        except Exception as e:
            message, code = extract_driver_error(e)
            logger.error(f"User {username} created but tablespace configuration failed: {message}")
            return format_failure_response(
                f"User {username} was created but configuring its tablespaces failed: {message}",
                self.suggestion,
                "PartialFailure",
                code
            )

        return self._success_response({
            "message": f"User {username} created successfully",
            "nextStep": "Use grant_privileges tool to assign permissions to the user"
        })
