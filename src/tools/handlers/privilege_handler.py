"""Privilege granting handler."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from core.error_handling import extract_driver_error
from database.statements import execute_statement
from database.transaction import TransactionPolicy
from tools.base import ArgumentSpec, ToolContext, ToolHandler
from tools.definitions import TOOL_GRANT_PRIVILEGES
from tools.handlers.user_handler import user_exists
from tools.validators import IdentifierValidator

logger = logging.getLogger(__name__)


class GrantResult(BaseModel):
    """Outcome of one GRANT."""

    privilege: str
    granted: bool
    error: Optional[str] = None


class GrantPrivilegesHandler(ToolHandler):
    """
    Handler for granting privileges to an existing user.

    Each privilege is granted by its own autocommitted statement. A failing
    grant is recorded in its GrantResult and the remaining privileges are
    still processed; the envelope is a success whatever the individual
    outcomes.
    """

    name = TOOL_GRANT_PRIVILEGES
    description = "Grant privileges to a user"
    policy = TransactionPolicy.AUTOCOMMIT
    suggestion = "Check the privilege names and the grantor's permissions"
    arguments = [
        ArgumentSpec(name="username", type="string", required=True, format="identifier"),
        ArgumentSpec(
            name="privileges",
            type="array",
            required=True,
            description="List of privileges to grant (e.g. CREATE SESSION, CREATE TABLE)"
        ),
    ]

    async def _grant(self, connection: Any, privilege: str, username: str) -> GrantResult:
        is_valid, error_msg = IdentifierValidator.validate_privilege(privilege)
        if not is_valid:
            return GrantResult(privilege=privilege, granted=False, error=error_msg)

        try:
            await execute_statement(connection, f"GRANT {privilege.strip()} TO {username}")
        except Exception as e:
            message, _ = extract_driver_error(e)
            logger.warning(f"GRANT {privilege} TO {username} failed: {message}")
            return GrantResult(privilege=privilege, granted=False, error=message)

        return GrantResult(privilege=privilege, granted=True)

    async def execute(self, connection: Any, arguments: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        username = arguments["username"].upper()

        if not await user_exists(connection, username):
            return self._error_response(
                f"User {username} does not exist",
                "NotFound",
                "Create the user first using create_user tool"
            )

        results: List[GrantResult] = []
        for privilege in arguments["privileges"]:
            results.append(await self._grant(connection, privilege, username))

        return self._success_response({
            "message": f"Privileges processed for user {username}",
            "results": [result.model_dump(exclude_none=True) for result in results]
        })
