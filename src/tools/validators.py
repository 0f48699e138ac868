"""Input validators for tool arguments.

Oracle DDL cannot bind identifiers, so user names, tablespace names, table
names and privilege strings are interpolated into statement text. Everything
that gets interpolated passes through one of the validators here first; they
are the trust boundary between the calling agent and the statement text.
"""

import math
import re
from typing import Any, Dict, List, Tuple

from core.exceptions import ArgumentValidationError


# Oracle nonquoted identifier: letter first, then letters, digits, _ $ #
IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9_$#]*$')
MAX_IDENTIFIER_LENGTH = 128

# System/object privileges and roles, e.g. "CREATE SESSION", "SELECT ON HR.EMPLOYEES"
PRIVILEGE_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9_$#]*(?:[ ,.]+[A-Za-z0-9_$#]+)*$')
MAX_PRIVILEGE_LENGTH = 256

MAX_PASSWORD_LENGTH = 1024


class IdentifierValidator:
    """Validation for names interpolated into statement text."""

    @staticmethod
    def validate_identifier(name: str) -> Tuple[bool, str]:
        """
        Validate an Oracle identifier (user, tablespace or table name).

        Args:
            name: Identifier to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name:
            return False, "Identifier cannot be empty"

        if len(name) > MAX_IDENTIFIER_LENGTH:
            return False, f"Identifier too long (max {MAX_IDENTIFIER_LENGTH} characters)"

        if not IDENTIFIER_PATTERN.match(name):
            return False, (
                f"Invalid identifier '{name}' "
                "(must start with a letter; only letters, digits, _, $ and # allowed)"
            )

        return True, ""

    @staticmethod
    def validate_privilege(privilege: str) -> Tuple[bool, str]:
        """Validate one privilege or role string for a GRANT statement."""
        if not privilege or not privilege.strip():
            return False, "Privilege cannot be empty"

        if len(privilege) > MAX_PRIVILEGE_LENGTH:
            return False, f"Privilege too long (max {MAX_PRIVILEGE_LENGTH} characters)"

        if not PRIVILEGE_PATTERN.match(privilege.strip()):
            return False, f"Invalid privilege '{privilege}'"

        return True, ""

    @staticmethod
    def validate_password(password: str) -> Tuple[bool, str]:
        """Validate a password placed inside a quoted IDENTIFIED BY clause."""
        if not password:
            return False, "Password cannot be empty"

        if len(password) > MAX_PASSWORD_LENGTH:
            return False, f"Password too long (max {MAX_PASSWORD_LENGTH} characters)"

        if '"' in password:
            return False, "Password cannot contain double quotes"

        if any(ord(ch) < 32 for ch in password):
            return False, "Password cannot contain control characters"

        return True, ""


class SQLValidator:
    """Sanity checks on caller-supplied SQL text."""

    @staticmethod
    def validate_statement(sql: str, max_length: int = 50000) -> Tuple[bool, str]:
        """
        Check that SQL text is present and within the length limit.

        Statements are not parsed; the transaction policy bounds what they can do.
        """
        if not sql or not sql.strip():
            return False, "Empty SQL statement"

        if len(sql) > max_length:
            return False, f"SQL statement too long (max {max_length} characters)"

        return True, ""


_FORMAT_VALIDATORS = {
    "identifier": IdentifierValidator.validate_identifier,
    "password": IdentifierValidator.validate_password,
    "sql": SQLValidator.validate_statement,
}


class ArgumentValidator:
    """Checks a tool call's arguments against its declared argument specs."""

    @staticmethod
    def _check_type(name: str, value: Any, expected: str) -> Any:
        if expected == "string":
            if not isinstance(value, str):
                raise ArgumentValidationError(f"Argument '{name}' must be a string", {"argument": name})
            return value

        if expected == "number":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ArgumentValidationError(f"Argument '{name}' must be a number", {"argument": name})
            if isinstance(value, float) and not math.isfinite(value):
                raise ArgumentValidationError(f"Argument '{name}' must be a finite number", {"argument": name})
            return value

        if expected == "array":
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ArgumentValidationError(
                    f"Argument '{name}' must be an array of strings", {"argument": name}
                )
            return value

        raise ArgumentValidationError(f"Unsupported argument type '{expected}' for '{name}'")

    @classmethod
    def validate(cls, specs: List[Any], arguments: Dict[str, Any], sql_max_length: int = 50000) -> Dict[str, Any]:
        """
        Apply defaults and validate arguments.

        Args:
            specs: ArgumentSpec list of the tool
            arguments: Raw arguments from the caller
            sql_max_length: Length limit for 'sql' formatted arguments

        Returns:
            Cleaned arguments, containing only declared names

        Raises:
            ArgumentValidationError: On a missing, ill-typed or unsafe argument
        """
        arguments = arguments or {}
        cleaned: Dict[str, Any] = {}

        for spec in specs:
            value = arguments.get(spec.name)

            if value is None:
                if spec.required:
                    raise ArgumentValidationError(
                        f"Missing required argument '{spec.name}'", {"argument": spec.name}
                    )
                if spec.default is not None:
                    cleaned[spec.name] = spec.default
                continue

            value = cls._check_type(spec.name, value, spec.type)

            if spec.format:
                validator = _FORMAT_VALIDATORS[spec.format]
                if spec.format == "sql":
                    is_valid, error_msg = validator(value, sql_max_length)
                else:
                    is_valid, error_msg = validator(value)
                if not is_valid:
                    raise ArgumentValidationError(
                        f"Invalid argument '{spec.name}': {error_msg}", {"argument": spec.name}
                    )

            cleaned[spec.name] = value

        return cleaned
