"""Result normalization for MCP tool calls.

Every tool outcome, success or failure, leaves the dispatcher as an envelope:

    {"content": [{"type": "text", "text": "<JSON payload>"}], "isError": bool}

Error payloads carry a human-readable message, the driver error code when the
driver supplied one, an error type, and a remediation hint.
"""

import datetime
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from core.exceptions import AcquireTimeoutError, MCPDBError

logger = logging.getLogger(__name__)

POOL_EXHAUSTED_SUGGESTION = "The connection pool is exhausted; retry later"


def _json_default(value: Any) -> Any:
    """Serialize driver values json does not know about."""
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


def to_json(data: Any) -> str:
    """Render a payload the way every envelope carries it."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=_json_default)


def extract_driver_error(error: Exception) -> Tuple[str, Optional[int]]:
    """Pull the message and numeric error code out of a driver exception.

    python-oracledb raises exceptions whose first argument is an error object
    with ``message`` and ``code`` attributes (``code`` is the ORA number, or 0
    for driver-side DPY errors).
    """
    if isinstance(error, MCPDBError):
        return error.message, None

    if error.args:
        error_obj = error.args[0]
        message = getattr(error_obj, "message", None)
        code = getattr(error_obj, "code", None)
        if message is not None:
            return str(message), code if isinstance(code, int) and code else None

    return str(error), None


def format_success_response(data: Any) -> Dict[str, Any]:
    """Wrap a payload in a success envelope."""
    return {
        "content": [{
            "type": "text",
            "text": to_json(data)
        }],
        "isError": False
    }


def format_failure_response(
    message: str,
    suggestion: Optional[str] = None,
    error_type: Optional[str] = None,
    error_code: Optional[int] = None
) -> Dict[str, Any]:
    """Build an error envelope from its parts.

    Used directly by handlers for precondition failures (user already exists,
    table not found) where no exception is involved.
    """
    payload: Dict[str, Any] = {"error": message}
    if error_code is not None:
        payload["errorCode"] = error_code
    if error_type:
        payload["errorType"] = error_type
    if suggestion:
        payload["suggestion"] = suggestion

    return {
        "content": [{
            "type": "text",
            "text": to_json(payload)
        }],
        "isError": True
    }


def format_error_response(error: Exception, suggestion: Optional[str] = None) -> Dict[str, Any]:
    """Normalize an exception raised while serving a tool call.

    Args:
        error: The exception that occurred
        suggestion: Remediation hint of the operation that failed

    Returns:
        Error envelope
    """
    message, code = extract_driver_error(error)
    error_type = type(error).__name__

    if isinstance(error, AcquireTimeoutError):
        suggestion = POOL_EXHAUSTED_SUGGESTION
        logger.warning(f"{error_type}: {message}")
    else:
        logger.error(f"{error_type}: {message}")

    return format_failure_response(message, suggestion, error_type, code)


def format_non_query_result(rows_affected: Optional[int]) -> Dict[str, Any]:
    """Payload for statements that do not return rows."""
    if rows_affected is not None:
        return {
            "message": f"Operation completed successfully. Rows affected: {rows_affected}",
            "rowsAffected": rows_affected
        }
    return {"message": "Operation completed successfully"}


def envelope_payload(envelope: Dict[str, Any]) -> Any:
    """Decode the JSON payload of an envelope's first text block."""
    return json.loads(envelope["content"][0]["text"])
