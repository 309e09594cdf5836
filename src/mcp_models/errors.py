"""Custom error types and JSON-RPC envelopes for MCP tooling."""

from __future__ import annotations

from typing import Any, NoReturn, TypedDict

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MCPErrorPayload(TypedDict):
    """Structured JSON payload for MCP errors."""

    error: dict[str, object | None]


class MCPError(Exception):
    """Structured tool-level error containing a JSON-friendly payload.

    Raised by tool handlers for business failures (missing records, rejected
    input). The tool layer turns it into an error result instead of a protocol
    error.
    """

    def __init__(
        self, error_type: str, message: str, details: object | None = None
    ) -> None:
        """Create a structured MCP error payload."""
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.error: MCPErrorPayload = {
            "error": {
                "type": error_type,
                "message": message,
                "details": details,
            }
        }

    def to_dict(self) -> MCPErrorPayload:
        """Return the structured error payload."""
        return self.error


def raise_mcp_error(
    error_type: str, message: str, details: object | None = None
) -> NoReturn:
    """Raise an :class:`MCPError` with a structured payload."""
    raise MCPError(error_type=error_type, message=message, details=details)


class JsonRpcError(Exception):
    """Protocol-level failure that maps onto a JSON-RPC ``error`` object."""

    def __init__(self, code: int, message: str) -> None:
        """Create a protocol error with its JSON-RPC code."""
        super().__init__(message)
        self.code = code
        self.message = message


def error_envelope(request_id: object, code: int, message: str) -> dict[str, Any]:
    """Build a JSON-RPC error response."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def result_envelope(request_id: object, result: Any) -> dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}
