"""JSON-RPC 2.0 dispatcher for the MCP tool-call subset.

Error codes used by the dispatcher:

* ``-32700`` parse error, identifier ``null``
* ``-32600`` the message is not a valid request object
* ``-32601`` unknown method
* ``-32602`` unknown tool or arguments violating the tool's input schema
* ``-32603`` the tool raised an unexpected exception

Tool-level failures are not protocol errors: they come back as a successful
response whose result has ``isError`` set.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp_models.config import ServerConfig
from mcp_models.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    error_envelope,
    result_envelope,
)
from mcp_models.server import MCPServer
from mcp_models.tools import ToolContext, ToolValidationError
from mcp_models_server.backends.base import Backend
from mcp_models_server.registry import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"

_MISSING = object()


class JsonRpcDispatcher:
    """Parse, route, execute and answer JSON-RPC tool requests.

    The dispatcher holds no per-request state, so ``handle`` may be called
    concurrently. Each call reads the registry's published tool table once.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        backend: Backend,
        config: ServerConfig | None = None,
    ) -> None:
        """Create a dispatcher serving ``registry`` against ``backend``."""
        self.registry = registry
        self.backend = backend
        self.config = config or ServerConfig()

    def handle(self, raw: bytes | str) -> bytes | None:
        """Answer one raw JSON-RPC message.

        Returns:
            The serialized response, or ``None`` for notifications.
        """
        try:
            message = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            logger.debug("Rejecting malformed JSON: %s", exc)
            return _encode(error_envelope(None, PARSE_ERROR, f"Parse error: {exc}"))

        response = self.handle_message(message)
        if response is None:
            return None
        return _encode(response)

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Answer an already decoded JSON-RPC message."""
        if not isinstance(message, dict):
            return error_envelope(
                None, INVALID_REQUEST, "Invalid Request: expected a JSON object"
            )

        request_id = message.get("id", _MISSING)
        notification = request_id is _MISSING
        if notification:
            request_id = None
        elif not _valid_id(request_id):
            return error_envelope(
                None, INVALID_REQUEST, "Invalid Request: id must be a string or number"
            )

        try:
            result = self._dispatch(message, request_id)
        except JsonRpcError as exc:
            if notification:
                logger.debug("Dropping error for notification: %s", exc.message)
                return None
            return error_envelope(request_id, exc.code, exc.message)
        except Exception as exc:
            logger.exception("MCP error while handling %r", message.get("method"))
            if notification:
                return None
            return error_envelope(request_id, INTERNAL_ERROR, f"Internal error: {exc}")

        if notification:
            return None
        return result_envelope(request_id, result)

    def _dispatch(self, message: dict[str, Any], request_id: object) -> Any:
        if message.get("jsonrpc") != JSONRPC_VERSION:
            raise JsonRpcError(INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'")
        method = message.get("method")
        if not isinstance(method, str) or not method:
            raise JsonRpcError(INVALID_REQUEST, "Invalid Request: missing method")
        params = message.get("params", {})
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: expected an object")

        server = self.registry.server
        if method == "initialize":
            return self._initialize(params)
        if method == "ping":
            return {}
        if method.startswith("notifications/"):
            return {}
        if method == "tools/list":
            return {"tools": server.list_tools()}
        if method == "tools/call":
            name = params.get("name")
            if not isinstance(name, str) or not name:
                raise JsonRpcError(INVALID_PARAMS, "Invalid params: missing tool name")
            arguments = params.get("arguments") or {}
            if not isinstance(arguments, dict):
                raise JsonRpcError(
                    INVALID_PARAMS, "Invalid params: arguments must be an object"
                )
            if server.get_tool(name) is None:
                raise JsonRpcError(INVALID_PARAMS, f"Unknown tool: {name}")
            return self._call(server, name, arguments, request_id)
        if server.get_tool(method) is not None:
            return self._call(server, method, params, request_id)
        raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")

    def _call(
        self,
        server: MCPServer,
        name: str,
        arguments: dict[str, Any],
        request_id: object,
    ) -> dict[str, Any]:
        context = ToolContext(backend=self.backend, request_id=request_id)
        try:
            result = server.run_tool(name, parameters=arguments, context=context)
        except ToolValidationError as exc:
            raise JsonRpcError(INVALID_PARAMS, str(exc)) from exc
        return result.to_dict()

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        return {
            "protocolVersion": requested if isinstance(requested, str) else PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.config.name, "version": self.config.version},
            "instructions": self.config.instructions,
        }


def _valid_id(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return value is None or isinstance(value, (str, int, float))


def _encode(envelope: dict[str, Any]) -> bytes:
    return json.dumps(envelope, default=str).encode("utf-8")
