"""End-to-end coverage for the JSON-RPC dispatcher."""

from __future__ import annotations

import json
from typing import Any

import pytest

from mcp_models.tools import ToolContext, ToolDefinition, ToolParameters, ToolResult
from mcp_models_server.backends import InMemoryBackend
from mcp_models_server.dispatcher import JsonRpcDispatcher
from mcp_models_server.registry import ToolRegistry


def _call_tool(rpc, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return rpc("tools/call", {"name": name, "arguments": arguments})


def test_widget_scenario(rpc) -> None:
    """create_widget then get_widget returns the stored attributes."""
    created = _call_tool(rpc, "create_widget", {"name": "Bolt", "price": 3})
    assert created["result"]["isError"] is False
    widget_id = json.loads(created["result"]["content"][0]["text"])["id"]

    fetched = _call_tool(rpc, "get_widget", {"id": widget_id})

    block = fetched["result"]["content"][0]
    assert block["type"] == "text"
    assert '"name": "Bolt"' in block["text"]
    assert '"price": 3' in block["text"]


def test_tools_list_names(rpc) -> None:
    """tools/list reports the generated tools with their schemas."""
    response = rpc("tools/list")

    tools = response["result"]["tools"]
    assert [tool["name"] for tool in tools] == [
        "list_widgets",
        "get_widget",
        "create_widget",
        "update_widget",
        "delete_widget",
    ]
    assert tools[1]["inputSchema"]["required"] == ["id"]


def test_tool_name_as_method(rpc) -> None:
    """A registered tool name can be used directly as the method."""
    rpc("create_widget", {"name": "Nut", "price": 1})

    response = rpc("list_widgets", {})

    assert json.loads(response["result"]["content"][0]["text"])[0]["name"] == "Nut"


def test_not_found_is_successful_envelope(rpc) -> None:
    """Business failures stay inside a successful response."""
    response = _call_tool(rpc, "get_widget", {"id": 42})

    assert "error" not in response
    assert response["result"]["isError"] is True
    assert response["result"]["content"][0]["text"] == "Widget not found with ID: 42"
    assert response["result"]["structuredContent"]["error"]["type"] == "NotFound"


def test_malformed_json_is_parse_error(dispatcher: JsonRpcDispatcher) -> None:
    """Unparseable input yields -32700 with a null identifier."""
    response = json.loads(dispatcher.handle(b'{"jsonrpc": "2.0", "id": 1,'))

    assert response["id"] is None
    assert response["error"]["code"] == -32700
    assert "result" not in response


def test_deeply_nested_json_is_parse_error(dispatcher: JsonRpcDispatcher) -> None:
    """Input nested beyond the parser's recursion limit is a parse error."""
    response = json.loads(dispatcher.handle(b"[" * 100000 + b"]" * 100000))

    assert response["id"] is None
    assert response["error"]["code"] == -32700
    assert "result" not in response


def test_unknown_method(dispatcher: JsonRpcDispatcher) -> None:
    """Unknown methods are reported with -32601 and the echoed id."""
    raw = json.dumps({"jsonrpc": "2.0", "id": "abc", "method": "explode"})

    response = json.loads(dispatcher.handle(raw))

    assert response["id"] == "abc"
    assert response["error"]["code"] == -32601
    assert "explode" in response["error"]["message"]


def test_unknown_tool(rpc) -> None:
    """tools/call with an unregistered name is an invalid-params error."""
    response = _call_tool(rpc, "launch_rocket", {})

    assert response["error"]["code"] == -32602
    assert "launch_rocket" in response["error"]["message"]


def test_missing_required_parameter(rpc) -> None:
    """A missing required property is a protocol error, not a tool error."""
    response = _call_tool(rpc, "create_widget", {"name": "Bolt"})

    assert "result" not in response
    assert response["error"]["code"] == -32602
    assert "price" in response["error"]["message"]


@pytest.mark.parametrize(
    "message",
    [
        [1, 2],
        {"jsonrpc": "1.0", "id": 3, "method": "ping"},
        {"jsonrpc": "2.0", "id": 3},
        {"jsonrpc": "2.0", "id": {"nested": True}, "method": "ping"},
    ],
)
def test_invalid_requests(dispatcher: JsonRpcDispatcher, message: Any) -> None:
    """Structurally invalid requests get -32600."""
    response = json.loads(dispatcher.handle(json.dumps(message)))

    assert response["error"]["code"] == -32600
    assert "result" not in response


def test_handler_failure_is_internal_error(widget_descriptor) -> None:
    """Unexpected handler exceptions are caught and reported as -32603."""

    class BrokenBackend(InMemoryBackend):
        def list(self, model: str):
            raise RuntimeError("database unavailable")

    registry = ToolRegistry()
    registry.reload([widget_descriptor])
    dispatcher = JsonRpcDispatcher(registry, BrokenBackend())
    raw = json.dumps(
        {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {"name": "list_widgets"}}
    )

    response = json.loads(dispatcher.handle(raw))

    assert response["id"] == 7
    assert response["error"]["code"] == -32603
    assert "database unavailable" in response["error"]["message"]


def test_notifications_get_no_response(dispatcher: JsonRpcDispatcher) -> None:
    """Requests without an id are executed silently."""
    raw = json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert dispatcher.handle(raw) is None


def test_initialize_and_ping(rpc) -> None:
    """The handshake advertises the tools capability."""
    response = rpc("initialize", {"protocolVersion": "2024-11-05"})

    assert response["result"]["protocolVersion"] == "2024-11-05"
    assert "tools" in response["result"]["capabilities"]
    assert response["result"]["serverInfo"]["name"] == "mcp-models-server"
    assert rpc("ping")["result"] == {}


def test_response_id_always_matches(rpc) -> None:
    """Every response echoes its request id and never mixes result and error."""
    responses = [
        rpc("ping"),
        rpc("tools/list"),
        rpc("nope"),
        _call_tool(rpc, "get_widget", {"id": 1}),
    ]

    assert [response["id"] for response in responses] == [1, 2, 3, 4]
    for response in responses:
        assert ("result" in response) != ("error" in response)


def test_dispatch_after_reload_sees_new_tools(
    registry: ToolRegistry, dispatcher: JsonRpcDispatcher
) -> None:
    """Dispatchers pick up a rebuilt tool table without being recreated."""

    def handler(params: dict[str, Any], context: ToolContext) -> ToolResult:
        return ToolResult.text("pong")

    extra = ToolDefinition(
        name="echo",
        description="Reply with pong.",
        parameters_model=ToolParameters,
        handler=handler,
    )
    registry.reload()
    registry.server.register_tool(extra)
    raw = json.dumps({"jsonrpc": "2.0", "id": 1, "method": "echo"})

    response = json.loads(dispatcher.handle(raw))

    assert response["result"]["content"][0]["text"] == "pong"
