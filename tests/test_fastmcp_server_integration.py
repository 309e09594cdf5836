"""End-to-end coverage for the FastMCP server wrapper."""

from __future__ import annotations

import json

import pytest
from fastmcp.client import Client

from mcp_models_server.backends import InMemoryBackend
from mcp_models_server.fastmcp_adapter import build_fastmcp_app
from mcp_models_server.registry import ToolRegistry


@pytest.mark.anyio()
async def test_fastmcp_server_supports_tool_discovery(
    registry: ToolRegistry, backend: InMemoryBackend
) -> None:
    """The FastMCP server exposes the CRUD toolset via the official protocol."""
    app = build_fastmcp_app(registry, backend)

    async with Client(app) as client:
        tools = await client.list_tools()
        tool_names = {tool.name for tool in tools}

        assert tool_names == {
            "list_widgets",
            "get_widget",
            "create_widget",
            "update_widget",
            "delete_widget",
        }

        created = await client.call_tool("create_widget", {"name": "Bolt", "price": 3})
        widget = json.loads(created.content[0].text)

        fetched = await client.call_tool("get_widget", {"id": widget["id"]})
        assert '"name": "Bolt"' in fetched.content[0].text

        deleted = await client.call_tool("delete_widget", {"id": widget["id"]})
        assert "deleted successfully" in deleted.content[0].text


@pytest.mark.anyio()
async def test_fastmcp_propagates_tool_errors(
    registry: ToolRegistry, backend: InMemoryBackend
) -> None:
    """Tool-level failures surface as error results through FastMCP clients."""
    app = build_fastmcp_app(registry, backend)

    async with Client(app) as client:
        result = await client.call_tool(
            "get_widget",
            {"id": 404},
            raise_on_error=False,
        )

    assert result.is_error is True
    assert "Widget not found with ID: 404" in result.content[0].text
