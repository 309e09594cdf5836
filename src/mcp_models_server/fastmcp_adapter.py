"""Adapters for exposing CRUD tools via FastMCP."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from mcp_models.config import ServerConfig
from mcp_models.tools import ToolContext, ToolDefinition, ToolValidationError
from mcp_models_server.backends.base import Backend
from mcp_models_server.registry import ToolRegistry


class ToolDefinitionAdapter(Tool):
    """Expose a :class:`ToolDefinition` as a FastMCP tool."""

    def __init__(self, definition: ToolDefinition, context: ToolContext) -> None:
        """Create a FastMCP tool wrapper for the provided definition."""
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.schema,
            tags=set(),
        )
        self._definition = definition
        self._context = context

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and delegate to the wrapped handler."""
        try:
            result = self._definition.run(arguments, self._context)
        except ToolValidationError as error:
            raise ToolError(str(error)) from error
        if result.is_error:
            raise ToolError(result.text_content)
        return ToolResult(
            content=[TextContent(type="text", text=block.text) for block in result.content]
        )


class FastMCPToolSink:
    """Tool sink installing definitions into a FastMCP app."""

    def __init__(self, app: FastMCP, context: ToolContext) -> None:
        self.app = app
        self.context = context

    def register_tools(self, *tools: ToolDefinition) -> None:
        for tool in to_fastmcp_tools(tools, self.context):
            self.app.add_tool(tool)


def to_fastmcp_tools(
    tool_definitions: Sequence[ToolDefinition], context: ToolContext
) -> list[Tool]:
    """Convert tool definitions into FastMCP-compatible tools."""
    return [ToolDefinitionAdapter(definition, context) for definition in tool_definitions]


def build_fastmcp_app(
    registry: ToolRegistry,
    backend: Backend,
    config: ServerConfig | None = None,
) -> FastMCP:
    """Create a FastMCP server instance with every registered model's tools."""
    settings = config or ServerConfig()
    app = FastMCP(name=settings.name, instructions=settings.instructions)
    registry.materialize(FastMCPToolSink(app, ToolContext(backend=backend)))
    return app
