"""In-memory tool table for MCP serving.

This module holds the serving context the CRUD tools are installed into. It
tracks registered tools and executes them, leaving transport details to the
JSON-RPC dispatcher, the HTTP host, and the FastMCP adapter.
"""

from __future__ import annotations

from typing import Any

from mcp_models.tools import ToolContext, ToolDefinition, ToolResult


class MCPServer:
    """In-memory registry and executor for MCP tools.

    The server tracks registered tools in registration order and provides a
    simple dispatch mechanism. It is intentionally free of transport details
    to keep it focused and testable.
    """

    def __init__(self) -> None:
        """Initialize an empty server registry."""
        self._tools: dict[str, ToolDefinition] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a tool with the server.

        Args:
            tool: Tool definition to register.

        Raises:
            ValueError: If a tool with the same name is already registered.

        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def register_tools(self, *tools: ToolDefinition) -> None:
        """Register multiple tools at once.

        Args:
            *tools: Collection of tool definitions to register.

        """
        for tool in tools:
            self.register_tool(tool)

    def available_tools(self) -> list[str]:
        """List the names of registered tools.

        Returns:
            Sorted list of tool names.

        """
        return sorted(self._tools)

    def get_tool(self, name: str) -> ToolDefinition | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe every tool for ``tools/list`` in registration order."""
        return [tool.metadata() for tool in self._tools.values()]

    def run_tool(
        self,
        name: str,
        *,
        parameters: dict[str, Any] | None = None,
        context: ToolContext | None = None,
    ) -> ToolResult:
        """Execute a registered tool.

        Args:
            name: Name of the registered tool to execute.
            parameters: Optional parameters for the tool.
            context: Execution context handed to the handler.

        Raises:
            KeyError: If the tool name is not registered.
            ToolValidationError: If parameter validation fails.

        Returns:
            ToolResult produced by the tool.

        """
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' is not registered")

        tool = self._tools[name]
        return tool.run(parameters or {}, context or ToolContext(backend=None))

    def to_catalog(self) -> dict[str, dict[str, Any]]:
        """Produce a catalog for discovery.

        Returns:
            Mapping of tool names to their metadata.

        """
        return {name: tool.metadata() for name, tool in self._tools.items()}
