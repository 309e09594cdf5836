"""Tool registration helpers for the MCP models server."""

from __future__ import annotations

from collections.abc import Iterable

from mcp_models.tools import ToolDefinition
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.tools.crud import (
    create_tool,
    delete_tool,
    generate_crud_tools,
    get_tool,
    list_tool,
    update_tool,
)

__all__ = [
    "build_tools",
    "create_tool",
    "delete_tool",
    "generate_crud_tools",
    "get_tool",
    "list_tool",
    "update_tool",
]


def build_tools(descriptors: Iterable[ModelDescriptor]) -> list[ToolDefinition]:
    """Instantiate all tool definitions for the provided descriptors."""
    tools: list[ToolDefinition] = []
    for descriptor in descriptors:
        tools.extend(generate_crud_tools(descriptor))
    return tools
