"""mcp_models package initialization."""

from mcp_models.errors import MCPError
from mcp_models.server import MCPServer
from mcp_models.tools import (
    TextContent,
    ToolContext,
    ToolDefinition,
    ToolParameters,
    ToolResult,
    ToolValidationError,
)

__all__ = [
    "MCPError",
    "MCPServer",
    "TextContent",
    "ToolContext",
    "ToolDefinition",
    "ToolParameters",
    "ToolResult",
    "ToolValidationError",
]
