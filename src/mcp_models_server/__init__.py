"""Model Context Protocol CRUD tools for exposed data models."""

from mcp_models_server.backends import Backend, InMemoryBackend, RecordInvalid
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.dispatcher import JsonRpcDispatcher
from mcp_models_server.registry import ToolRegistry
from mcp_models_server.schema import ColumnType, map_column_type
from mcp_models_server.tools import build_tools, generate_crud_tools

__all__ = [
    "Backend",
    "ColumnType",
    "InMemoryBackend",
    "JsonRpcDispatcher",
    "ModelDescriptor",
    "RecordInvalid",
    "ToolRegistry",
    "build_tools",
    "generate_crud_tools",
    "map_column_type",
]
