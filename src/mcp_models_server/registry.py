"""Registry of exposed models and the tool table built from them."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

from mcp_models.server import MCPServer
from mcp_models.tools import ToolDefinition
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.schema import ColumnType
from mcp_models_server.tools import build_tools

logger = logging.getLogger(__name__)


class ToolSink(Protocol):
    """Anything tool definitions can be installed into."""

    def register_tools(self, *tools: ToolDefinition) -> None: ...


class ToolRegistry:
    """Bookkeeping of model descriptors plus the published tool table.

    Dispatchers read :attr:`server` without locking. :meth:`reload` builds a
    complete replacement table under a single-writer lock and publishes it
    with one reference swap, so readers see either the old or the new tool
    set and never a partial one.
    """

    def __init__(
        self,
        tool_builder: Callable[[Iterable[ModelDescriptor]], list[ToolDefinition]] = build_tools,
    ) -> None:
        """Initialize an empty registry."""
        self._tool_builder = tool_builder
        self._descriptors: list[ModelDescriptor] = []
        self._server = MCPServer()
        self._lock = threading.Lock()

    @property
    def descriptors(self) -> tuple[ModelDescriptor, ...]:
        return tuple(self._descriptors)

    @property
    def server(self) -> MCPServer:
        """The currently published tool table."""
        return self._server

    def register(self, descriptor: ModelDescriptor) -> None:
        """Append a descriptor. Duplicate names are not checked here."""
        with self._lock:
            self._descriptors.append(descriptor)

    def expose(
        self,
        name: str,
        attributes: Iterable[str],
        *,
        writable: Iterable[str] | None = None,
        column_types: Mapping[str, ColumnType | str] | None = None,
        read_only: bool = False,
        plural: str | None = None,
    ) -> ModelDescriptor:
        """Build a descriptor from keyword options and register it."""
        descriptor = ModelDescriptor.build(
            name,
            attributes,
            writable=writable,
            column_types=column_types,
            read_only=read_only,
            plural=plural,
        )
        self.register(descriptor)
        return descriptor

    def is_registered(self, name: str) -> bool:
        """Whether a descriptor with ``name`` has been registered."""
        return any(descriptor.name == name for descriptor in self._descriptors)

    def clear(self) -> None:
        """Forget every descriptor and publish an empty tool table."""
        with self._lock:
            self._descriptors = []
            self._server = MCPServer()

    def materialize(self, sink: ToolSink) -> list[ToolDefinition]:
        """Generate tools for every descriptor and install them into ``sink``.

        Raises:
            ValueError: If two descriptors produce the same tool name and the
                sink rejects duplicates.
        """
        tools = self._tool_builder(self.descriptors)
        sink.register_tools(*tools)
        return tools

    def reload(self, descriptors: Iterable[ModelDescriptor] | None = None) -> MCPServer:
        """Rebuild and publish the tool table atomically.

        Args:
            descriptors: Replacement descriptors. When omitted the currently
                registered descriptors are rebuilt.

        Returns:
            The newly published server.
        """
        with self._lock:
            if descriptors is not None:
                self._descriptors = list(descriptors)
            server = MCPServer()
            self.materialize(server)
            self._server = server
        logger.info("MCP tool table initialized with %d tools", len(server))
        logger.debug("Registered tools: %s", ", ".join(server.available_tools()))
        return server

    def get_tool(self, name: str) -> ToolDefinition | None:
        return self._server.get_tool(name)
