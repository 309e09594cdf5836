"""Tests for the tool registry."""

from __future__ import annotations

import threading

import pytest

from mcp_models.server import MCPServer
from mcp_models.tools import ToolDefinition
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.registry import ToolRegistry


class _RecordingSink:
    """Sink capturing installed tools."""

    def __init__(self) -> None:
        self.tools: list[ToolDefinition] = []

    def register_tools(self, *tools: ToolDefinition) -> None:
        self.tools.extend(tools)


def test_register_and_reload_publish_tools(widget_descriptor: ModelDescriptor) -> None:
    """reload materializes registered descriptors into the published server."""
    registry = ToolRegistry()
    registry.register(widget_descriptor)

    assert registry.server.available_tools() == []
    registry.reload()

    assert registry.is_registered("widget")
    assert not registry.is_registered("gadget")
    assert registry.get_tool("create_widget") is not None
    assert len(registry.server) == 5


def test_materialize_installs_into_any_sink(widget_descriptor: ModelDescriptor) -> None:
    """materialize hands every generated tool to the sink."""
    registry = ToolRegistry()
    registry.register(widget_descriptor)
    sink = _RecordingSink()

    tools = registry.materialize(sink)

    assert [tool.name for tool in sink.tools] == [tool.name for tool in tools]
    assert len(tools) == 5


def test_clear_then_reload_is_idempotent(widget_descriptor: ModelDescriptor) -> None:
    """Rebuilding from the same descriptors yields identical tool metadata."""
    registry = ToolRegistry()
    registry.register(widget_descriptor)
    before = registry.reload().to_catalog()

    registry.clear()
    assert registry.server.available_tools() == []
    assert registry.descriptors == ()

    registry.register(widget_descriptor)
    after = registry.reload().to_catalog()

    assert before == after


def test_reload_replaces_descriptors(widget_descriptor: ModelDescriptor) -> None:
    """reload with descriptors swaps the whole tool set at once."""
    registry = ToolRegistry()
    registry.reload([widget_descriptor])
    old_server = registry.server

    report = ModelDescriptor.build("report", ["id", "title"], read_only=True)
    new_server = registry.reload([report])

    assert old_server is not new_server
    assert old_server.available_tools()[0] == "create_widget"
    assert new_server.available_tools() == ["get_report", "list_reports"]


def test_duplicate_descriptors_fail_on_reload(widget_descriptor: ModelDescriptor) -> None:
    """Registering a descriptor twice is caught when tools are installed."""
    registry = ToolRegistry()
    registry.register(widget_descriptor)
    registry.register(widget_descriptor)

    with pytest.raises(ValueError):
        registry.reload()
    assert registry.server.available_tools() == []


def test_readers_never_see_partial_tables(widget_descriptor: ModelDescriptor) -> None:
    """Concurrent readers observe either the empty or the complete tool set."""
    registry = ToolRegistry()
    report = ModelDescriptor.build("report", ["id", "title"], read_only=True)
    seen: set[int] = set()
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            server: MCPServer = registry.server
            seen.add(len(server))

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for _ in range(50):
            registry.reload([widget_descriptor, report])
            registry.reload([widget_descriptor])
    finally:
        stop.set()
        thread.join()

    assert seen <= {0, 5, 7}
