"""Shared test fixtures."""

from __future__ import annotations

import json
from typing import Any

import pytest

from mcp_models_server.backends import InMemoryBackend, validates_presence
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.dispatcher import JsonRpcDispatcher
from mcp_models_server.registry import ToolRegistry


@pytest.fixture()
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio, the loop FastMCP's client requires."""
    return "asyncio"


@pytest.fixture()
def widget_descriptor() -> ModelDescriptor:
    """Provide the widget model used throughout the tests."""
    return ModelDescriptor.build(
        "widget",
        ["id", "name", "price"],
        writable=["name", "price"],
        column_types={"id": "integer", "name": "string", "price": "integer"},
    )


@pytest.fixture()
def backend() -> InMemoryBackend:
    """Provide an in-memory backend that requires widget names."""
    return InMemoryBackend(validators={"widget": [validates_presence("name")]})


@pytest.fixture()
def registry(widget_descriptor: ModelDescriptor) -> ToolRegistry:
    """Provide a registry with the widget tools published."""
    registry = ToolRegistry()
    registry.register(widget_descriptor)
    registry.reload()
    return registry


@pytest.fixture()
def dispatcher(registry: ToolRegistry, backend: InMemoryBackend) -> JsonRpcDispatcher:
    """Provide a dispatcher bound to the widget registry."""
    return JsonRpcDispatcher(registry, backend)


@pytest.fixture()
def rpc(dispatcher: JsonRpcDispatcher):
    """Send one request through the dispatcher and decode the reply."""
    counter = {"id": 0}

    def call(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        counter["id"] += 1
        request = {"jsonrpc": "2.0", "id": counter["id"], "method": method}
        if params is not None:
            request["params"] = params
        raw = dispatcher.handle(json.dumps(request).encode())
        assert raw is not None
        return json.loads(raw)

    return call
