"""Coverage for the FastAPI host of the dispatcher."""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from mcp_models.config import AuthConfig, AuthStrategy, ServerConfig
from mcp_models_server.backends import InMemoryBackend
from mcp_models_server.dispatcher import JsonRpcDispatcher
from mcp_models_server.http_app import create_app
from mcp_models_server.registry import ToolRegistry

LIST_REQUEST = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "tools/call",
    "params": {"name": "list_widgets", "arguments": {}},
}


def _client(registry: ToolRegistry, config: ServerConfig) -> TestClient:
    dispatcher = JsonRpcDispatcher(registry, InMemoryBackend(), config)
    return TestClient(create_app(dispatcher, config))


def test_post_returns_json_rpc_response(registry: ToolRegistry) -> None:
    """A POST with a JSON-RPC body answers with the dispatcher's envelope."""
    client = _client(registry, ServerConfig())

    response = client.post("/mcp", json=LIST_REQUEST)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json()["result"]["content"][0]["text"] == "[]"


def test_malformed_body_is_still_200(registry: ToolRegistry) -> None:
    """Parse errors are protocol errors, not HTTP errors."""
    client = _client(registry, ServerConfig())

    response = client.post(
        "/mcp", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 200
    assert response.json()["error"]["code"] == -32700


def test_notifications_return_202(registry: ToolRegistry) -> None:
    """Notifications produce no body."""
    client = _client(registry, ServerConfig())

    response = client.post(
        "/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"}
    )

    assert response.status_code == 202
    assert response.content == b""


def test_token_strategy(registry: ToolRegistry) -> None:
    """The token strategy requires a matching bearer token."""
    config = ServerConfig(auth=AuthConfig(strategy=AuthStrategy.TOKEN, token="s3cret"))
    client = _client(registry, config)

    denied = client.post("/mcp", json=LIST_REQUEST)
    wrong = client.post(
        "/mcp", json=LIST_REQUEST, headers={"Authorization": "Bearer nope"}
    )
    allowed = client.post(
        "/mcp", json=LIST_REQUEST, headers={"Authorization": "Bearer s3cret"}
    )

    assert denied.status_code == 401
    assert denied.json() == {"error": "Unauthorized"}
    assert wrong.status_code == 401
    assert allowed.status_code == 200


def test_api_key_strategy(registry: ToolRegistry) -> None:
    """The api_key strategy checks the X-API-Key header."""
    config = ServerConfig(auth=AuthConfig(strategy=AuthStrategy.API_KEY, api_key="k-1"))
    client = _client(registry, config)

    assert client.post("/mcp", json=LIST_REQUEST).status_code == 401
    response = client.post("/mcp", json=LIST_REQUEST, headers={"X-API-Key": "k-1"})
    assert response.status_code == 200


def test_cross_origin_requires_internal_marker(registry: ToolRegistry) -> None:
    """Browser origins are rejected unless allowed or marked internal."""
    config = ServerConfig(allowed_origins=["https://trusted.example"])
    client = _client(registry, config)

    blocked = client.post(
        "/mcp", json=LIST_REQUEST, headers={"Origin": "https://evil.example"}
    )
    trusted = client.post(
        "/mcp", json=LIST_REQUEST, headers={"Origin": "https://trusted.example"}
    )
    internal = client.post(
        "/mcp",
        json=LIST_REQUEST,
        headers={"Origin": "https://evil.example", "X-MCP-Internal": "true"},
    )

    assert blocked.status_code == 403
    assert trusted.status_code == 200
    assert internal.status_code == 200


def test_request_logging(registry: ToolRegistry, caplog) -> None:
    """log_requests writes request and response bodies to the log."""
    client = _client(registry, ServerConfig(log_requests=True))

    with caplog.at_level("INFO", logger="mcp_models_server.http_app"):
        client.post("/mcp", content=json.dumps(LIST_REQUEST))

    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("MCP Request:") for message in messages)
    assert any(message.startswith("MCP Response:") for message in messages)
