"""Configuration models for the MCP server host and the stdio bridge."""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, Field

TRUTHY = {"1", "true", "yes", "on"}


def env_flag(value: str | None, default: bool = False) -> bool:
    """Interpret an environment variable as a boolean flag."""
    if value is None or value == "":
        return default
    return value.strip().lower() in TRUTHY


class AuthStrategy(str, Enum):
    """How callers authenticate against the MCP endpoint."""

    NONE = "none"
    TOKEN = "token"
    API_KEY = "api_key"


class AuthConfig(BaseModel):
    """Authentication strategy and the matching secrets."""

    strategy: AuthStrategy = AuthStrategy.NONE
    token: str | None = None
    api_key: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AuthConfig":
        """Read ``MCP_AUTH_STRATEGY``, ``MCP_AUTH_TOKEN`` and ``MCP_API_KEY``."""
        env = os.environ if environ is None else environ
        return cls(
            strategy=AuthStrategy(env.get("MCP_AUTH_STRATEGY") or "none"),
            token=env.get("MCP_AUTH_TOKEN") or None,
            api_key=env.get("MCP_API_KEY") or None,
        )

    def request_headers(self) -> dict[str, str]:
        """Headers an outbound request needs to satisfy this strategy."""
        if self.strategy is AuthStrategy.TOKEN and self.token:
            return {"Authorization": f"Bearer {self.token}"}
        if self.strategy is AuthStrategy.API_KEY and self.api_key:
            return {"X-API-Key": self.api_key}
        return {}


class ServerConfig(BaseModel):
    """Settings consumed by the HTTP host and the dispatcher."""

    name: str = "mcp-models-server"
    version: str = "0.1.0"
    instructions: str = (
        "A data API exposed via MCP. Use the available tools to manage data."
    )
    auth: AuthConfig = Field(default_factory=AuthConfig)
    log_requests: bool = False
    path: str = "/mcp"
    allowed_origins: list[str] = Field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build a server configuration from ``MCP_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        origins = env.get("MCP_ALLOWED_ORIGINS", "")
        return cls(
            name=env.get("MCP_SERVER_NAME") or defaults.name,
            version=env.get("MCP_SERVER_VERSION") or defaults.version,
            auth=AuthConfig.from_env(env),
            log_requests=env_flag(env.get("MCP_LOG_REQUESTS")),
            path=env.get("MCP_PATH") or defaults.path,
            allowed_origins=[item.strip() for item in origins.split(",") if item.strip()],
        )


class BridgeConfig(BaseModel):
    """Settings for the stdio-to-HTTP bridge."""

    host: str = "localhost"
    port: int = 8000
    path: str = "/mcp"
    url: str | None = None
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    debug: bool = False
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @property
    def endpoint(self) -> str:
        """Full URL requests are forwarded to."""
        if self.url:
            return self.url
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"http://{self.host}:{self.port}{path}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BridgeConfig":
        """Build a bridge configuration from ``MCP_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("MCP_HOST") or defaults.host,
            port=int(env.get("MCP_PORT") or defaults.port),
            path=env.get("MCP_PATH") or defaults.path,
            url=env.get("MCP_URL") or None,
            debug=env_flag(env.get("MCP_DEBUG")),
            auth=AuthConfig.from_env(env),
        )
