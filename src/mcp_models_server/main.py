"""Entry point for the MCP models server."""

from __future__ import annotations

import argparse
import json
import logging
import sys

import uvicorn

from mcp_models.config import ServerConfig
from mcp_models_server.backends import Backend, InMemoryBackend, SQLiteBackend
from mcp_models_server.descriptors import ModelDescriptor
from mcp_models_server.dispatcher import JsonRpcDispatcher
from mcp_models_server.fastmcp_adapter import build_fastmcp_app
from mcp_models_server.http_app import create_app
from mcp_models_server.registry import ToolRegistry

LOG_FORMAT = "[mcp-models] %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the server CLI."""
    parser = argparse.ArgumentParser(description="MCP models server")
    parser.add_argument("--catalog", action="store_true", help="Print the tool catalog")
    parser.add_argument(
        "--transport",
        choices=["jsonrpc", "stdio", "http", "sse"],
        default="jsonrpc",
        help="jsonrpc serves the plain JSON-RPC endpoint; the rest use FastMCP.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    parser.add_argument("--port", type=int, default=8000, help="Bind port.")
    parser.add_argument("--path", default=None, help="Endpoint path.")
    parser.add_argument("--database", help="SQLite database whose tables are exposed.")
    parser.add_argument(
        "--table",
        action="append",
        default=[],
        help="Expose only this table (repeatable).",
    )
    parser.add_argument(
        "--read-only",
        action="append",
        default=[],
        metavar="TABLE",
        help="Expose this table with list/get tools only (repeatable).",
    )
    return parser


def load_models(args: argparse.Namespace) -> tuple[Backend, list[ModelDescriptor]]:
    """Open the backend named on the command line and describe its models."""
    if not args.database:
        return InMemoryBackend(), []
    backend = SQLiteBackend(args.database)
    if not args.table:
        return backend, backend.describe_all(read_only=args.read_only)
    read_only = set(args.read_only)
    descriptors = [
        backend.describe(table, read_only=table in read_only) for table in args.table
    ]
    return backend, descriptors


def main(argv: list[str] | None = None) -> int:
    """Register tools and serve them, or print a JSON catalog."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(stream=sys.stderr, level=logging.INFO, format=LOG_FORMAT)

    config = ServerConfig.from_env()
    if args.path:
        config = config.model_copy(update={"path": args.path})

    backend, descriptors = load_models(args)
    registry = ToolRegistry()
    server = registry.reload(descriptors)

    if args.catalog:
        print(json.dumps(server.to_catalog(), indent=2))
        return 0

    if args.transport == "jsonrpc":
        app = create_app(JsonRpcDispatcher(registry, backend, config), config)
        uvicorn.run(app, host=args.host, port=args.port, log_level="info")
        return 0

    fastmcp_app = build_fastmcp_app(registry, backend, config)
    if args.transport == "stdio":
        fastmcp_app.run(transport="stdio")
    else:
        fastmcp_app.run(
            transport=args.transport, host=args.host, port=args.port, path=config.path
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
