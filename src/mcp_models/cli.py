"""Command-line interface for the MCP stdio bridge."""

from __future__ import annotations

import argparse
import logging
import sys

from mcp_models.bridge import StdioBridge
from mcp_models.config import AuthConfig, AuthStrategy, BridgeConfig

LOG_FORMAT = "[mcp-models] %(message)s"


def build_parser(defaults: BridgeConfig) -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="Bridge a stdio MCP client to an HTTP MCP endpoint."
    )
    parser.add_argument("--url", default=defaults.url, help="Full endpoint URL.")
    parser.add_argument("--host", default=defaults.host, help="Endpoint host.")
    parser.add_argument(
        "--port", type=int, default=defaults.port, help="Endpoint port."
    )
    parser.add_argument("--path", default=defaults.path, help="Endpoint path.")
    parser.add_argument(
        "--auth-strategy",
        choices=[strategy.value for strategy in AuthStrategy],
        default=defaults.auth.strategy.value,
        help="Authentication header to send.",
    )
    parser.add_argument("--token", default=defaults.auth.token, help="Bearer token.")
    parser.add_argument("--api-key", default=defaults.auth.api_key, help="API key.")
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=defaults.connect_timeout,
        help="Seconds to wait for a connection.",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=defaults.read_timeout,
        help="Seconds to wait for a response.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=defaults.debug,
        help="Write verbose diagnostics to stderr.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> BridgeConfig:
    """Turn parsed arguments into a :class:`BridgeConfig`."""
    return BridgeConfig(
        host=args.host,
        port=args.port,
        path=args.path,
        url=args.url,
        connect_timeout=args.connect_timeout,
        read_timeout=args.read_timeout,
        debug=args.debug,
        auth=AuthConfig(
            strategy=AuthStrategy(args.auth_strategy),
            token=args.token,
            api_key=args.api_key,
        ),
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser(BridgeConfig.from_env())
    config = config_from_args(parser.parse_args(argv))

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if config.debug else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        return StdioBridge(config).run()
    except Exception:
        logging.getLogger(__name__).exception("Fatal error")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
