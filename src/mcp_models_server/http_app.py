"""HTTP host exposing the JSON-RPC dispatcher with FastAPI."""

from __future__ import annotations

import hmac
import logging

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from mcp_models.config import AuthStrategy, ServerConfig
from mcp_models.errors import INTERNAL_ERROR, error_envelope
from mcp_models_server.dispatcher import JsonRpcDispatcher

logger = logging.getLogger(__name__)

INTERNAL_HEADER = "X-MCP-Internal"


def _secure_compare(supplied: str | None, expected: str | None) -> bool:
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def is_authorized(request: Request, config: ServerConfig) -> bool:
    """Apply the configured authentication strategy to ``request``."""
    strategy = config.auth.strategy
    if strategy is AuthStrategy.TOKEN:
        header = request.headers.get("Authorization", "")
        token = header[len("Bearer "):].strip() if header.startswith("Bearer ") else ""
        return _secure_compare(token, config.auth.token)
    if strategy is AuthStrategy.API_KEY:
        return _secure_compare(request.headers.get("X-API-Key"), config.auth.api_key)
    return True


def is_allowed_origin(request: Request, config: ServerConfig) -> bool:
    """Reject browser cross-origin calls unless marked as internal."""
    if request.headers.get(INTERNAL_HEADER, "").lower() == "true":
        return True
    origin = request.headers.get("Origin")
    if origin is None:
        return True
    return origin in config.allowed_origins


def create_app(dispatcher: JsonRpcDispatcher, config: ServerConfig | None = None) -> FastAPI:
    """Build the FastAPI application serving ``dispatcher`` at ``config.path``."""
    settings = config or dispatcher.config
    app = FastAPI(title=settings.name, version=settings.version)

    @app.post(settings.path)
    async def handle(request: Request) -> Response:
        if not is_authorized(request, settings):
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        if not is_allowed_origin(request, settings):
            return JSONResponse({"error": "Forbidden origin"}, status_code=403)

        body = await request.body()
        if settings.log_requests:
            logger.info("MCP Request: %s", body.decode("utf-8", errors="replace"))
        try:
            payload = await run_in_threadpool(dispatcher.handle, body)
        except Exception as exc:
            logger.exception("MCP Error: %s", exc)
            return JSONResponse(
                error_envelope(None, INTERNAL_ERROR, f"Internal error: {exc}"),
                status_code=500,
            )

        if payload is None:
            return Response(status_code=202)
        if settings.log_requests:
            logger.info("MCP Response: %s", payload.decode("utf-8", errors="replace"))
        return Response(content=payload, media_type="application/json")

    return app
