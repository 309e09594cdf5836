"""Bridge between line-oriented stdio MCP clients and the HTTP endpoint.

Stdio clients write one JSON-RPC message per line. The bridge forwards each
message as an HTTP POST and writes the decoded response back as one line.
Requests are handled strictly one at a time; a failed forward becomes an
error envelope and is never retried.
"""

from __future__ import annotations

import json
import logging
import signal
import sys
import threading
from types import FrameType
from typing import Any, TextIO

import requests

from mcp_models.config import BridgeConfig
from mcp_models.errors import INTERNAL_ERROR, PARSE_ERROR, error_envelope

logger = logging.getLogger(__name__)

NO_CONTENT_STATUSES = {202, 204}


class StdioBridge:
    """Forward JSON-RPC lines from an input stream to an HTTP endpoint."""

    def __init__(
        self,
        config: BridgeConfig,
        *,
        session: requests.Session | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """Create a bridge for the configured endpoint and streams."""
        self.config = config
        self._session = session or requests.Session()
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._running = False
        self._reading = False

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def run(self, *, handle_signals: bool = True) -> int:
        """Run the read-forward-write loop until end of input.

        Args:
            handle_signals: Install SIGINT/SIGTERM handlers that stop the loop
                once the in-flight line is finished.

        Returns:
            Process exit status: 0 on end of input or interrupt, 1 when the
            input stream cannot be read.
        """
        logger.info("MCP stdio bridge starting...")
        logger.info("Connecting to: %s", self.endpoint)

        previous = self._install_signal_handlers() if handle_signals else {}
        self._running = True
        try:
            while self._running:
                self._reading = True
                try:
                    line = self._read_line()
                except KeyboardInterrupt:
                    logger.info("Received interrupt signal, shutting down...")
                    break
                except (OSError, ValueError):
                    logger.exception("Fatal error reading input stream")
                    return 1
                finally:
                    self._reading = False
                if not line:
                    break
                try:
                    envelope = self.process_line(line)
                    if envelope is not None:
                        self._write(envelope)
                except OSError:
                    logger.exception("Fatal error writing output stream")
                    return 1
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, shutting down...")
        finally:
            self._running = False
            for signum, handler in previous.items():
                if handler is not None:
                    signal.signal(signum, handler)

        logger.info("MCP stdio bridge stopped")
        return 0

    def stop(self) -> None:
        """Ask the loop to exit after the current line."""
        self._running = False

    def process_line(self, line: str | bytes) -> dict[str, Any] | None:
        """Turn one input line into the envelope to write, if any.

        Raw bytes are decoded as UTF-8; a line that fails to decode or parse
        yields a parse error envelope with a null identifier.
        """
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning("Input line is not valid UTF-8: %s", exc)
                return error_envelope(None, PARSE_ERROR, f"Parse error: {exc}")
        text = line.strip()
        if not text:
            return None
        try:
            request = json.loads(text)
        except (ValueError, RecursionError) as exc:
            logger.warning("JSON parse error: %s", exc)
            return error_envelope(None, PARSE_ERROR, f"Parse error: {exc}")

        if isinstance(request, dict):
            logger.debug("Received: %s", request.get("method"))
        try:
            return self.forward(request)
        except Exception as exc:
            logger.exception("Unexpected bridge failure")
            return error_envelope(
                _request_id(request), INTERNAL_ERROR, f"Internal error: {exc}"
            )

    def forward(self, request: Any) -> dict[str, Any] | None:
        """POST a JSON-RPC request and decode the endpoint's response.

        Transport failures are reported as JSON-RPC internal errors carrying
        the request's identifier.
        """
        request_id = _request_id(request)
        url = self.endpoint
        try:
            response = self._session.post(
                url,
                data=json.dumps(request),
                headers=self._headers(),
                timeout=(self.config.connect_timeout, self.config.read_timeout),
            )
        except requests.Timeout:
            logger.warning("Request to %s timed out", url)
            return error_envelope(
                request_id, INTERNAL_ERROR, f"Request timed out: {url}"
            )
        except requests.ConnectionError:
            logger.warning("Connection refused: make sure the server is running on %s", url)
            return error_envelope(
                request_id,
                INTERNAL_ERROR,
                f"Connection refused: server not accessible at {url}",
            )
        except requests.RequestException as exc:
            logger.warning("HTTP forward error: %s", exc)
            return error_envelope(
                request_id, INTERNAL_ERROR, f"Connection error: {exc}"
            )

        if response.status_code in NO_CONTENT_STATUSES and _is_notification(request):
            return None
        if response.status_code != 200:
            logger.debug("HTTP error %s: %s", response.status_code, response.text)
            return error_envelope(
                request_id, INTERNAL_ERROR, f"HTTP error: {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse HTTP response: %s", exc)
            logger.debug("Response body: %s", response.text)
            return error_envelope(
                request_id, INTERNAL_ERROR, "Invalid response from server"
            )
        if not isinstance(payload, dict):
            logger.debug("Response body: %s", response.text)
            return error_envelope(
                request_id, INTERNAL_ERROR, "Invalid response from server"
            )
        return payload

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-MCP-Internal": "true",
        }
        headers.update(self.config.auth.request_headers())
        return headers

    def _read_line(self) -> str | bytes:
        # Read undecoded bytes when the stream exposes its buffer.
        buffer = getattr(self._stdin, "buffer", None)
        if buffer is not None:
            return buffer.readline()
        return self._stdin.readline()

    def _write(self, envelope: dict[str, Any]) -> None:
        self._stdout.write(json.dumps(envelope) + "\n")
        self._stdout.flush()

    def _install_signal_handlers(self) -> dict[int, Any]:
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._on_signal)
        return previous

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.info("Received signal %s, finishing current request", signum)
        self._running = False
        if self._reading:
            raise KeyboardInterrupt


def _request_id(request: Any) -> object:
    if isinstance(request, dict):
        return request.get("id")
    return None


def _is_notification(request: Any) -> bool:
    return isinstance(request, dict) and "id" not in request
