"""Main HTTP server.

Serves the public status document and, in admin mode, the open/close
endpoints. Connections are handled on separate threads, all sharing one
SpaceGuard.
"""

import json
import logging
import signal
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional
from urllib.parse import urlparse

from spaceapi.api import STATUS_V14_PATH
from spaceapi_server.config import SpaceConfig
from spaceapi_server.guard import SpaceGuard
from spaceapi_server.routes import build_routes, _error_response

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_PORT = 8000
DEFAULT_BIND = "127.0.0.1"

# Largest request payload read and discarded on a kept-alive connection
MAX_DRAIN_BYTES = 64 * 1024


class SpaceHTTPServer(ThreadingHTTPServer):
    """ThreadingHTTPServer carrying the guard and route table."""

    daemon_threads = True

    def __init__(self, server_address, handler_class, guard: SpaceGuard, routes: dict):
        self.guard = guard
        self.routes = routes
        super().__init__(server_address, handler_class)


class ServerHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the status server."""

    server_version = "spaceapi-dezentrale-server"

    def log_message(self, format: str, *args):
        """Override to use Python logging."""
        logger.info("%s - %s", self.address_string(), format % args)

    def send_json(self, data: dict, status: int = 200, extra_headers: Optional[dict] = None):
        """Send JSON response."""
        body = json.dumps(data, indent=2).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def send_empty(self, status: int = 200):
        """Send response without body."""
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        """Handle GET requests."""
        self._dispatch("GET")

    def do_POST(self):
        """Handle POST requests."""
        self._dispatch("POST")

    def _drain_body(self) -> bool:
        """Discard the request payload; the admin endpoints take none.

        Returns:
            False if Content-Length is invalid (a 400 has been sent)
        """
        raw = self.headers.get("Content-Length")
        try:
            length = int(raw or 0)
        except ValueError:
            length = -1
        if length < 0:
            self.close_connection = True
            self.send_json(_error_response("E101", "Invalid Content-Length"), 400)
            return False

        if length > MAX_DRAIN_BYTES:
            # Left unread; the connection is closed after the response
            self.close_connection = True
        elif length:
            self.rfile.read(length)
        return True

    def _dispatch(self, method: str):
        parsed = urlparse(self.path)
        path = parsed.path.rstrip("/") or "/"

        handler = self.server.routes.get((method, path))
        if handler is None:
            # Any payload stays unread
            self.close_connection = True
            self.send_json(
                _error_response("E100", f"Unknown endpoint: {method} {path}"), 404
            )
            return

        if method == "POST" and not self._drain_body():
            return

        try:
            body, status = handler(self.server.guard, self.headers)
        except Exception:
            logger.exception("Unexpected error handling %s %s", method, path)
            self.send_json(_error_response("E500", "Internal server error"), 500)
            return

        if body is None:
            self.send_empty(status)
            return

        extra_headers = None
        if path == STATUS_V14_PATH:
            # Status documents are fetched cross-origin by directory sites
            extra_headers = {"Access-Control-Allow-Origin": "*"}
        self.send_json(body, status, extra_headers)


class Server:
    """Status server for one space."""

    def __init__(
        self,
        config: SpaceConfig,
        bind: str = DEFAULT_BIND,
        port: int = DEFAULT_PORT,
    ):
        """Initialize server.

        Args:
            config: Space configuration; in admin mode it must carry an
                API key (see config.ensure_api_key)
            bind: Address to bind to
            port: Port to listen on (0 lets the OS pick one)
        """
        self.config = config
        self.bind = bind
        self.port = port
        self.guard: Optional[SpaceGuard] = None
        self.server: Optional[SpaceHTTPServer] = None
        self._serving = False

    def start(self):
        """Bind the HTTP server.

        Raises:
            RuntimeError: If server cannot be started
        """
        admin = self.config.admin
        if admin.enabled and not admin.api_key:
            raise RuntimeError("Admin mode is enabled but no API key is configured")

        self.guard = SpaceGuard(
            self.config.publish,
            api_key=admin.api_key if admin.enabled else None,
        )
        routes = build_routes(admin.enabled)

        try:
            self.server = SpaceHTTPServer(
                (self.bind, self.port), ServerHandler, self.guard, routes
            )
        except OSError as e:
            logger.error("Failed to bind %s:%d: %s", self.bind, self.port, e)
            raise RuntimeError(f"Bind failed: {e}") from e

        # Log startup info
        logger.info("Server starting on http://%s:%d", self.bind, self.server.server_address[1])
        logger.info("Publishing space: %s", self.config.publish.space)
        logger.info("Admin endpoints: %s", "enabled" if admin.enabled else "disabled")

        if threading.current_thread() is threading.main_thread():
            self._setup_signal_handlers()

    @property
    def address(self) -> tuple:
        """Actual (host, port) the server is bound to."""
        if not self.server:
            raise RuntimeError("Server not started")
        return self.server.server_address[:2]

    def serve_forever(self):
        """Start serving requests."""
        if not self.server:
            raise RuntimeError("Server not started")

        self._serving = True
        try:
            self.server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutdown requested")
        finally:
            self.shutdown()

    def shutdown(self):
        """Shutdown the server. State is discarded."""
        server, self.server = self.server, None
        if server:
            logger.info("Shutting down server")
            # socketserver.shutdown() waits for a serve_forever loop to exit
            if self._serving:
                server.shutdown()
            server.server_close()
        self._serving = False

    def _setup_signal_handlers(self):
        """Setup signal handler for graceful shutdown."""

        def handle_sigterm(signum, frame):
            """Handle SIGTERM for graceful shutdown."""
            logger.info("Received SIGTERM")
            sys.exit(0)

        signal.signal(signal.SIGTERM, handle_sigterm)


def create_server(
    config: SpaceConfig,
    bind: str = DEFAULT_BIND,
    port: int = DEFAULT_PORT,
) -> Server:
    """Create a server instance (not yet started)."""
    return Server(config=config, bind=bind, port=port)
