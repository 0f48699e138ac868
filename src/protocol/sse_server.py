"""SSE/HTTP transport MCP server."""

import logging
import os
from typing import List, Optional

from mcp.server.sse import SseServerTransport

from protocol.base_server import BaseMCPServer

logger = logging.getLogger(__name__)

DEV_ORIGINS = ["http://localhost:3000", "http://localhost:8000"]


def get_allowed_origins() -> List[str]:
    """CORS origins from CORS_ALLOWED_ORIGINS, with localhost defaults in development."""
    configured = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if configured:
        return [origin.strip() for origin in configured.split(",") if origin.strip()]

    if os.getenv("ENVIRONMENT", "development") == "development":
        return list(DEV_ORIGINS)

    logger.warning("CORS_ALLOWED_ORIGINS not set outside development; cross-origin SSE clients are refused")
    return []


def _request_origin(scope) -> Optional[str]:
    for name, value in scope.get("headers", []):
        if name == b"origin":
            return value.decode()
    return None


class SseMCPServer(BaseMCPServer):
    """MCP server using HTTP/SSE transport.

    Exposes an ASGI app with two routes relative to its mount point:
    ``GET /`` opens the event stream, ``POST <messages_path>`` carries
    client messages for an open stream.
    """

    def __init__(self, *args, messages_path: str = "/messages", **kwargs):
        super().__init__(*args, **kwargs)
        self.messages_path = messages_path
        self.sse_transport = SseServerTransport(messages_path)
        logger.info(f"SSE transport ready (messages path: {messages_path})")

    async def handle_sse_connection(self, scope, receive, send):
        """Run one MCP session over an event stream."""
        logger.info("SSE client connected")
        async with self.sse_transport.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )
        logger.info("SSE client disconnected")

    def _cors_headers(self, origin: Optional[str], allowed_origins: List[str], preflight: bool = False) -> list:
        """Headers granting ``origin`` access, or nothing when it is not allowed."""
        if not origin or not (origin in allowed_origins or "*" in allowed_origins):
            return []

        headers = [
            (b"access-control-allow-origin", origin.encode()),
            (b"access-control-allow-credentials", b"true"),
        ]
        if preflight:
            max_age = self.app_config.http_config.cors_preflight_max_age
            headers += [
                (b"access-control-allow-methods", b"GET, POST, OPTIONS"),
                (b"access-control-allow-headers", b"Content-Type, Authorization"),
                (b"access-control-max-age", str(max_age).encode()),
            ]
        return headers

    async def _respond(self, send, status: int, headers: list, body: bytes = b""):
        await send({"type": "http.response.start", "status": status, "headers": headers})
        await send({"type": "http.response.body", "body": body})

    def create_asgi_app(self, allowed_origins: Optional[List[str]] = None):
        """Build the ASGI callable serving the stream and message routes.

        Args:
            allowed_origins: CORS origins; read from the environment when None
        """
        if allowed_origins is None:
            allowed_origins = get_allowed_origins()

        async def app(scope, receive, send):
            path = scope.get("path", "/")
            method = scope.get("method", "GET")
            origin = _request_origin(scope)

            if method == "OPTIONS":
                headers = [(b"content-type", b"text/plain"), (b"content-length", b"0")]
                await self._respond(send, 200, headers + self._cors_headers(origin, allowed_origins, preflight=True))
                return

            cors = self._cors_headers(origin, allowed_origins)

            async def send_with_cors(message):
                if message["type"] == "http.response.start" and cors:
                    message["headers"] = list(message.get("headers", [])) + cors
                await send(message)

            if method == "GET" and path.endswith("/"):
                await self.handle_sse_connection(scope, receive, send_with_cors)
            elif method == "POST" and path.rstrip("/").endswith(self.messages_path):
                await self.sse_transport.handle_post_message(scope, receive, send_with_cors)
            else:
                logger.warning(f"No SSE route for {method} {path}")
                await self._respond(send_with_cors, 404, [(b"content-type", b"text/plain")], b"Not Found")

        return app
