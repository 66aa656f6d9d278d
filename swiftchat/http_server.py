"""A small threaded HTTP server with routes, middleware and static files."""

from __future__ import annotations

import logging
import os
import socket
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import TracebackType

from swiftchat.http_request import HttpParseError, HttpRequest
from swiftchat.http_response import HttpResponse

logger = logging.getLogger(__name__)

RequestHandler = Callable[[HttpRequest], HttpResponse]
Middleware = Callable[[HttpRequest, RequestHandler], HttpResponse]

MIME_TYPES: dict[str, str] = {
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "txt": "text/plain",
}

_BUFFER_SIZE = 8192
_CLIENT_TIMEOUT = 30.0
_ACCEPT_POLL = 0.5
_CORS_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
_CORS_HEADERS = "Content-Type, Authorization, X-Requested-With"


@dataclass
class Route:
    """An API endpoint: a method and exact path bound to a handler."""

    path: str
    method: str
    handler: RequestHandler
    use_auth_middleware: bool = False


class HttpServer:
    """Listens on a TCP port and answers each connection on a worker thread.

    ``middleware``, when set, wraps the handlers of routes that ask for it;
    ``static_dir`` is where GET requests that match no route are served from.
    """

    def __init__(
        self, port: int, thread_count: int | None = None, host: str = "0.0.0.0"
    ) -> None:
        self.static_dir = "./static"
        self.middleware: Middleware | None = None
        self.routes: list[Route] = []
        self.running = False

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(socket.SOMAXCONN)
        except OSError as exc:
            logger.error("Failed to set up listening socket: %s", exc)
            sock.close()
            raise
        sock.settimeout(_ACCEPT_POLL)
        self._sock: socket.socket | None = sock
        self.port: int = sock.getsockname()[1]
        self._pool = ThreadPoolExecutor(max_workers=thread_count or os.cpu_count() or 1)

    def add_route(self, route: Route) -> None:
        """Register an API route; earlier routes win over later ones."""
        self.routes.append(route)

    def run(self) -> None:
        """Accept connections until :meth:`stop` is called."""
        self.running = True
        logger.info("HTTP server is running on port %d", self.port)
        while self.running:
            sock = self._sock
            if sock is None:
                break
            try:
                conn, addr = sock.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if not self.running:
                    break
                logger.error("Failed to accept client connection: %s", exc)
                continue
            conn.settimeout(_CLIENT_TIMEOUT)
            logger.info("Accepted connection from %s:%d", addr[0], addr[1])
            try:
                self._pool.submit(self.handle_client, conn)
            except RuntimeError:
                conn.close()
                break

    def stop(self) -> None:
        """Stop accepting connections and close the listening socket."""
        self.running = False
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()

    def __enter__(self) -> HttpServer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
        self._pool.shutdown(wait=True)

    def handle_client(self, conn: socket.socket) -> None:
        """Read one request from a connection, answer it and close it."""
        with conn:
            try:
                data = conn.recv(_BUFFER_SIZE - 1)
                if not data:
                    return
                try:
                    request = HttpRequest.parse(data)
                except HttpParseError:
                    response = HttpResponse.bad_request("Invalid HTTP request format.")
                else:
                    logger.info("Request: %s %s", request.method, request.path)
                    response = self.route_request(request)
                (
                    response.with_header("Access-Control-Allow-Origin", "*")
                    .with_header("Access-Control-Allow-Methods", _CORS_METHODS)
                    .with_header("Access-Control-Allow-Headers", _CORS_HEADERS)
                    .with_header("X-Server", "SwiftChat/1.0")
                )
                conn.sendall(response.serialize())
            except Exception as exc:
                logger.error("Exception in handle_client: %s", exc)
                try:
                    conn.sendall(HttpResponse.internal_error().serialize())
                except OSError:
                    pass

    def route_request(self, request: HttpRequest) -> HttpResponse:
        """Answer a request from the routes, the static directory or with 404."""
        if request.method == "OPTIONS":
            logger.info("Handling CORS preflight request for: %s", request.path)
            return (
                HttpResponse.ok()
                .with_header("Access-Control-Allow-Origin", "*")
                .with_header("Access-Control-Allow-Methods", _CORS_METHODS)
                .with_header("Access-Control-Allow-Headers", _CORS_HEADERS)
                .with_header("Access-Control-Max-Age", "86400")
                .with_body("", "text/plain")
            )
        for route in self.routes:
            if route.method == request.method and route.path == request.path:
                if route.use_auth_middleware and self.middleware is not None:
                    return self.middleware(request, route.handler)
                return route.handler(request)
        if request.method == "GET" and self.static_dir:
            return self.serve_static_file(request.path)
        return HttpResponse.not_found("Endpoint not found")

    def serve_static_file(self, path: str) -> HttpResponse:
        """Serve a file below ``static_dir``; ``/`` maps to ``index.html``."""
        if ".." in path:
            return HttpResponse.forbidden("Path traversal not allowed.")
        full_path = self.static_dir + ("/index.html" if path == "/" else path)
        try:
            with open(full_path, "rb") as handle:
                content = handle.read()
        except OSError:
            return HttpResponse.not_found("Static file not found.")

        head, dot, ext = full_path.rpartition(".")
        mime_type = MIME_TYPES.get(ext, "application/octet-stream") if dot else (
            "application/octet-stream"
        )
        return (
            HttpResponse.ok()
            .with_body(content, mime_type)
            .with_header("Cache-Control", "public, max-age=3600")
        )