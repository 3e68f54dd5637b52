"""The HTTP API server that exposes token-protected endpoints."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlsplit

_log = logging.getLogger(__name__)

TOKEN_MISSING_MSG = "api token is empty or has not been set. exiting"


class ApiError(Exception):
    """Raised when the API cannot be configured or started."""


@dataclass
class ApiRequest:
    """An incoming HTTP request as seen by handlers."""

    method: str = "GET"
    path: str = "/"
    query: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str:
        """Return the header value, matched case-insensitively, or an empty string."""
        wanted = name.lower()
        return next((v for k, v in self.headers.items() if k.lower() == wanted), "")


@dataclass
class ApiResponse:
    """The response a handler produces."""

    status: int = HTTPStatus.OK
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


Handler = Callable[[ApiRequest], Optional[ApiResponse]]


class API:
    """HTTP server serving the registered API endpoints, guarded by a bearer token."""

    def __init__(self, token: str, port: int = 8080) -> None:
        self.token = token
        self.port = port
        self._routes: dict[str, Handler] = {}
        self._server: Optional[ThreadingHTTPServer] = None

    @property
    def has_handlers(self) -> bool:
        """Whether any endpoint has been registered."""
        return bool(self._routes)

    def require_token(self, fn: Handler) -> Handler:
        """Wrap ``fn`` so that it only runs for requests carrying the right bearer token."""

        def _guarded(request: ApiRequest) -> Optional[ApiResponse]:
            if request.header("Authorization") != f"Bearer {self.token}":
                return ApiResponse(status=HTTPStatus.UNAUTHORIZED)
            _log.debug("Valid token found.")
            return fn(request)

        return _guarded

    def register_func(self, path: str, fn: Handler) -> None:
        """Register a token-protected handler function for ``path``."""
        if path in self._routes:
            raise ApiError(f"multiple registrations for {path}")
        self._routes[path] = self.require_token(fn)

    def register_handler(self, path: str, handler: Any) -> None:
        """Register a token-protected handler object (one with a ``handle`` method) for ``path``."""
        self.register_func(path, handler.handle)

    def dispatch(self, request: ApiRequest) -> ApiResponse:
        """Route a request to its handler and return the response."""
        handler = self._routes.get(request.path)
        if handler is None:
            return ApiResponse(status=HTTPStatus.NOT_FOUND, body=b"404 page not found\n")
        return handler(request) or ApiResponse()

    def start(self, block: bool) -> None:
        """Serve the API over HTTP, in this thread if ``block`` is true, otherwise in the background."""
        if not self._routes:
            _log.debug("Watchtower HTTP API skipped.")
            return
        if not self.token:
            raise ApiError(TOKEN_MISSING_MSG)

        self._server = ThreadingHTTPServer(("", self.port), _request_handler_for(self))
        self.port = self._server.server_address[1]
        if block:
            self._server.serve_forever()
        else:
            threading.Thread(target=self._server.serve_forever, daemon=True).start()

    def stop(self) -> None:
        """Stop serving, if the server is running."""
        server, self._server = self._server, None
        if server is not None:
            server.shutdown()
            server.server_close()


def _request_handler_for(api: API) -> type[BaseHTTPRequestHandler]:
    class _RequestHandler(BaseHTTPRequestHandler):
        def _serve(self) -> None:
            parts = urlsplit(self.path)
            length = int(self.headers.get("Content-Length") or 0)
            request = ApiRequest(
                method=self.command,
                path=parts.path,
                query=parse_qs(parts.query, keep_blank_values=True),
                headers=dict(self.headers.items()),
                body=self.rfile.read(length) if length > 0 else b"",
            )
            response = api.dispatch(request)
            self.send_response(response.status)
            for key, value in response.headers.items():
                self.send_header(key, value)
            self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            self.wfile.write(response.body)

        do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _serve

        def log_message(self, format: str, *args: Any) -> None:
            _log.debug(format, *args)

    return _RequestHandler