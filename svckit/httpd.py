"""An HTTP server for WSGI applications with a complete lifecycle.

The server binds its listening socket when it is created, serves requests
with :meth:`Server.run`, stops accepting new connections with
:meth:`Server.unbind` and shuts down gracefully with :meth:`Server.stop`.
"""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from socketserver import ThreadingMixIn
from typing import Any, Callable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from svckit.hostutil import HostPort

DEFAULT_READ_HEADER_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 15.0
DEFAULT_IDLE_TIMEOUT = 30.0
DEFAULT_WRITE_TIMEOUT = 15.0
DEFAULT_SHUTDOWN_TIMEOUT = 5.0

DISABLED_TIMEOUT = -1.0
"""Timeout value that disables a timeout instead of using its default."""

_POLL_INTERVAL = 0.1

_log = logging.getLogger(__name__)


def timeout(set_value: float, default_value: float) -> float:
    """Return the timeout in seconds to use.

    ``DISABLED_TIMEOUT`` gives 0, a positive value is used as is, and
    anything else falls back to ``default_value``.
    """
    if set_value == DISABLED_TIMEOUT:
        return 0.0
    if set_value > 0:
        return set_value
    return default_value


@dataclass
class Config:
    """Server setup; timeouts are in seconds, 0 meaning the default."""

    interface: str = ""
    port: str = ""
    read_header_timeout: float = 0.0
    read_timeout: float = 0.0
    idle_timeout: float = 0.0
    write_timeout: float = 0.0
    shutdown_timeout: float = 0.0


class ServerError(Exception):
    """Raised when the server fails to bind, serve, unbind or shut down."""


class _Handler(WSGIRequestHandler):
    def setup(self) -> None:
        self.timeout = self.server.request_timeout or None
        super().setup()

    def log_message(self, format: str, *args: Any) -> None:
        """Send request logs to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = False
    block_on_close = True
    request_timeout: float = 0.0


class _ThreadingWSGIServer6(_ThreadingWSGIServer):
    address_family = socket.AF_INET6


class Server:
    """An HTTP server bound to an interface and port, serving a WSGI app."""

    def __init__(self, config: Config, app: Callable[..., Any]) -> None:
        host = config.interface
        server_cls = _ThreadingWSGIServer6 if ":" in host else _ThreadingWSGIServer
        try:
            port = int(config.port) if config.port else 0
            self._httpd = make_server(
                host, port, app, server_class=server_cls, handler_class=_Handler
            )
        except (OSError, ValueError) as err:
            raise ServerError(f"failed to bind HTTP server: {err}") from err

        self.read_header_timeout = timeout(
            config.read_header_timeout, DEFAULT_READ_HEADER_TIMEOUT
        )
        self.read_timeout = timeout(config.read_timeout, DEFAULT_READ_TIMEOUT)
        self.write_timeout = timeout(config.write_timeout, DEFAULT_WRITE_TIMEOUT)
        self.idle_timeout = timeout(config.idle_timeout, DEFAULT_IDLE_TIMEOUT)
        self.shutdown_timeout = timeout(
            config.shutdown_timeout, DEFAULT_SHUTDOWN_TIMEOUT
        )

        self._httpd.request_timeout = self.read_timeout
        self._httpd.timeout = _POLL_INTERVAL

        bound_host, bound_port = self._httpd.server_address[:2]
        self._address = str(HostPort(host=bound_host, port=str(bound_port)))

        self._lock = threading.Lock()
        self._closing = threading.Event()
        self._done = threading.Event()
        self._done.set()
        self._unbound = False

    def run(self) -> None:
        """Serve requests; blocks until the server is unbound or stopped."""
        with self._lock:
            if self._closing.is_set():
                return
            self._done.clear()
        try:
            while not self._closing.is_set():
                self._httpd.handle_request()
        except OSError as err:
            if not self._closing.is_set():
                raise ServerError(f"error serving: {err}") from err
        finally:
            self._done.set()

    def _halt(self, wait: float | None) -> bool:
        with self._lock:
            self._closing.set()
        return self._done.wait(wait)

    def stop(self) -> None:
        """Shut down gracefully, waiting for open connections to finish.

        Stopping an already stopped server is not an error.
        """
        if not self._halt(self.shutdown_timeout):
            raise ServerError("server shutdown failed: shutdown timeout reached")
        self._unbound = True
        self._httpd.server_close()

    def unbind(self) -> None:
        """Close the listening socket; existing connections stay open."""
        if self._unbound:
            raise ServerError(
                "failed to close listener: use of closed network connection"
            )
        self._unbound = True
        self._halt(None)
        self._httpd.socket.close()

    def address(self) -> str:
        """Return the ``host:port`` address the server is bound to."""
        return self._address