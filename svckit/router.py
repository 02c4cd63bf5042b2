"""The REST router: a WSGI application dispatching requests to handler chains.

Routes use ``:name`` segments for path parameters and a final ``*name``
segment for a catch-all parameter. Every request, matched or not, runs
through the router's middleware first. Unmatched requests, including those
whose method has no route, get a plain ``404 page not found``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Set, Tuple

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, RequestRedirect, Rule
from werkzeug.wrappers import Request

from svckit.route import CONTENT_TYPE, Exchange, Handler

_NOT_FOUND_BODY = "404 page not found"


@dataclass(frozen=True)
class RouteInfo:
    """A registered route's method and path."""

    method: str
    path: str


def _not_found(exchange: Exchange) -> None:
    exchange.status = 404
    exchange.headers[CONTENT_TYPE] = "text/plain"
    exchange.write(_NOT_FOUND_BODY)


def _to_rule(path: str) -> Tuple[str, Set[str]]:
    """Turn a ``:name``/``*name`` route path into a rule string."""
    segments = path.split("/")
    catch_all: Set[str] = set()
    converted = []
    for position, segment in enumerate(segments):
        if segment.startswith(":") and len(segment) > 1:
            converted.append(f"<{segment[1:]}>")
        elif segment.startswith("*") and len(segment) > 1:
            if position != len(segments) - 1:
                raise ValueError(
                    f"catch-all parameter must be the last segment in {path!r}"
                )
            catch_all.add(segment[1:])
            converted.append(f"<path:{segment[1:]}>")
        else:
            converted.append(segment)
    return "/".join(converted), catch_all


class Router:
    """Routes requests to handler chains, running middleware first."""

    def __init__(self, *args: Handler) -> None:
        self._middleware: List[Handler] = list(args)
        self._map = Map()
        self._routes: List[RouteInfo] = []
        self._handlers: List[List[Handler]] = []
        self._catch_all: List[Set[str]] = []

    def __call__(
        self, environ: Dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        adapter = self._map.bind_to_environ(environ)
        try:
            endpoint, params = adapter.match()
        except RequestRedirect as redirect:
            return redirect.get_response(environ)(environ, start_response)
        except HTTPException:
            handlers = [*self._middleware, _not_found]
            params = {}
        else:
            handlers = [*self._middleware, *self._handlers[endpoint]]
            params = {
                key: f"/{value}" if key in self._catch_all[endpoint] else str(value)
                for key, value in params.items()
            }

        exchange = Exchange(Request(environ), params, handlers)
        exchange.next()
        return exchange.to_response()(environ, start_response)

    def add_route(self, method: str, path: str, *args: Handler) -> None:
        """Register a chain of handlers for ``method`` and ``path``."""
        method = method.upper()
        if not path.startswith("/"):
            raise ValueError(f"path must begin with '/': {path!r}")
        if not args:
            raise ValueError("there must be at least one handler")

        info = RouteInfo(method=method, path=path)
        if info in self._routes:
            raise ValueError(f"route {method} {path} is already registered")

        rule, catch_all = _to_rule(path)
        endpoint = len(self._routes)
        self._map.add(Rule(rule, methods=[method], endpoint=endpoint))
        self._routes.append(info)
        self._handlers.append(list(args))
        self._catch_all.append(catch_all)

    def get(self, path: str, *args: Handler) -> None:
        self.add_route("GET", path, *args)

    def post(self, path: str, *args: Handler) -> None:
        self.add_route("POST", path, *args)

    def put(self, path: str, *args: Handler) -> None:
        self.add_route("PUT", path, *args)

    def delete(self, path: str, *args: Handler) -> None:
        self.add_route("DELETE", path, *args)

    def register_routes(self, routes: Any) -> None:
        """Let ``routes`` register itself through its ``register_routes``."""
        routes.register_routes(self)

    def register_routes_func(self, fn: Callable[["Router"], None]) -> None:
        """Let ``fn`` register routes on this router."""
        fn(self)

    def get_routes(self) -> List[RouteInfo]:
        """Return the registered routes in registration order."""
        return list(self._routes)