"""Helpers for REST route handlers.

A route handler is a callable that takes an :class:`Exchange`. The
:func:`handle`, :func:`handle_in`, :func:`handle_out` and
:func:`handle_void` factories build such handlers from plain functions.
They decode a JSON request body into an input type, call the function
with a :class:`Context`, and encode its result as a JSON response.

When decoding or the function fails, the error is recorded on the exchange
and the chain is aborted. No error status or response body is sent, so
middleware can pick up the error and respond as it sees fit.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from werkzeug.datastructures import Headers
from werkzeug.wrappers import Request, Response

CONTENT_TYPE = "Content-Type"
APPLICATION_JSON = "application/json; charset=utf-8"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204

_ABORT_INDEX = 1 << 62

Handler = Callable[["Exchange"], None]


class BadJSONError(Exception):
    """Raised when a JSON body cannot be decoded or a value cannot be encoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def is_bad_json_error(err: Optional[BaseException]) -> bool:
    """Tell whether ``err``, or an error it was raised from, is a BadJSONError."""
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, BadJSONError):
            return True
        seen.add(id(err))
        err = err.__cause__ or err.__context__
    return False


class Exchange:
    """One request travelling through a chain of handlers, with its response.

    The response status defaults to 200; headers and body are collected
    until :meth:`to_response` builds the final response.
    """

    def __init__(
        self,
        request: Optional[Request] = None,
        params: Optional[Dict[str, str]] = None,
        handlers: Iterable[Handler] = (),
    ) -> None:
        self.request = request
        self.params: Dict[str, str] = dict(params or {})
        self.status = HTTP_OK
        self.headers = Headers()
        self.errors: List[BaseException] = []
        self._handlers: List[Handler] = list(handlers)
        self._index = -1
        self._keys: Dict[str, Any] = {}
        self._body: List[bytes] = []

    @property
    def last_error(self) -> Optional[BaseException]:
        """The most recently recorded error, or ``None``."""
        return self.errors[-1] if self.errors else None

    @property
    def written(self) -> bool:
        """Whether any part of the response body has been written."""
        return bool(self._body)

    @property
    def body(self) -> bytes:
        """The response body written so far."""
        return b"".join(self._body)

    def add_error(self, err: BaseException) -> None:
        """Record an error for middleware to inspect."""
        self.errors.append(err)

    def abort(self) -> None:
        """Prevent the remaining handlers in the chain from running."""
        self._index = _ABORT_INDEX

    def is_aborted(self) -> bool:
        return self._index >= _ABORT_INDEX

    def next(self) -> None:
        """Run the remaining handlers in order, stopping early on abort."""
        self._index += 1
        while self._index < len(self._handlers):
            self._handlers[self._index](self)
            self._index += 1

    def set(self, key: str, value: Any) -> None:
        """Store a value for later handlers of this request."""
        self._keys[key] = value

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return the stored value and whether it was present."""
        if key in self._keys:
            return self._keys[key], True
        return None, False

    def write(self, data: Any) -> int:
        """Append ``data`` (text or bytes) to the response body."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._body.append(bytes(data))
        return len(data)

    def to_response(self) -> Response:
        """Build the response from the collected status, headers and body."""
        return Response(response=self.body, status=self.status, headers=self.headers)


class Context:
    """What a route function sees of the request and response."""

    def __init__(self, exchange: Exchange) -> None:
        self._exchange = exchange

    def status(self, code: int) -> None:
        """Set the response status."""
        self._exchange.status = code

    def ok(self) -> None:
        self.status(HTTP_OK)

    def created(self) -> None:
        self.status(HTTP_CREATED)

    def accepted(self) -> None:
        self.status(HTTP_ACCEPTED)

    def no_content(self) -> None:
        self.status(HTTP_NO_CONTENT)

    def header(self, key: str) -> str:
        """Return a request header, or an empty string if it is absent."""
        request = self._exchange.request
        if request is None:
            return ""
        return request.headers.get(key, "")

    def set_header(self, key: str, value: str) -> None:
        """Set a response header; an empty value removes it."""
        if value == "":
            self._exchange.headers.remove(key)
        else:
            self._exchange.headers[key] = value

    def param(self, key: str) -> str:
        """Return a path parameter, or an empty string if it is absent."""
        return self._exchange.params.get(key, "")

    def query(self, key: str) -> str:
        """Return a query parameter, or an empty string if it is absent."""
        request = self._exchange.request
        if request is None:
            return ""
        return request.args.get(key, "")

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return a value stored on the exchange and whether it was present."""
        return self._exchange.get(key)

    def value(self, key: str) -> Any:
        """Return a value stored on the exchange, or ``None``."""
        return self._exchange.get(key)[0]


def _build(in_type: Any, data: Any) -> Any:
    if in_type is None or in_type is Any:
        return data
    if dataclasses.is_dataclass(in_type) and isinstance(in_type, type):
        if not isinstance(data, dict):
            raise TypeError(
                f"cannot decode {type(data).__name__} into {in_type.__name__}"
            )
        names = {f.name for f in dataclasses.fields(in_type) if f.init}
        return in_type(**{k: v for k, v in data.items() if k in names})
    if isinstance(in_type, type) and not isinstance(data, in_type):
        raise TypeError(
            f"cannot decode {type(data).__name__} into {in_type.__name__}"
        )
    return data


def decode_json(stream: Any, in_type: Any = None) -> Any:
    """Decode the first JSON value read from ``stream`` into ``in_type``."""
    raw = stream.read()
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    try:
        text = raw.lstrip()
        data, _ = json.JSONDecoder().raw_decode(text)
        return _build(in_type, data)
    except (ValueError, TypeError) as err:
        raise BadJSONError(f"invalid JSON: {err}") from err


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"unsupported type: {type(obj).__name__}")


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def encode_json(stream: Any, value: Any) -> None:
    """Encode ``value`` as one line of JSON written to ``stream``."""
    try:
        text = json.dumps(
            value,
            default=_default,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError) as err:
        raise BadJSONError(f"failed to encode JSON: {err}") from err
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    stream.write(text + "\n")


def abort_with_error(exchange: Exchange, err: BaseException) -> None:
    """Record ``err`` and abort the handler chain."""
    exchange.add_error(err)
    exchange.abort()


def abort_if_error(exchange: Exchange, err: Optional[BaseException]) -> None:
    """Record ``err`` and abort, unless ``err`` is ``None``."""
    if err is not None:
        abort_with_error(exchange, err)


def _request_body(exchange: Exchange) -> Any:
    if exchange.request is None:
        raise BadJSONError("invalid JSON: missing request")
    return exchange.request.stream


def _decode_input(exchange: Exchange, in_type: Any) -> Tuple[Any, bool]:
    try:
        return decode_json(_request_body(exchange), in_type), True
    except BadJSONError as err:
        abort_with_error(exchange, err)
        return None, False


def _respond(exchange: Exchange, out: Any) -> None:
    exchange.headers[CONTENT_TYPE] = APPLICATION_JSON
    try:
        encode_json(exchange, out)
    except BadJSONError as err:
        abort_if_error(exchange, err)


def handle(fn: Callable[[Context, Any], Any], in_type: Any = None) -> Handler:
    """Build a handler taking a JSON input and returning a JSON output."""

    def execute(exchange: Exchange) -> None:
        inp, ok = _decode_input(exchange, in_type)
        if not ok:
            return
        try:
            out = fn(Context(exchange), inp)
        except Exception as err:  # noqa: BLE001 - handed to middleware
            abort_with_error(exchange, err)
            return
        _respond(exchange, out)

    return execute


def handle_in(fn: Callable[[Context, Any], None], in_type: Any = None) -> Handler:
    """Build a handler taking a JSON input and returning nothing."""

    def execute(exchange: Exchange) -> None:
        inp, ok = _decode_input(exchange, in_type)
        if not ok:
            return
        try:
            fn(Context(exchange), inp)
        except Exception as err:  # noqa: BLE001 - handed to middleware
            abort_with_error(exchange, err)

    return execute


def handle_out(fn: Callable[[Context], Any]) -> Handler:
    """Build a handler taking no input and returning a JSON output."""

    def execute(exchange: Exchange) -> None:
        try:
            out = fn(Context(exchange))
        except Exception as err:  # noqa: BLE001 - handed to middleware
            abort_with_error(exchange, err)
            return
        _respond(exchange, out)

    return execute


def handle_void(fn: Callable[[Context], None]) -> Handler:
    """Build a handler with neither input nor output."""

    def execute(exchange: Exchange) -> None:
        try:
            fn(Context(exchange))
        except Exception as err:  # noqa: BLE001 - handed to middleware
            abort_with_error(exchange, err)

    return execute