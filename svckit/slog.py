"""A structured logger writing human readable console lines.

Each line holds a UTC timestamp, a level abbreviation, the message and the
fields sorted by name, e.g. ``2024-01-01T00:00:00Z INF started port=8080``.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, TextIO


class Event:
    """A log entry being built; it is written by :meth:`msg`."""

    def __init__(self, logger: "Logger", level: str) -> None:
        self._logger = logger
        self._level = level
        self._fields: Dict[str, Any] = {}

    def field(self, key: str, value: Any) -> "Event":
        """Add a field and return the event for chaining."""
        self._fields[key] = value
        return self

    def msg(self, message: str) -> None:
        """Write the event with ``message``."""
        self._logger._write(self._level, message, self._fields)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)


class Logger:
    """Writes events to ``stream`` (standard output when ``None``)."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.stream = stream
        self.fields: Dict[str, Any] = dict(fields or {})

    def with_fields(self, **kwargs: Any) -> "Logger":
        """Return a child logger with extra fields on every event."""
        return type(self)(self.stream, {**self.fields, **kwargs})

    def info(self) -> Event:
        return Event(self, "INF")

    def debug(self) -> Event:
        return Event(self, "DBG")

    def warn(self) -> Event:
        return Event(self, "WRN")

    def error(self) -> Event:
        return Event(self, "ERR")

    def _write(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        parts = [timestamp, level]
        if message:
            parts.append(message)
        merged = {**self.fields, **fields}
        parts.extend(f"{key}={_format_value(merged[key])}" for key in sorted(merged))
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(" ".join(parts) + "\n")
        stream.flush()


class _DisabledLogger(Logger):
    def _write(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        pass


Global = Logger()

_DISABLED = _DisabledLogger()
_current: contextvars.ContextVar[Logger] = contextvars.ContextVar("svckit_logger")


def info() -> Event:
    """Start an info event on the global logger."""
    return Global.info()


def debug() -> Event:
    """Start a debug event on the global logger."""
    return Global.debug()


def warn() -> Event:
    """Start a warning event on the global logger."""
    return Global.warn()


def error() -> Event:
    """Start an error event on the global logger."""
    return Global.error()


@contextlib.contextmanager
def with_context(logger: Optional[Logger] = None) -> Iterator[Logger]:
    """Make ``logger`` (the global one by default) current within the block."""
    chosen = logger if logger is not None else Global
    token = _current.set(chosen)
    try:
        yield chosen
    finally:
        _current.reset(token)


def from_context() -> Logger:
    """Return the current logger, or a disabled one when none is set."""
    return _current.get(_DISABLED)