"""Loading environment variables from ``.env`` style content and files.

Variables come primarily from optional ``.env`` files in the working
directory. :func:`auto_load` applies an embedded default content first and
then the optional ``.env.<ENV>.local`` and ``.env.local`` files, so that
environment-specific values override the defaults.
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

Setter = Callable[[str, str], None]

_SEPARATOR = "="
_COMMENT = "#"
_DEFAULT_SELECTOR = "dev"


def _setenv(key: str, value: str) -> None:
    os.environ[key] = value


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse one line into a ``(key, value)`` pair, or ``None`` if it holds none."""
    line = trim_comment(line)

    key, sep, rest = line.partition(_SEPARATOR)
    if not sep:
        return None

    key = key.strip()
    if not key:
        return None

    return key, unquote(rest.strip())


def trim_comment(line: str) -> str:
    """Drop everything from the first ``#`` onwards."""
    return line.partition(_COMMENT)[0]


def unquote(s: str) -> str:
    """Strip one pair of matching single or double quotes around ``s``."""
    if len(s) < 2:
        return s

    if s[0] == s[-1] and s[0] in ("'", '"'):
        return s[1:-1]

    return s


def apply(content: str, setter: Setter) -> None:
    """Call ``setter`` for every key-value pair found in ``content``."""
    for line in content.split("\n"):
        pair = parse_line(line)
        if pair is None:
            continue
        setter(*pair)


def resolve_file_path(file: str, getwd: Callable[[], str]) -> str:
    """Return ``file`` as is if absolute, else joined to the working directory."""
    if file.startswith("/"):
        return file

    return posixpath.normpath(posixpath.join(getwd(), file))


def read_optional_file(file: str) -> str:
    """Read a file's text, returning an empty string if it does not exist."""
    try:
        with open(posixpath.normpath(file), encoding="utf-8") as handle:
            return handle.read()
    except FileNotFoundError:
        return ""


@dataclass
class Loader:
    """Loads environment variables from content or files."""

    setter: Setter = _setenv
    getwd: Callable[[], str] = os.getcwd
    file_reader: Callable[[str], str] = read_optional_file

    def load_optional(self, file: str) -> None:
        """Load variables from ``file``; a missing file is ignored."""
        path = resolve_file_path(file, self.getwd)
        content = self.file_reader(path)
        apply(content, self.setter)

    def apply(self, content: str) -> None:
        """Load variables from ``content``."""
        apply(content, self.setter)


def resolve_selector(selector: str) -> str:
    """Return the environment selector, ``dev`` when none is given."""
    return selector or _DEFAULT_SELECTOR


def auto_load(
    default_env_content: str,
    selector: Optional[str] = None,
    loader: Optional[Loader] = None,
) -> None:
    """Apply the default content, then ``.env.<selector>.local`` and ``.env.local``.

    When ``selector`` is not given it is taken from the ``ENV`` environment
    variable, defaulting to ``dev``.
    """
    if selector is None:
        selector = resolve_selector(os.environ.get("ENV", ""))
    if loader is None:
        loader = Loader()

    loader.apply(default_env_content)

    for file in (f".env.{selector}.local", ".env.local"):
        loader.load_optional(file)