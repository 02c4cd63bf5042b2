"""Composing host addresses from an address, a port and a default port.

Supported address forms are ``host``, ``host:port``, ``:port`` and
``host:``; the port or default port is filled in where the address has none.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List

_LIST_DELIMITER = re.compile("[,;]")


@dataclass(frozen=True)
class HostPort:
    """A host and a port."""

    host: str = ""
    port: str = ""

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


def new_host_port(address: str, port: str, default_port: str) -> HostPort:
    """Build a :class:`HostPort` from an address, a port and a default port.

    A port in ``address`` wins over ``port``, which wins over
    ``default_port``. Raises :class:`ValueError` if ``default_port`` is empty.
    """
    if not default_port:
        raise ValueError("missing default port")

    port = port or default_port
    address = address.strip()

    if not address:
        return HostPort(port=port)

    host, sep, address_port = address.partition(":")
    if not sep or not address_port:
        return HostPort(host=host, port=port)

    return HostPort(host=host, port=address_port)


def compose_address(address: str, port: str, default_port: str) -> str:
    """Compose a ``host:port`` address; see :func:`new_host_port`."""
    return str(new_host_port(address, port, default_port))


def compose_addresses(
    addresses: Iterable[str], port: str, default_port: str
) -> List[str]:
    """Compose every address in ``addresses``."""
    return [compose_address(addr, port, default_port) for addr in addresses]


def compose_address_list(addresses: str, port: str, default_port: str) -> List[str]:
    """Compose addresses from a string delimited by commas or semicolons."""
    return compose_addresses(_LIST_DELIMITER.split(addresses), port, default_port)