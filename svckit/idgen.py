"""ID generators based on UUIDs, condensed UUIDs and short IDs."""

from __future__ import annotations

import base64
import os
import random
import threading
import time
import uuid
from typing import Callable

ReadRandom = Callable[[int], bytes]

DEFAULT_ABC = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_-"

_SEED_SIZE = 8
_COUNTER_BITS = 12


class UUIDGenerator:
    """Generates IDs as canonical random UUID strings."""

    def generate_id(self) -> str:
        return str(uuid.uuid4())


class CondensedUUIDGenerator:
    """Generates IDs as unpadded lower-case base32 encoded random UUIDs."""

    def generate_id(self) -> str:
        encoded = base64.b32encode(uuid.uuid4().bytes).decode("ascii")
        return encoded.rstrip("=").lower()


def random_seed(read_random: ReadRandom) -> int:
    """Read 8 random bytes and return them as a little-endian integer."""
    data = read_random(_SEED_SIZE)
    if len(data) < _SEED_SIZE:
        raise ValueError(f"short random read: {len(data)} bytes")
    return int.from_bytes(data[:_SEED_SIZE], "little")


class ShortIDGenerator:
    """Generates short, URL-friendly, unique IDs.

    IDs combine the current time in milliseconds with a sequence counter
    and the worker number, encoded with an alphabet shuffled by a seed read
    from ``read_random``.
    """

    worker = 1

    def __init__(self, read_random: ReadRandom = os.urandom) -> None:
        seed = random_seed(read_random)
        letters = list(DEFAULT_ABC)
        random.Random(seed).shuffle(letters)
        self._abc = "".join(letters)
        self._lock = threading.Lock()
        self._last = 0

    def _next_value(self) -> int:
        candidate = time.time_ns() // 1_000_000 << _COUNTER_BITS
        with self._lock:
            self._last = max(candidate, self._last + 1)
            return self._last

    def _encode(self, value: int) -> str:
        base = len(self._abc)
        digits = []
        while True:
            value, rem = divmod(value, base)
            digits.append(self._abc[rem])
            if value == 0:
                break
        return "".join(reversed(digits))

    def generate_id(self) -> str:
        return self._encode(self._next_value()) + self._abc[self.worker]