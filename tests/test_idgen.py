import uuid

import pytest

from svckit.idgen import (
    DEFAULT_ABC,
    CondensedUUIDGenerator,
    ShortIDGenerator,
    UUIDGenerator,
    random_seed,
)


def test_condensed_uuid_generator():
    gen = CondensedUUIDGenerator()
    generated = set()
    alphabet = set("abcdefghijklmnopqrstuvwxyz234567")

    for _ in range(200):
        id_ = gen.generate_id()
        assert len(id_) == 26
        assert "-" not in id_
        assert set(id_) <= alphabet
        assert id_ not in generated
        generated.add(id_)


def test_uuid_generator():
    gen = UUIDGenerator()
    generated = set()

    for _ in range(200):
        id_ = gen.generate_id()
        assert uuid.UUID(id_).version == 4
        assert id_ not in generated
        generated.add(id_)


def test_short_id_generator_unique():
    gen = ShortIDGenerator()
    generated = set()

    for _ in range(200):
        id_ = gen.generate_id()
        assert set(id_) <= set(DEFAULT_ABC)
        assert id_ not in generated
        generated.add(id_)


def test_short_id_generator_with_fixed_seed():
    first = ShortIDGenerator(lambda n: bytes(range(n)))
    second = ShortIDGenerator(lambda n: bytes(range(n)))
    # same seed gives the same worker letter at the end
    assert first.generate_id()[-1] == second.generate_id()[-1]


def test_random_seed_little_endian():
    assert random_seed(lambda n: bytes([1, 0, 0, 0, 0, 0, 0, 0])) == 1
    assert random_seed(lambda n: bytes([0, 1, 0, 0, 0, 0, 0, 0])) == 256


def test_random_seed_reads_eight_bytes():
    requested = []

    def reader(n):
        requested.append(n)
        return b"\xff" * n

    assert random_seed(reader) == 2**64 - 1
    assert requested == [8]


def test_random_seed_raises_on_error():
    def failing(n):
        raise OSError("forced-error")

    with pytest.raises(OSError, match="forced-error"):
        random_seed(failing)


def test_random_seed_short_read():
    with pytest.raises(ValueError):
        random_seed(lambda n: b"\x01")