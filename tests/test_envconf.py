from dataclasses import dataclass

import pytest

from svckit.envconf import EnvConfigError, env_field, parse, parse_bool


@dataclass
class Untagged:
    value: str


@dataclass
class Tagged:
    value: str = env_field("TEST_KEY")
    toggle: bool = env_field("TOGGLE")
    active: bool = env_field("ACTIVE")


@dataclass
class WithDefaults:
    port: int = env_field("PORT", 8080)
    ratio: float = env_field("RATIO", 0.5)
    name: str = env_field("NAME", "svc")


def test_parse_untagged_gets_zero_value():
    cfg = parse(Untagged, {})

    assert cfg == Untagged(value="")


def test_parse_ok():
    env = {"TEST_KEY": "test-value-1", "TOGGLE": "on", "ACTIVE": "yes"}

    cfg = parse(Tagged, env)

    assert cfg.value == "test-value-1"
    assert cfg.toggle is True
    assert cfg.active is True


def test_parse_missing_variables_are_zero():
    cfg = parse(Tagged, {})

    assert cfg == Tagged(value="", toggle=False, active=False)


def test_parse_defaults_and_overrides():
    assert parse(WithDefaults, {}) == WithDefaults(8080, 0.5, "svc")
    assert parse(WithDefaults, {"PORT": "9090", "RATIO": "1.5"}) == WithDefaults(
        9090, 1.5, "svc"
    )


def test_parse_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TEST_KEY", "from-os")
    monkeypatch.setenv("TOGGLE", "off")
    monkeypatch.delenv("ACTIVE", raising=False)

    cfg = parse(Tagged)

    assert cfg == Tagged(value="from-os", toggle=False, active=False)


def test_parse_invalid_bool():
    with pytest.raises(EnvConfigError):
        parse(Tagged, {"TOGGLE": "maybe"})


def test_parse_invalid_int():
    with pytest.raises(EnvConfigError):
        parse(WithDefaults, {"PORT": "eighty"})


def test_parse_not_a_dataclass():
    with pytest.raises(TypeError):
        parse(dict, {})


@pytest.mark.parametrize(
    "value, expected",
    [
        ("true", True),
        ("false", False),
        ("on", True),
        ("off", False),
        ("yes", True),
        ("no", False),
        ("1", True),
        ("0", False),
        ("T", True),
        ("F", False),
    ],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


@pytest.mark.parametrize("value", ["", "maybe", "YES", "2"])
def test_parse_bool_invalid(value):
    with pytest.raises(ValueError):
        parse_bool(value)