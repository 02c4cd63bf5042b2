import pytest

from svckit.hostutil import (
    HostPort,
    compose_address,
    compose_address_list,
    compose_addresses,
    new_host_port,
)

CASES = [
    ("", "", "8080", HostPort(port="8080"), ":8080"),
    ("127.0.0.1", "", "8080", HostPort("127.0.0.1", "8080"), "127.0.0.1:8080"),
    ("127.0.0.1", "9090", "8080", HostPort("127.0.0.1", "9090"), "127.0.0.1:9090"),
    ("server", "9090", "8080", HostPort("server", "9090"), "server:9090"),
    ("server:1234", "9090", "8080", HostPort("server", "1234"), "server:1234"),
    ("server:1234", "", "8080", HostPort("server", "1234"), "server:1234"),
    ("server:", "9090", "8080", HostPort("server", "9090"), "server:9090"),
    ("server:", "", "8080", HostPort("server", "8080"), "server:8080"),
]

EXPECTED_LIST = [
    ":8080",
    "127.0.0.1:8080",
    "127.0.0.1:9090",
    "server:9090",
]


@pytest.mark.parametrize("address, port, default_port, want, want_string", CASES)
def test_new_host_port(address, port, default_port, want, want_string):
    got = new_host_port(address, port, default_port)

    assert got == want
    assert str(got) == want_string


def test_new_host_port_no_default_port():
    with pytest.raises(ValueError):
        new_host_port("127.0.0.1", "", "")


def test_new_host_port_trims_address():
    assert new_host_port("  server:1234 ", "", "8080") == HostPort("server", "1234")


def test_host_port_str_brackets_ipv6_host():
    assert str(HostPort("::1", "80")) == "[::1]:80"


@pytest.mark.parametrize("address, port, default_port, _want, want_string", CASES)
def test_compose_address(address, port, default_port, _want, want_string):
    assert compose_address(address, port, default_port) == want_string


def test_compose_address_no_default_port():
    with pytest.raises(ValueError):
        compose_address("127.0.0.1", "", "")


def test_compose_addresses_port_set():
    composed = compose_addresses(
        ["", "127.0.0.1", "127.0.0.1:9090", "server:9090"], "8080", "8080"
    )

    assert composed == EXPECTED_LIST


def test_compose_addresses_port_not_set():
    composed = compose_addresses(
        ["", "127.0.0.1", "127.0.0.1:9090", "server:9090"], "", "8080"
    )

    assert composed == EXPECTED_LIST


def test_compose_address_list_port_set():
    composed = compose_address_list(
        ", 127.0.0.1;   127.0.0.1:9090 , server:9090", "8080", "8080"
    )

    assert composed == EXPECTED_LIST


def test_compose_address_list_port_not_set():
    composed = compose_address_list(
        ", 127.0.0.1;   127.0.0.1:9090 , server:9090", "", "8080"
    )

    assert composed == EXPECTED_LIST