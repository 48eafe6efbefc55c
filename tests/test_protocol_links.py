from __future__ import annotations

from serverdeck.core.hosts import get_protocol_url_from_process, parse_protocol_url


def test_link_maps_to_https_server() -> None:
    assert parse_protocol_url("serverdeck://chat.example.org") == "https://chat.example.org"
    assert parse_protocol_url("serverdeck://chat.example.org/channel/x") == "https://chat.example.org"


def test_insecure_flag_switches_to_http() -> None:
    assert parse_protocol_url("serverdeck://chat.example.org?insecure=true") == "http://chat.example.org"


def test_other_schemes_are_ignored() -> None:
    assert parse_protocol_url("https://chat.example.org") is None
    assert parse_protocol_url("serverdeck://") is None


def test_argv_without_link() -> None:
    assert get_protocol_url_from_process(["serverdeck"]) is None
    assert get_protocol_url_from_process(["serverdeck", "--flag"]) is None


def test_argv_with_link() -> None:
    argv = ["serverdeck", "--flag", "serverdeck://chat.example.org"]

    assert get_protocol_url_from_process(argv) == "https://chat.example.org"
