"""Configured servers: records, persisted-shape migrations, deep links, host checks."""

from .models import HostRecord, split_credentials, strip_trailing_slash
from .protocol import get_protocol_url_from_process, parse_protocol_url
from .registry import ACTIVE_KEY, HOSTS_KEY, SIDEBAR_CLOSED_KEY, ServerRegistry
from .validation import HostValidator, resolve_host_input

__all__ = [
    "HostRecord",
    "split_credentials",
    "strip_trailing_slash",
    "parse_protocol_url",
    "get_protocol_url_from_process",
    "ServerRegistry",
    "HOSTS_KEY",
    "ACTIVE_KEY",
    "SIDEBAR_CLOSED_KEY",
    "HostValidator",
    "resolve_host_input",
]
