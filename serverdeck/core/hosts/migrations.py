"""Versioned migrations for the persisted host list.

Older releases stored the host list in several shapes:

- v0 list: ``["https://a", "https://b/"]``
- v0 string: a single bare url, or the whole mapping as a JSON-encoded string
- v0 mapping: ``{url: {"title": ..., "url": ...}}`` without a version marker

``migrate_hosts`` runs once at load and turns any of them into the current
versioned document, so runtime code only ever sees ``dict[str, HostRecord]``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from serverdeck.core.errors import ConfigCorruption
from serverdeck.core.hosts.models import HostRecord, strip_trailing_slash

log = logging.getLogger(__name__)

HOSTS_SCHEMA_VERSION = 1

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def _as_int(value: Any, default: int) -> int:
    try:
        if isinstance(value, bool):
            return default
        return int(value)
    except (TypeError, ValueError):
        return default


def pack_hosts(hosts: Mapping[str, HostRecord]) -> dict[str, Any]:
    """Serialize the registry mapping into the current versioned document."""
    return {
        "schema_version": HOSTS_SCHEMA_VERSION,
        "hosts": {url: rec.to_dict() for url, rec in hosts.items()},
    }


def _records_from_mapping(raw: Mapping[str, Any]) -> dict[str, HostRecord]:
    out: dict[str, HostRecord] = {}
    for url, entry in raw.items():
        if not isinstance(url, str) or not url:
            continue
        out[url] = HostRecord.from_dict(url, entry if isinstance(entry, Mapping) else None)
    return out


def _records_from_list(raw: Iterable[Any]) -> dict[str, HostRecord]:
    out: dict[str, HostRecord] = {}
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            continue
        url = strip_trailing_slash(item.strip())
        out[url] = HostRecord(url=url)
    return out


def _records_from_string(raw: str) -> tuple[dict[str, HostRecord], bool]:
    try:
        decoded = json.loads(raw)
    except ValueError:
        if _HTTP_URL_RE.match(raw.strip()):
            url = strip_trailing_slash(raw.strip())
            return {url: HostRecord(url=url)}, True
        log.warning("%s; starting empty", ConfigCorruption("stored host list is not JSON"))
        return {}, True
    hosts, _ = migrate_hosts(decoded)
    return hosts, True


def migrate_hosts(raw: Any) -> tuple[dict[str, HostRecord], bool]:
    """Return ``(hosts, changed)`` for any persisted host-list shape.

    ``changed`` is True when the stored value is not already the current
    versioned document and should be written back.
    """
    if raw is None:
        return {}, False
    if isinstance(raw, str):
        return _records_from_string(raw)
    if isinstance(raw, list):
        return _records_from_list(raw), True
    if not isinstance(raw, Mapping):
        log.warning("Discarding host list of unexpected type %s", type(raw).__name__)
        return {}, True

    version = _as_int(raw.get("schema_version"), 0)
    if version == 0:
        return _records_from_mapping(raw), True
    hosts_raw = raw.get("hosts")
    if not isinstance(hosts_raw, Mapping):
        log.warning("Host document v%s has no host mapping, starting empty", version)
        return {}, True
    return _records_from_mapping(hosts_raw), version != HOSTS_SCHEMA_VERSION


def find_servers_manifest(search_dirs: Iterable[Path], filename: str) -> Path | None:
    """Return the first ``filename`` found in ``search_dirs`` (non-recursive)."""
    for directory in search_dirs:
        candidate = Path(directory) / filename
        if candidate.is_file():
            return candidate
    return None


def import_servers_manifest(path: Path) -> dict[str, HostRecord]:
    """Read a ``{title: url}`` manifest into host records keyed by url."""
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        log.error("Server file invalid: %s", path)
        return {}
    if not isinstance(data, Mapping):
        log.error("Server file invalid: %s (expected an object)", path)
        return {}
    out: dict[str, HostRecord] = {}
    for title, url in data.items():
        if not isinstance(url, str) or not url:
            continue
        url = strip_trailing_slash(url)
        out[url] = HostRecord(url=url, title=str(title))
    return out
