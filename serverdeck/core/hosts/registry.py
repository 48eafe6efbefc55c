"""Host registry: the single source of truth for configured servers.

Every mutation goes through a public operation, is persisted right away and
publishes exactly one event on the bus (``remove_host`` of the active host
additionally publishes ``ActiveCleared``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Literal

from serverdeck.config import (
    CANONICAL_TITLE_HOST,
    GENERIC_TITLE,
    SERVERS_MANIFEST,
    VALIDATION_TIMEOUT_SEC,
)
from serverdeck.core.events import (
    ActiveCleared,
    ActiveSet,
    EventBus,
    HostAdded,
    HostRemoved,
    HostsLoaded,
    HostTitleSet,
)
from serverdeck.core.hosts.migrations import (
    find_servers_manifest,
    import_servers_manifest,
    migrate_hosts,
    pack_hosts,
)
from serverdeck.core.hosts.models import HostRecord, split_credentials, strip_trailing_slash
from serverdeck.core.hosts.protocol import get_protocol_url_from_process
from serverdeck.core.hosts.validation import HostValidator
from serverdeck.core.storage import KeyValueStore

log = logging.getLogger(__name__)

HOSTS_KEY = "hosts"
ACTIVE_KEY = "active_host"
# Owned by the sidebar; written here only when a one-server manifest is imported.
SIDEBAR_CLOSED_KEY = "sidebar_closed"


class ServerRegistry:
    """Canonical ``url -> HostRecord`` mapping plus the active selection."""

    def __init__(
        self,
        store: KeyValueStore,
        event_bus: EventBus,
        *,
        validator: HostValidator | None = None,
        manifest_dirs: Iterable[Path] = (),
        manifest_name: str = SERVERS_MANIFEST,
        generic_title: str = GENERIC_TITLE,
        canonical_title_host: str = CANONICAL_TITLE_HOST,
    ) -> None:
        self._store = store
        self._bus = event_bus
        self._validator = validator or HostValidator()
        self._manifest_dirs = tuple(Path(p) for p in manifest_dirs)
        self._manifest_name = manifest_name
        self._generic_title = generic_title
        self._canonical_title_re = re.compile(
            rf"https?://{re.escape(canonical_title_host)}", re.IGNORECASE
        )
        self._hosts: dict[str, HostRecord] = {}

    # --- Loading / persistence ---

    def load(self) -> None:
        hosts, changed = migrate_hosts(self._store.get(HOSTS_KEY))

        if not hosts:
            manifest = find_servers_manifest(self._manifest_dirs, self._manifest_name)
            if manifest is not None:
                hosts = import_servers_manifest(manifest)
                if hosts:
                    log.info("Imported %d server(s) from %s", len(hosts), manifest)
                    changed = True
                    # A single configured server does not need the server list.
                    if len(hosts) == 1:
                        self._store.set(SIDEBAR_CLOSED_KEY, True)

        self._hosts = hosts
        if changed:
            self._save()
        stale = self._store.get(ACTIVE_KEY)
        if stale is not None and (not isinstance(stale, str) or stale not in self._hosts):
            log.info("Dropping active server %s, it is not configured", stale)
            self._store.remove(ACTIVE_KEY)
        log.debug("Loaded %d host(s)", len(self._hosts))
        self._bus.publish(HostsLoaded(count=len(self._hosts)))

    def _save(self) -> None:
        self._store.set(HOSTS_KEY, pack_hosts(self._hosts))

    # --- Read API ---

    @property
    def hosts(self) -> dict[str, HostRecord]:
        return dict(self._hosts)

    def get(self, url: str) -> HostRecord | None:
        return self._hosts.get(url)

    def host_exists(self, url: str) -> bool:
        return url in self._hosts

    def __iter__(self) -> Iterator[HostRecord]:
        return iter(list(self._hosts.values()))

    def __len__(self) -> int:
        return len(self._hosts)

    @property
    def active(self) -> str | None:
        value = self._store.get(ACTIVE_KEY)
        return value if isinstance(value, str) and value else None

    def credentials_for(self, request_url: str) -> tuple[str, str] | None:
        """Stored basic-auth credentials of the host serving ``request_url``."""
        for url, rec in self._hosts.items():
            if request_url.startswith(url) and rec.has_credentials:
                return rec.username, rec.password or ""
        return None

    # --- Mutations ---

    def add_host(self, url_input: str) -> str | Literal[False]:
        """Add a server; returns its canonical url, or False if it already existed.

        An existing url is activated instead of duplicated.
        """
        url, auth_url, username, password = split_credentials(strip_trailing_slash(url_input.strip()))

        if self.host_exists(url):
            self.set_active(url)
            return False

        self._hosts[url] = HostRecord(
            url=url,
            auth_url=auth_url,
            username=username,
            password=password,
        )
        self._save()
        log.info("Host added: %s", url, extra={"host": url})
        self._bus.publish(HostAdded(url=url))
        return url

    def remove_host(self, url: str) -> None:
        if url not in self._hosts:
            return
        del self._hosts[url]
        self._save()
        log.info("Host removed: %s", url, extra={"host": url})
        if self.active == url:
            self.clear_active()
        self._bus.publish(HostRemoved(url=url))

    def set_active(self, url: str | None) -> bool:
        """Activate ``url``; unknown urls fall back to an existing host.

        With no hosts at all the landing state is announced and False returned.
        """
        resolved: str | None = None
        if url is not None and self.host_exists(url):
            resolved = url
        elif self._hosts:
            resolved = next(iter(self._hosts))

        if resolved is None:
            self._store.remove(ACTIVE_KEY)
            self._bus.publish(HostsLoaded(count=0))
            return False

        self._store.set(ACTIVE_KEY, resolved)
        self._bus.publish(ActiveSet(url=resolved))
        return True

    def restore_active(self) -> bool:
        return self.set_active(self.active)

    def clear_active(self) -> None:
        self._store.remove(ACTIVE_KEY)
        self._bus.publish(ActiveCleared())

    def set_host_title(self, url: str, title: str) -> None:
        rec = self._hosts.get(url)
        if rec is None:
            log.debug("Title for unknown host %s ignored", url)
            return
        if title == self._generic_title and not self._canonical_title_re.match(url):
            title = f"{title} - {url}"
        rec.title = title
        self._save()
        self._bus.publish(HostTitleSet(url=url, title=title))

    def set_last_path(self, url: str, last_path: str) -> None:
        """Remember the in-app location so the next launch reopens it."""
        rec = self._hosts.get(url)
        if rec is None or rec.last_path == last_path:
            return
        rec.last_path = last_path
        self._save()

    # --- Helpers ---

    async def validate_host(self, url: str, timeout: float | None = VALIDATION_TIMEOUT_SEC) -> None:
        await self._validator.validate(url, timeout)

    @staticmethod
    def get_protocol_url_from_process(args: Sequence[str]) -> str | None:
        return get_protocol_url_from_process(args)
