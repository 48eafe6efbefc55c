"""Server list state: ordering, hotkeys, badges and visibility.

The model is the sidebar's source of truth; Qt widgets render it and send
user gestures (click, drag-drop, context menu) back through the registry or
:meth:`SidebarModel.reorder`.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

from serverdeck.config import FAVICON_PATH
from serverdeck.core.events import (
    ActiveCleared,
    ActiveSet,
    BadgeSet,
    ContentReady,
    EventBus,
    GlobalBadgeChanged,
    HostAdded,
    HostRemoved,
    HostTitleSet,
    SidebarColorChanged,
    SidebarEntryAdded,
    SidebarEntryRemoved,
    SidebarReordered,
    SidebarVisibilityChanged,
    Subscription,
)
from serverdeck.core.hosts import SIDEBAR_CLOSED_KEY, HostRecord, ServerRegistry
from serverdeck.core.storage import KeyValueStore

log = logging.getLogger(__name__)

SORT_ORDER_KEY = "sort_order"
ATTENTION_MARK = "•"

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_TITLE_HOST_RE = re.compile(r"^https?://(?:www\.)?([^/]+)(.*)", re.IGNORECASE)


class WindowMenuPort(Protocol):
    """Window menu collaborator: one accelerator-bound item per server."""

    def add_server(self, url: str, title: str, position: int) -> None: ...

    def remove_server(self, url: str) -> None: ...


def make_initials(title: str) -> str:
    """``https://chat.example.org`` -> ``CE``; ``Team Chat`` -> ``T``."""
    name = _TITLE_HOST_RE.sub(r"\1", title)
    parts = [p for p in name.split(".") if p]
    if not parts:
        return "?"
    initials = parts[0][0] + (parts[1][0] if len(parts) > 1 else "")
    return initials.upper()


def hotkey_label(position: int, platform: str = sys.platform) -> str:
    return f"⌘{position}" if platform == "darwin" else f"^{position}"


def badge_count(badge: Any) -> int | None:
    if isinstance(badge, bool):
        return None
    if isinstance(badge, int):
        return badge
    match = _LEADING_INT_RE.match(str(badge)) if badge is not None else None
    return int(match.group(1)) if match else None


def favicon_url(host_url: str) -> str:
    return f"{host_url}{FAVICON_PATH}"


@dataclass(slots=True)
class SidebarEntry:
    url: str
    title: str
    initials: str
    position: int
    hotkey: str
    badge: str = ""
    unread: bool = False
    active: bool = False

    @property
    def count(self) -> int | None:
        return badge_count(self.badge) if self.badge else None

    @property
    def icon_url(self) -> str:
        return favicon_url(self.url)


class SidebarModel:
    def __init__(
        self,
        store: KeyValueStore,
        event_bus: EventBus,
        registry: ServerRegistry,
        *,
        menu: WindowMenuPort | None = None,
        platform: str = sys.platform,
    ) -> None:
        self._store = store
        self._bus = event_bus
        self._registry = registry
        self._menu = menu
        self._platform = platform
        self._entries: dict[str, SidebarEntry] = {}

        raw = self._store.get(SORT_ORDER_KEY)
        self._sort_order: list[str] = [u for u in raw if isinstance(u, str)] if isinstance(raw, list) else []
        self._store.set(SORT_ORDER_KEY, self._sort_order)

        self._subscriptions: list[Subscription] = [
            self._bus.subscribe(HostAdded, self._on_host_added),
            self._bus.subscribe(HostRemoved, lambda e: self.remove(e.url)),
            self._bus.subscribe(ActiveSet, lambda e: self.set_active(e.url)),
            self._bus.subscribe(ActiveCleared, lambda _e: self.deactivate_all()),
            self._bus.subscribe(HostTitleSet, lambda e: self.set_label(e.url, e.title)),
            self._bus.subscribe(ContentReady, self._on_content_ready),
        ]

        for host in sorted(self._registry, key=self._order_key):
            self.add(host)

    def close(self) -> None:
        for sub in self._subscriptions:
            self._bus.unsubscribe(sub)
        self._subscriptions.clear()

    def set_menu(self, menu: WindowMenuPort) -> None:
        """Attach the window menu and replay the current entries into it."""
        self._menu = menu
        for entry in self.entries():
            menu.add_server(entry.url, entry.title, entry.position)

    def _order_key(self, host: HostRecord) -> int:
        try:
            return self._sort_order.index(host.url)
        except ValueError:
            return len(self._sort_order)

    # --- Read API ---

    @property
    def sort_order(self) -> list[str]:
        return list(self._sort_order)

    def entries(self) -> list[SidebarEntry]:
        return [replace(e) for e in sorted(self._entries.values(), key=lambda e: e.position)]

    def get(self, url: str) -> SidebarEntry | None:
        entry = self._entries.get(url)
        return None if entry is None else replace(entry)

    @property
    def active(self) -> str | None:
        return next((e.url for e in self._entries.values() if e.active), None)

    # --- Entries ---

    def _on_host_added(self, event: HostAdded) -> None:
        host = self._registry.get(event.url)
        if host is not None:
            self.add(host)

    def add(self, host: HostRecord) -> None:
        if host.url in self._entries:
            return
        if host.url in self._sort_order:
            position = self._sort_order.index(host.url) + 1
        else:
            self._sort_order.append(host.url)
            position = len(self._sort_order)
            self._store.set(SORT_ORDER_KEY, self._sort_order)

        self._entries[host.url] = SidebarEntry(
            url=host.url,
            title=host.title,
            initials=make_initials(host.title),
            position=position,
            hotkey=hotkey_label(position, self._platform),
        )
        self._bus.publish(SidebarEntryAdded(url=host.url, position=position))
        if self._menu is not None:
            self._menu.add_server(host.url, host.title, position)

    def remove(self, url: str) -> None:
        if self._entries.pop(url, None) is None:
            return
        self._bus.publish(SidebarEntryRemoved(url=url))
        if self._menu is not None:
            self._menu.remove_server(url)
        self._publish_global_badge()

    def reorder(self, new_order: Sequence[str], dragged_url: str | None = None) -> None:
        """Apply the order read back from the rendered list after a drop."""
        order = [u for u in dict.fromkeys(new_order) if u in self._entries]
        order += [u for u in self._sort_order if u in self._entries and u not in order]
        order += [u for u in self._entries if u not in order]

        previous = {url: replace(entry) for url, entry in self._entries.items()}
        for url in list(self._entries):
            self.remove(url)

        self._sort_order = order
        self._store.set(SORT_ORDER_KEY, self._sort_order)

        for url in order:
            old = previous[url]
            host = self._registry.get(url) or HostRecord(url=url, title=old.title)
            self.add(host)
            entry = self._entries[url]
            entry.badge, entry.unread = old.badge, old.unread

        log.debug("Server list reordered: %s", order)
        self._bus.publish(SidebarReordered(order=tuple(order)))
        self._publish_global_badge()
        if dragged_url is not None:
            self._registry.set_active(dragged_url)

    def set_label(self, url: str, title: str) -> None:
        entry = self._entries.get(url)
        if entry is None:
            return
        entry.title = title
        entry.initials = make_initials(title)

    # --- Selection ---

    def set_active(self, url: str | None) -> None:
        entry = self._entries.get(url) if url else None
        if entry is not None and entry.active:
            return
        self.deactivate_all()
        if entry is not None:
            entry.active = True

    def deactivate_all(self) -> None:
        for entry in self._entries.values():
            entry.active = False

    def _on_content_ready(self, _event: ContentReady) -> None:
        self.set_active(self._registry.active)
        self._bus.publish(SidebarVisibilityChanged(hidden=self.is_hidden()))

    # --- Badges ---

    def set_badge(self, url: str, value: Any) -> None:
        entry = self._entries.get(url)
        if entry is None:
            log.debug("Badge for unknown server %s ignored", url)
            return
        if value is None or value == "":
            entry.badge, entry.unread = "", False
            published: str | None = None
        else:
            count = badge_count(value)
            entry.badge = str(value) if count is not None else ""
            entry.unread = True
            published = str(value)
        self._bus.publish(BadgeSet(url=url, badge=published))
        self._publish_global_badge()

    def get_global_badge(self) -> str:
        total = 0
        attention = False
        for entry in self._entries.values():
            count = entry.count
            if count is not None:
                total += count
            elif entry.unread:
                attention = True
        if total > 0:
            return str(total)
        return ATTENTION_MARK if attention else ""

    def _publish_global_badge(self) -> None:
        self._bus.publish(GlobalBadgeChanged(badge=self.get_global_badge()))

    # --- Visibility / theming ---

    def is_hidden(self) -> bool:
        return self._store.get(SIDEBAR_CLOSED_KEY) is True

    def hide(self) -> None:
        self._store.set(SIDEBAR_CLOSED_KEY, True)
        self._bus.publish(SidebarVisibilityChanged(hidden=True))

    def show(self) -> None:
        self._store.set(SIDEBAR_CLOSED_KEY, False)
        self._bus.publish(SidebarVisibilityChanged(hidden=False))

    def toggle(self) -> None:
        if self.is_hidden():
            self.show()
        else:
            self.hide()

    def change_color(self, color: str | None, background: str | None) -> None:
        self._bus.publish(SidebarColorChanged(color=color, background=background))
