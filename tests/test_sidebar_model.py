from __future__ import annotations

from serverdeck.core.events import (
    ContentReady,
    EventBus,
    GlobalBadgeChanged,
    SidebarReordered,
    SidebarVisibilityChanged,
)
from serverdeck.core.hosts import HOSTS_KEY, SIDEBAR_CLOSED_KEY, ServerRegistry
from serverdeck.core.sidebar import SORT_ORDER_KEY, SidebarModel, hotkey_label, make_initials
from serverdeck.core.storage import MemoryStore


class _Menu:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def add_server(self, url: str, title: str, position: int) -> None:
        self.calls.append(("add", url, position))

    def remove_server(self, url: str) -> None:
        self.calls.append(("remove", url))


def _setup(initial: dict | None = None):
    store = MemoryStore(initial)
    bus = EventBus()
    registry = ServerRegistry(store, bus)
    registry.load()
    menu = _Menu()
    sidebar = SidebarModel(store, bus, registry, menu=menu, platform="linux")
    return sidebar, registry, store, bus, menu


def test_initial_entries_follow_persisted_order() -> None:
    sidebar, _registry, store, _bus, menu = _setup(
        {HOSTS_KEY: ["https://a", "https://b"], SORT_ORDER_KEY: ["https://b", "https://a"]}
    )

    entries = sidebar.entries()
    assert [(e.url, e.position, e.hotkey) for e in entries] == [
        ("https://b", 1, "^1"),
        ("https://a", 2, "^2"),
    ]
    assert menu.calls == [("add", "https://b", 1), ("add", "https://a", 2)]
    assert store.get(SORT_ORDER_KEY) == ["https://b", "https://a"]


def test_new_host_extends_sort_order() -> None:
    sidebar, registry, store, _bus, menu = _setup()

    registry.add_host("https://a")
    registry.add_host("https://b")

    assert store.get(SORT_ORDER_KEY) == ["https://a", "https://b"]
    assert sidebar.get("https://b").position == 2
    assert menu.calls[-1] == ("add", "https://b", 2)


def test_remove_keeps_sort_order() -> None:
    sidebar, registry, store, _bus, menu = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")

    registry.remove_host("https://a")

    assert sidebar.get("https://a") is None
    assert store.get(SORT_ORDER_KEY) == ["https://a", "https://b"]
    assert menu.calls[-1] == ("remove", "https://a")


def test_active_selection_follows_registry() -> None:
    sidebar, registry, _store, _bus, _menu = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")

    registry.set_active("https://b")
    assert sidebar.active == "https://b"

    registry.clear_active()
    assert sidebar.active is None


def test_global_badge_sums_counts() -> None:
    sidebar, registry, _store, bus, _menu = _setup()
    for url in ("https://a", "https://b", "https://c"):
        registry.add_host(url)
    badges: list[str] = []
    bus.subscribe(GlobalBadgeChanged, lambda e: badges.append(e.badge))

    sidebar.set_badge("https://a", 2)
    sidebar.set_badge("https://b", "3")
    sidebar.set_badge("https://c", 0)

    assert sidebar.get_global_badge() == "5"
    assert badges == ["2", "5", "5"]
    assert sidebar.get("https://b").unread is True


def test_global_badge_marks_attention_without_counts() -> None:
    sidebar, registry, _store, _bus, _menu = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")

    sidebar.set_badge("https://a", "•")
    sidebar.set_badge("https://b", 0)

    assert sidebar.get_global_badge() == "•"

    sidebar.set_badge("https://a", "")
    assert sidebar.get_global_badge() == ""
    assert sidebar.get("https://a").unread is False


def test_badge_for_unknown_server_is_ignored() -> None:
    sidebar, _registry, _store, _bus, _menu = _setup()

    sidebar.set_badge("https://missing", 3)

    assert sidebar.get_global_badge() == ""


def test_reorder_rewrites_order_and_activates_dragged() -> None:
    sidebar, registry, store, bus, menu = _setup()
    for url in ("https://a", "https://b", "https://c"):
        registry.add_host(url)
    sidebar.set_badge("https://a", 4)
    reordered: list[tuple[str, ...]] = []
    bus.subscribe(SidebarReordered, lambda e: reordered.append(e.order))
    menu.calls.clear()

    sidebar.reorder(["https://c", "https://a", "https://b"], "https://c")

    assert store.get(SORT_ORDER_KEY) == ["https://c", "https://a", "https://b"]
    assert [e.url for e in sidebar.entries()] == ["https://c", "https://a", "https://b"]
    assert [e.hotkey for e in sidebar.entries()] == ["^1", "^2", "^3"]
    assert sidebar.get("https://a").badge == "4"
    assert reordered == [("https://c", "https://a", "https://b")]
    assert [c for c in menu.calls if c[0] == "add"] == [
        ("add", "https://c", 1),
        ("add", "https://a", 2),
        ("add", "https://b", 3),
    ]
    assert registry.active == "https://c"
    assert sidebar.active == "https://c"


def test_visibility_is_persisted_and_published() -> None:
    sidebar, _registry, store, bus, _menu = _setup()
    seen: list[bool] = []
    bus.subscribe(SidebarVisibilityChanged, lambda e: seen.append(e.hidden))

    sidebar.hide()
    assert sidebar.is_hidden() is True
    assert store.get(SIDEBAR_CLOSED_KEY) is True

    sidebar.toggle()
    assert sidebar.is_hidden() is False
    assert seen == [True, False]


def test_content_ready_reapplies_selection_and_visibility() -> None:
    sidebar, registry, store, bus, _menu = _setup()
    registry.add_host("https://a")
    store.set("active_host", "https://a")
    store.set(SIDEBAR_CLOSED_KEY, True)
    seen: list[bool] = []
    bus.subscribe(SidebarVisibilityChanged, lambda e: seen.append(e.hidden))

    bus.publish(ContentReady(url="https://a"))

    assert sidebar.active == "https://a"
    assert seen == [True]


def test_title_updates_label_and_initials() -> None:
    sidebar, registry, _store, _bus, _menu = _setup()
    registry.add_host("https://team.example.org")

    registry.set_host_title("https://team.example.org", "Ops Room")

    entry = sidebar.get("https://team.example.org")
    assert entry.title == "Ops Room"
    assert entry.initials == "O"


def test_initials_and_hotkeys() -> None:
    assert make_initials("https://chat.example.org") == "CE"
    assert make_initials("https://www.rocket.chat/") == "RC"
    assert make_initials("team") == "T"
    assert hotkey_label(3, "darwin") == "⌘3"
    assert hotkey_label(3, "win32") == "^3"


def test_entry_icon_is_the_server_favicon() -> None:
    sidebar, registry, _store, _bus, _menu = _setup()
    registry.add_host("https://chat.example.org/")

    assert sidebar.get("https://chat.example.org").icon_url == "https://chat.example.org/assets/favicon.svg"
