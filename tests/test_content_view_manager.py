from __future__ import annotations

from serverdeck.core.events import (
    ContentMessage,
    ContentReady,
    EventBus,
    LandingShown,
    SidebarColorChanged,
)
from serverdeck.core.hosts import HOSTS_KEY, ServerRegistry
from serverdeck.core.sidebar import SidebarModel
from serverdeck.core.storage import MemoryStore
from serverdeck.core.views import SIDEBAR_COLOR_REQUEST, ContentViewManager


class _View:
    def __init__(self, host, callbacks) -> None:
        self.url = host.url
        self.callbacks = callbacks
        self.loaded: list[str] = []
        self.sent: list[tuple] = []
        self.active = False
        self.focused = 0
        self.error_pages = 0
        self.disposed = False
        self.history: list[str] = []
        self.loading = 0
        self.zoom_steps: list[int] = []

    def load(self, url: str) -> None:
        self.loaded.append(url)

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False

    def focus(self) -> None:
        self.focused += 1

    def go_back(self) -> None:
        self.history.append("back")

    def go_forward(self) -> None:
        self.history.append("forward")

    def show_error_page(self) -> None:
        self.error_pages += 1

    def show_loading(self) -> None:
        self.loading += 1

    def zoom(self, step: int) -> None:
        self.zoom_steps.append(step)

    def is_local_page(self) -> bool:
        return self.error_pages > 0

    def retry_host(self, url: str) -> None:
        self.load(url)

    def send(self, channel: str, *args) -> None:
        self.sent.append((channel, args))

    def dispose(self) -> None:
        self.disposed = True


class _ScreenShare:
    def __init__(self, answer: str | None) -> None:
        self.answer = answer

    def request_source(self, reply) -> None:
        reply(self.answer)


def _setup(initial: dict | None = None, screen_share=None):
    store = MemoryStore(initial)
    bus = EventBus()
    registry = ServerRegistry(store, bus)
    registry.load()
    sidebar = SidebarModel(store, bus, registry, platform="linux")
    created: dict[str, _View] = {}

    def factory(host, callbacks):
        view = _View(host, callbacks)
        created[host.url] = view
        return view

    manager = ContentViewManager(registry, bus, sidebar, factory, screen_share=screen_share)
    return manager, registry, sidebar, bus, created


def test_existing_hosts_get_views_at_last_path() -> None:
    hosts = {
        "schema_version": 1,
        "hosts": {
            "https://a": {"url": "https://a", "title": "A", "lastPath": "https://a/channel/dev"},
            "https://b": {"url": "https://b", "title": "B"},
        },
    }
    manager, _registry, _sidebar, _bus, created = _setup({HOSTS_KEY: hosts})

    assert len(manager) == 2
    assert created["https://a"].loaded == ["https://a/channel/dev"]
    assert created["https://b"].loaded == ["https://b"]


def test_add_is_idempotent() -> None:
    manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")

    again = manager.add(registry.get("https://a"))

    assert again is created["https://a"]
    assert created["https://a"].loaded == ["https://a"]


def test_only_one_view_is_active() -> None:
    manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")

    registry.set_active("https://a")
    registry.set_active("https://b")

    assert created["https://b"].active is True
    assert created["https://a"].active is False
    assert created["https://b"].focused == 1
    assert manager.is_active("https://b")
    assert manager.get_active() is created["https://b"]


def test_removing_host_disposes_view_and_shows_landing() -> None:
    manager, registry, _sidebar, bus, created = _setup()
    registry.add_host("https://a")
    registry.set_active("https://a")
    landings: list[LandingShown] = []
    bus.subscribe(LandingShown, landings.append)

    registry.remove_host("https://a")

    assert created["https://a"].disposed is True
    assert manager.get("https://a") is None
    assert manager.get_active() is None
    assert landings == [LandingShown()]


def test_empty_registry_shows_landing() -> None:
    manager, registry, _sidebar, bus, _created = _setup()
    landings: list[LandingShown] = []
    bus.subscribe(LandingShown, landings.append)

    registry.restore_active()

    assert landings == [LandingShown()]
    assert manager.get_active() is None


def test_in_page_navigation_saves_last_path() -> None:
    _manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    callbacks = created["https://a"].callbacks

    callbacks.on_navigated_in_page("https://a/channel/general")
    callbacks.on_navigated_in_page("https://elsewhere.example.org")

    assert registry.get("https://a").last_path == "https://a/channel/general"


def test_messages_are_dispatched_by_channel() -> None:
    _manager, registry, sidebar, bus, created = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")
    registry.set_active("https://a")
    messages: list[ContentMessage] = []
    colors: list[SidebarColorChanged] = []
    bus.subscribe(ContentMessage, messages.append)
    bus.subscribe(SidebarColorChanged, colors.append)
    on_message = created["https://b"].callbacks.on_message

    on_message("title-changed", ("Team B",))
    on_message("unread-changed", (7,))
    on_message("sidebar-background", ({"color": "#fff", "background": "#000"},))
    on_message("focus", ())
    on_message("no-such-channel", ("x",))

    assert registry.get("https://b").title == "Team B"
    assert sidebar.get("https://b").badge == "7"
    assert colors == [SidebarColorChanged(color="#fff", background="#000")]
    assert registry.active == "https://b"
    assert created["https://b"].active is True
    assert [m.channel for m in messages] == [
        "title-changed",
        "unread-changed",
        "sidebar-background",
        "focus",
        "no-such-channel",
    ]


def test_reload_server_reloads_active_view_from_root() -> None:
    _manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    registry.set_active("https://a")
    created["https://a"].loaded.clear()

    created["https://a"].callbacks.on_message("reload-server", ())

    assert created["https://a"].loaded == ["https://a"]
    assert created["https://a"].loading == 1


def test_source_id_reply_goes_to_active_view() -> None:
    _manager, registry, _sidebar, _bus, created = _setup(screen_share=_ScreenShare("screen:0:0"))
    registry.add_host("https://a")
    registry.set_active("https://a")
    created["https://a"].sent.clear()

    created["https://a"].callbacks.on_message("get-sourceId", ())

    assert created["https://a"].sent == [("get-sourceId", ("screen:0:0",))]


def test_main_frame_failures_show_error_page() -> None:
    _manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    callbacks = created["https://a"].callbacks

    callbacks.on_load_failed(False)
    callbacks.on_http_status(404, True)
    callbacks.on_http_status(502, False)
    assert created["https://a"].error_pages == 0

    callbacks.on_load_failed(True)
    callbacks.on_http_status(503, True)
    assert created["https://a"].error_pages == 2


def test_dom_ready_publishes_content_ready() -> None:
    _manager, registry, _sidebar, bus, created = _setup()
    registry.add_host("https://a")
    ready: list[ContentReady] = []
    bus.subscribe(ContentReady, ready.append)

    created["https://a"].callbacks.on_dom_ready()

    assert ready == [ContentReady(url="https://a")]


def test_navigation_targets_active_view() -> None:
    manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    registry.set_active("https://a")

    manager.go_back()
    manager.go_forward()

    assert created["https://a"].history == ["back", "forward"]


def test_active_view_is_asked_for_theme_colours() -> None:
    _manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    registry.add_host("https://b")

    registry.set_active("https://a")
    assert created["https://a"].sent == [(SIDEBAR_COLOR_REQUEST, ())]

    # Any page finishing its load re-asks the active one.
    created["https://b"].callbacks.on_dom_ready()
    assert created["https://a"].sent == [(SIDEBAR_COLOR_REQUEST, ()), (SIDEBAR_COLOR_REQUEST, ())]
    assert created["https://b"].sent == []


def test_zoom_targets_active_view() -> None:
    manager, registry, _sidebar, _bus, created = _setup()
    registry.add_host("https://a")
    manager.zoom_active(1)
    assert created["https://a"].zoom_steps == []

    registry.set_active("https://a")
    manager.zoom_active(1)
    manager.zoom_active(0)

    assert created["https://a"].zoom_steps == [1, 0]
