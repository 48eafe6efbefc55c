from __future__ import annotations

import asyncio

import httpx

from serverdeck.application.commands import ShellCommands
from serverdeck.core.certificates import CertificateInfo, CertificateStore
from serverdeck.core.errors import ValidationReason
from serverdeck.core.events import EventBus
from serverdeck.core.hosts import HostValidator, ServerRegistry
from serverdeck.core.sidebar import SidebarModel
from serverdeck.core.storage import MemoryStore
from serverdeck.core.views import ContentViewManager


class _InlineTasks:
    """Runs the coroutine right away on the calling thread."""

    def submit(self, coro_factory, on_success, on_error) -> None:
        async def _run():
            return await coro_factory()

        try:
            result = asyncio.run(_run())
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)


class _Dialogs:
    def __init__(self, confirm: bool = True) -> None:
        self.confirm = confirm
        self.asked: list[str] = []
        self.invalid: list[tuple[str, ValidationReason]] = []

    def confirm_add_host(self, url: str) -> bool:
        self.asked.append(url)
        return self.confirm

    def show_invalid_host(self, url: str, reason: ValidationReason) -> None:
        self.invalid.append((url, reason))


class _View:
    def __init__(self, _host, _callbacks) -> None:
        self.loaded: list[str] = []
        self.loading = 0
        self.zoom_steps: list[int] = []

    def load(self, url: str) -> None:
        self.loaded.append(url)

    def activate(self) -> None: ...

    def deactivate(self) -> None: ...

    def focus(self) -> None: ...

    def show_loading(self) -> None:
        self.loading += 1

    def zoom(self, step: int) -> None:
        self.zoom_steps.append(step)

    def send(self, channel: str, *args) -> None: ...

    def dispose(self) -> None: ...


def _info_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "good.example.org":
        return httpx.Response(200, json={"version": "6.0.0"})
    return httpx.Response(404)


def _setup(confirm: bool = True):
    store = MemoryStore()
    bus = EventBus()
    validator = HostValidator(transport=httpx.MockTransport(_info_handler))
    registry = ServerRegistry(store, bus, validator=validator)
    registry.load()
    sidebar = SidebarModel(store, bus, registry, platform="linux")
    views: dict[str, _View] = {}

    def factory(host, callbacks):
        views[host.url] = _View(host, callbacks)
        return views[host.url]

    manager = ContentViewManager(registry, bus, sidebar, factory)
    certificates = CertificateStore(MemoryStore())
    dialogs = _Dialogs(confirm)
    commands = ShellCommands(registry, sidebar, manager, certificates, dialogs, _InlineTasks())
    return commands, registry, sidebar, certificates, dialogs, views


def test_link_adds_validated_host_and_activates_it() -> None:
    commands, registry, _sidebar, _certs, dialogs, views = _setup()

    assert commands.open_protocol_link("serverdeck://good.example.org") is True

    assert dialogs.asked == ["https://good.example.org"]
    assert registry.host_exists("https://good.example.org")
    assert registry.active == "https://good.example.org"
    assert "https://good.example.org" in views


def test_declined_link_adds_nothing() -> None:
    commands, registry, _sidebar, _certs, _dialogs, _views = _setup(confirm=False)

    commands.add_host("https://good.example.org")

    assert len(registry) == 0


def test_invalid_host_shows_error() -> None:
    commands, registry, _sidebar, _certs, dialogs, _views = _setup()

    commands.add_host("https://bad.example.org/")

    assert len(registry) == 0
    assert dialogs.invalid == [("https://bad.example.org", ValidationReason.INVALID)]


def test_known_host_is_activated_without_asking() -> None:
    commands, registry, _sidebar, _certs, dialogs, _views = _setup()
    registry.add_host("https://a.example.org")
    registry.add_host("https://b.example.org")
    registry.set_active("https://a.example.org")

    commands.add_host("https://b.example.org")

    assert dialogs.asked == []
    assert registry.active == "https://b.example.org"


def test_argv_link_and_plain_argv() -> None:
    commands, registry, _sidebar, _certs, _dialogs, _views = _setup()

    assert commands.open_from_argv(["serverdeck"]) is False
    assert commands.open_from_argv(["serverdeck", "serverdeck://good.example.org"]) is True
    assert registry.host_exists("https://good.example.org")


def test_show_add_server_clears_selection() -> None:
    commands, registry, _sidebar, _certs, _dialogs, _views = _setup()
    registry.add_host("https://a.example.org")
    registry.set_active("https://a.example.org")

    commands.show_add_server()

    assert registry.active is None


def test_position_shortcut_activates_matching_entry() -> None:
    commands, registry, _sidebar, _certs, _dialogs, _views = _setup()
    registry.add_host("https://a.example.org")
    registry.add_host("https://b.example.org")

    commands.activate_position(2)

    assert registry.active == "https://b.example.org"


def test_reload_and_remove_server() -> None:
    commands, registry, _sidebar, _certs, _dialogs, views = _setup()
    registry.add_host("https://a.example.org")

    commands.reload_server("https://a.example.org")
    assert views["https://a.example.org"].loaded == ["https://a.example.org", "https://a.example.org"]
    assert views["https://a.example.org"].loading == 1

    commands.remove_server("https://a.example.org")
    assert not registry.host_exists("https://a.example.org")


def test_toggle_sidebar_and_clear_certificates() -> None:
    commands, _registry, sidebar, certs, _dialogs, _views = _setup()
    cert = CertificateInfo(issuer_name="CA", data=b"\x00")
    certs.add("https://a.example.org", cert)

    commands.toggle_sidebar()
    commands.clear_certificate_trust()

    assert sidebar.is_hidden() is True
    assert not certs.is_existing("https://a.example.org")


def test_zoom_commands_reach_active_view() -> None:
    commands, registry, _sidebar, _certs, _dialogs, views = _setup()
    registry.add_host("https://a.example.org")
    registry.set_active("https://a.example.org")

    commands.zoom_in()
    commands.zoom_out()
    commands.reset_zoom()

    assert views["https://a.example.org"].zoom_steps == [1, -1, 0]
