"""One content view per configured server, switched in place.

The manager reacts to registry events and turns messages coming from inside
the remote content into registry or sidebar operations. It never touches
Qt directly: views are produced by an injected factory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from serverdeck.core.errors import ContentLoadFailure
from serverdeck.core.events import (
    ActiveCleared,
    ActiveSet,
    ContentMessage,
    ContentReady,
    EventBus,
    HostAdded,
    HostRemoved,
    HostsLoaded,
    LandingShown,
    Subscription,
)
from serverdeck.core.hosts import HostRecord, ServerRegistry
from serverdeck.core.sidebar import SidebarModel

log = logging.getLogger(__name__)

SERVER_ERROR_STATUS = 500
# Asks the page to report its theme colours back on "sidebar-background".
SIDEBAR_COLOR_REQUEST = "request-sidebar-color"


class ContentView(Protocol):
    """A loaded server page. Hidden views stay loaded."""

    def load(self, url: str) -> None: ...

    def activate(self) -> None: ...

    def deactivate(self) -> None: ...

    def focus(self) -> None: ...

    def go_back(self) -> None: ...

    def go_forward(self) -> None: ...

    def show_loading(self) -> None: ...

    def show_error_page(self) -> None: ...

    def is_local_page(self) -> bool: ...

    def retry_host(self, url: str) -> None: ...

    def zoom(self, step: int) -> None:
        """Zoom in (+1), out (-1) or back to 100% (0)."""

    def send(self, channel: str, *args: Any) -> None: ...

    def dispose(self) -> None: ...


@dataclass(frozen=True, slots=True)
class ViewCallbacks:
    """Hooks a view calls back into; bound to one host url."""

    on_navigated_in_page: Callable[[str], None]
    on_message: Callable[[str, tuple[Any, ...]], None]
    on_load_failed: Callable[[bool], None]
    on_http_status: Callable[[int, bool], None]
    on_dom_ready: Callable[[], None]


class ContentViewFactory(Protocol):
    def __call__(self, host: HostRecord, callbacks: ViewCallbacks) -> ContentView: ...


class ScreenSharePort(Protocol):
    def request_source(self, reply: Callable[[str | None], None]) -> None: ...


class ContentViewManager:
    def __init__(
        self,
        registry: ServerRegistry,
        event_bus: EventBus,
        sidebar: SidebarModel,
        factory: ContentViewFactory,
        *,
        screen_share: ScreenSharePort | None = None,
    ) -> None:
        self._registry = registry
        self._bus = event_bus
        self._sidebar = sidebar
        self._factory = factory
        self._screen_share = screen_share
        self._views: dict[str, ContentView] = {}
        self._active: str | None = None

        self._subscriptions: list[Subscription] = [
            self._bus.subscribe(HostsLoaded, self._on_hosts_loaded),
            self._bus.subscribe(HostAdded, self._on_host_added),
            self._bus.subscribe(HostRemoved, lambda e: self.remove(e.url)),
            self._bus.subscribe(ActiveSet, lambda e: self.set_active(e.url)),
            self._bus.subscribe(ActiveCleared, lambda _e: self.show_landing()),
        ]

        for host in self._registry:
            self.add(host)

    def close(self) -> None:
        for sub in self._subscriptions:
            self._bus.unsubscribe(sub)
        self._subscriptions.clear()
        for url in list(self._views):
            self.remove(url)

    def set_screen_share(self, port: ScreenSharePort) -> None:
        self._screen_share = port

    # --- Views ---

    def _on_hosts_loaded(self, _event: HostsLoaded) -> None:
        if self._active is None:
            self.show_landing()

    def _on_host_added(self, event: HostAdded) -> None:
        host = self._registry.get(event.url)
        if host is not None:
            self.add(host)

    def add(self, host: HostRecord) -> ContentView:
        existing = self._views.get(host.url)
        if existing is not None:
            return existing

        url = host.url
        callbacks = ViewCallbacks(
            on_navigated_in_page=lambda new_url: self._on_navigated_in_page(url, new_url),
            on_message=lambda channel, args: self._on_message(url, channel, args),
            on_load_failed=lambda main_frame: self._on_load_failed(url, main_frame),
            on_http_status=lambda status, main_frame: self._on_http_status(url, status, main_frame),
            on_dom_ready=lambda: self._on_dom_ready(url),
        )
        view = self._factory(host, callbacks)
        self._views[url] = view
        view.load(host.last_path or host.url)
        log.debug("Content view created for %s", url, extra={"host": url})
        return view

    def remove(self, url: str) -> None:
        view = self._views.pop(url, None)
        if view is None:
            return
        if self._active == url:
            self._active = None
        view.dispose()

    def get(self, url: str) -> ContentView | None:
        return self._views.get(url)

    def __contains__(self, url: object) -> bool:
        return url in self._views

    def __len__(self) -> int:
        return len(self._views)

    # --- Selection ---

    def get_active(self) -> ContentView | None:
        return self._views.get(self._active) if self._active else None

    @property
    def active_url(self) -> str | None:
        return self._active

    def is_active(self, url: str) -> bool:
        return self._active == url

    def set_active(self, url: str) -> None:
        if self.is_active(url):
            return
        view = self._views.get(url)
        if view is None:
            log.warning("No content view for %s", url, extra={"host": url})
            return
        self.deactivate_all()
        self._active = url
        view.activate()
        view.focus()
        view.send(SIDEBAR_COLOR_REQUEST)

    def deactivate_all(self) -> None:
        for view in self._views.values():
            view.deactivate()
        self._active = None

    def show_landing(self) -> None:
        self.deactivate_all()
        self._bus.publish(LandingShown())

    def focus_active(self) -> None:
        view = self.get_active()
        if view is not None:
            view.focus()

    def zoom_active(self, step: int) -> None:
        view = self.get_active()
        if view is not None:
            view.zoom(step)

    # --- Navigation ---

    def reload_active(self) -> None:
        if self._active is not None:
            self.reload(self._active)

    def reload(self, url: str) -> None:
        """Reload ``url``'s view from the server root behind the loading overlay."""
        view = self._views.get(url)
        if view is not None:
            view.show_loading()
            view.load(url)

    def go_back(self) -> None:
        view = self.get_active()
        if view is not None:
            view.go_back()

    def go_forward(self) -> None:
        view = self.get_active()
        if view is not None:
            view.go_forward()

    # --- View callbacks ---

    def _on_navigated_in_page(self, url: str, new_url: str) -> None:
        if new_url.startswith(url):
            self._registry.set_last_path(url, new_url)

    def _on_dom_ready(self, url: str) -> None:
        self._bus.publish(ContentReady(url=url))
        active = self.get_active()
        if active is not None:
            active.send(SIDEBAR_COLOR_REQUEST)

    def _on_load_failed(self, url: str, is_main_frame: bool) -> None:
        if not is_main_frame:
            return
        self._show_error(url, ContentLoadFailure(f"{url}: page failed to load"))

    def _on_http_status(self, url: str, status: int, is_main_frame: bool) -> None:
        if is_main_frame and status >= SERVER_ERROR_STATUS:
            self._show_error(url, ContentLoadFailure(f"{url}: server answered {status}"))

    def _show_error(self, url: str, failure: ContentLoadFailure) -> None:
        log.warning("%s", failure, extra={"host": url})
        view = self._views.get(url)
        if view is not None:
            view.show_error_page()

    def _on_message(self, url: str, channel: str, args: tuple[Any, ...]) -> None:
        handler = self._channel_handlers.get(channel)
        if handler is None:
            log.debug("Ignoring message on unknown channel %r", channel, extra={"host": url, "channel": channel})
        else:
            handler(self, url, args)
        self._bus.publish(ContentMessage(url=url, channel=channel, args=tuple(args)))

    def _title_changed(self, url: str, args: tuple[Any, ...]) -> None:
        if args and isinstance(args[0], str):
            self._registry.set_host_title(url, args[0])

    def _unread_changed(self, url: str, args: tuple[Any, ...]) -> None:
        self._sidebar.set_badge(url, args[0] if args else None)

    def _focus(self, url: str, _args: tuple[Any, ...]) -> None:
        self._registry.set_active(url)

    def _get_source_id(self, url: str, _args: tuple[Any, ...]) -> None:
        if self._screen_share is None:
            log.info("Screen share requested by %s but no picker is available", url, extra={"host": url})
            return

        def reply(source_id: str | None) -> None:
            view = self.get_active()
            if view is not None:
                view.send("get-sourceId", source_id)

        self._screen_share.request_source(reply)

    def _reload_server(self, _url: str, _args: tuple[Any, ...]) -> None:
        self.reload_active()

    def _sidebar_background(self, _url: str, args: tuple[Any, ...]) -> None:
        style = args[0] if args and isinstance(args[0], dict) else {}
        self._sidebar.change_color(style.get("color"), style.get("background"))

    _channel_handlers: dict[str, Callable[[ContentViewManager, str, tuple[Any, ...]], None]] = {
        "title-changed": _title_changed,
        "unread-changed": _unread_changed,
        "focus": _focus,
        "get-sourceId": _get_source_id,
        "reload-server": _reload_server,
        "sidebar-background": _sidebar_background,
    }
