"""Inbound shell commands: window menu, tray, protocol links and context menus.

Each command maps onto registry, sidebar, view manager or certificate store
operations; nothing here keeps state of its own.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from serverdeck.application.ports import HostDialogsPort, TaskRunnerPort
from serverdeck.config import PROTOCOL_SCHEME, VALIDATION_TIMEOUT_SEC
from serverdeck.core.certificates import CertificateStore
from serverdeck.core.errors import HostValidationError, ValidationReason
from serverdeck.core.hosts import (
    ServerRegistry,
    get_protocol_url_from_process,
    parse_protocol_url,
    strip_trailing_slash,
)
from serverdeck.core.sidebar import SidebarModel
from serverdeck.core.views import ContentViewManager

log = logging.getLogger(__name__)


class ShellCommands:
    def __init__(
        self,
        registry: ServerRegistry,
        sidebar: SidebarModel,
        views: ContentViewManager,
        certificates: CertificateStore,
        dialogs: HostDialogsPort,
        tasks: TaskRunnerPort,
        *,
        validation_timeout: float = VALIDATION_TIMEOUT_SEC,
        scheme: str = PROTOCOL_SCHEME,
    ) -> None:
        self._registry = registry
        self._sidebar = sidebar
        self._views = views
        self._certificates = certificates
        self._dialogs = dialogs
        self._tasks = tasks
        self._timeout = validation_timeout
        self._scheme = scheme

    # --- Servers ---

    def add_host(self, url: str) -> None:
        """Confirm, validate, add and activate a server named by a link.

        A server that is already configured is activated without asking.
        """
        url = strip_trailing_slash(url.strip())
        if not url:
            return
        if self._registry.host_exists(url):
            self._registry.set_active(url)
            return
        if not self._dialogs.confirm_add_host(url):
            log.info("Adding %s declined", url, extra={"host": url})
            return

        def on_success(_result: object) -> None:
            added = self._registry.add_host(url)
            if added:
                self._registry.set_active(added)

        def on_error(exc: BaseException) -> None:
            reason = exc.reason if isinstance(exc, HostValidationError) else ValidationReason.INVALID
            if not isinstance(exc, HostValidationError):
                log.error("Validation of %s crashed", url, exc_info=exc)
            self._dialogs.show_invalid_host(url, reason)

        self._tasks.submit(lambda: self._registry.validate_host(url, self._timeout), on_success, on_error)

    def open_protocol_link(self, link: str) -> bool:
        url = parse_protocol_url(link, self._scheme)
        if url is None:
            log.debug("Not a %s link: %r", self._scheme, link)
            return False
        self.add_host(url)
        return True

    def open_from_argv(self, argv: Sequence[str]) -> bool:
        """Handle a link passed on the command line, ours or a second instance's."""
        url = get_protocol_url_from_process(argv, self._scheme)
        if url is None:
            return False
        self.add_host(url)
        return True

    def activate_server(self, url: str) -> None:
        self._registry.set_active(url)

    def activate_position(self, position: int) -> None:
        """Activate the server shown at ``position`` (1-based) in the server list."""
        entries = self._sidebar.entries()
        for entry in entries:
            if entry.position == position:
                self._registry.set_active(entry.url)
                return

    def remove_server(self, url: str) -> None:
        self._registry.remove_host(url)

    def reload_server(self, url: str) -> None:
        self._views.reload(url)

    def show_add_server(self) -> None:
        self._registry.clear_active()

    # --- Active view ---

    def reload_active(self) -> None:
        self._views.reload_active()

    def go_back(self) -> None:
        self._views.go_back()

    def go_forward(self) -> None:
        self._views.go_forward()

    def zoom_in(self) -> None:
        self._views.zoom_active(1)

    def zoom_out(self) -> None:
        self._views.zoom_active(-1)

    def reset_zoom(self) -> None:
        self._views.zoom_active(0)

    # --- Window ---

    def toggle_sidebar(self) -> None:
        self._sidebar.toggle()

    def clear_certificate_trust(self) -> None:
        self._certificates.clear()
