"""Composition root / DI container.

UI code should not build core services itself. This container wires the
stores, the registry, the sidebar model, the view manager and the shell
commands; Qt-side collaborators (view factory, dialogs, task runner) are
injected from the UI.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from serverdeck.application.commands import ShellCommands
from serverdeck.application.ports import HostDialogsPort, TaskRunnerPort
from serverdeck.config import CERTIFICATE_FILE, STATE_FILE
from serverdeck.core.certificates import CertificateStore
from serverdeck.core.events import EventBus
from serverdeck.core.hosts import HostValidator, ServerRegistry
from serverdeck.core.paths import get_app_state_dir, get_install_dir
from serverdeck.core.sidebar import SidebarModel
from serverdeck.core.storage import JsonFileStore, KeyValueStore
from serverdeck.core.views import ContentViewFactory, ContentViewManager

if TYPE_CHECKING:
    from serverdeck.ui.infrastructure.notifications import NotificationCenter


class Container:
    """Resolves application services. Single place to swap implementations if needed."""

    def __init__(
        self,
        state_dir: Path | None = None,
        *,
        state_store: KeyValueStore | None = None,
        certificate_store: KeyValueStore | None = None,
        validator: HostValidator | None = None,
        manifest_dirs: Sequence[Path] | None = None,
    ) -> None:
        self._state_dir = Path(state_dir) if state_dir is not None else None
        self._state_store = state_store
        self._certificate_store = certificate_store
        self._validator = validator
        self._manifest_dirs = tuple(manifest_dirs) if manifest_dirs is not None else None
        self._event_bus: EventBus | None = None
        self._registry: ServerRegistry | None = None
        self._certificates: CertificateStore | None = None
        self._sidebar: SidebarModel | None = None
        self._views: ContentViewManager | None = None
        self._commands: ShellCommands | None = None
        self._view_factory: ContentViewFactory | None = None
        self._dialogs: HostDialogsPort | None = None
        self._tasks: TaskRunnerPort | None = None
        self._notifications: NotificationCenter | None = None

    # --- Paths ---
    @property
    def state_dir(self) -> Path:
        if self._state_dir is None:
            self._state_dir = get_app_state_dir()
        return self._state_dir

    # --- Stores ---
    @property
    def state_store(self) -> KeyValueStore:
        if self._state_store is None:
            self._state_store = JsonFileStore(self.state_dir / STATE_FILE)
        return self._state_store

    @property
    def certificate_store(self) -> KeyValueStore:
        if self._certificate_store is None:
            self._certificate_store = JsonFileStore(self.state_dir / CERTIFICATE_FILE)
        return self._certificate_store

    # --- Core services ---
    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = EventBus()
        return self._event_bus

    @property
    def validator(self) -> HostValidator:
        """Host check. Certificates are checked later by the content view, not here."""
        if self._validator is None:
            self._validator = HostValidator(verify=False)
        return self._validator

    @property
    def registry(self) -> ServerRegistry:
        if self._registry is None:
            dirs = self._manifest_dirs
            if dirs is None:
                dirs = (self.state_dir, get_install_dir())
            self._registry = ServerRegistry(
                self.state_store,
                self.event_bus,
                validator=self.validator,
                manifest_dirs=dirs,
            )
        return self._registry

    @property
    def certificates(self) -> CertificateStore:
        if self._certificates is None:
            self._certificates = CertificateStore(self.certificate_store)
            self._certificates.load()
        return self._certificates

    @property
    def sidebar(self) -> SidebarModel:
        if self._sidebar is None:
            self._sidebar = SidebarModel(self.state_store, self.event_bus, self.registry)
        return self._sidebar

    @property
    def views(self) -> ContentViewManager:
        if self._views is None:
            if self._view_factory is None:
                raise RuntimeError("ContentViewFactory must be injected from UI")
            self._views = ContentViewManager(
                self.registry, self.event_bus, self.sidebar, self._view_factory
            )
        return self._views

    @property
    def commands(self) -> ShellCommands:
        if self._commands is None:
            if self._dialogs is None or self._tasks is None:
                raise RuntimeError("Dialogs and task runner must be injected from UI")
            self._commands = ShellCommands(
                self.registry,
                self.sidebar,
                self.views,
                self.certificates,
                self._dialogs,
                self._tasks,
            )
        return self._commands

    # --- UI-provided collaborators ---
    def set_view_factory(self, factory: ContentViewFactory) -> None:
        self._view_factory = factory

    def set_dialogs(self, dialogs: HostDialogsPort) -> None:
        self._dialogs = dialogs

    def set_task_runner(self, tasks: TaskRunnerPort) -> None:
        self._tasks = tasks

    @property
    def notifications(self) -> NotificationCenter:
        if self._notifications is None:
            raise RuntimeError("NotificationCenter must be injected from UI")
        return self._notifications

    def set_notifications(self, notifications: NotificationCenter) -> None:
        self._notifications = notifications

    # --- Startup ---
    def start(self) -> None:
        """Load servers, build the sidebar and the views, then restore the selection.

        The sidebar and the views populate themselves from the loaded registry;
        with no servers the landing surface is shown.
        """
        self.registry.load()
        _ = self.sidebar
        _ = self.views
        self.registry.restore_active()
