"""
Main window: server list + stacked content (landing form and one view per server).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QByteArray, QEvent
from PySide6.QtGui import QCloseEvent
from PySide6.QtNetwork import QNetworkInformation
from PySide6.QtWidgets import QApplication, QHBoxLayout, QMainWindow, QMessageBox, QStackedWidget, QWidget

from serverdeck.config import APP_NAME, UPDATE_NOTIFICATIONS_ENABLED
from serverdeck.core.events import (
    ContentMessage,
    GlobalBadgeChanged,
    HostTitleSet,
    LandingShown,
    SidebarVisibilityChanged,
)
from serverdeck.core.version import get_version_string
from serverdeck.ui.infrastructure.tasks import QtTaskRunner
from serverdeck.ui.shell.favicons import FaviconCache
from serverdeck.ui.shell.dialogs import QtHostDialogs, ScreenSharePicker, TrustPromptDialogs
from serverdeck.ui.shell.menus import ServerMenu, WindowActions, build_menu_bar
from serverdeck.ui.shell.sidebar import ServerListWidget
from serverdeck.ui.shell.tray import TrayIcon
from serverdeck.ui.views.landing import LandingView
from serverdeck.ui.webview.view import WebViewFactory, create_profile

if TYPE_CHECKING:
    from serverdeck.ui.infrastructure.di import Container

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Application window. Wires the Qt adapters into the container and starts it."""

    def __init__(self, container: Container) -> None:
        super().__init__()
        self._container = container
        self._settings = container.settings
        self._bus = container.event_bus
        self._quitting = False
        self._server_list: ServerListWidget | None = None
        self._server_menu: ServerMenu | None = None

        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

        self._tasks = QtTaskRunner()
        container.set_task_runner(self._tasks)
        container.set_dialogs(QtHostDialogs(self))
        container.certificates.set_prompt(TrustPromptDialogs(self))

        central = QWidget()
        self.setCentralWidget(central)
        self._layout = QHBoxLayout(central)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(0)

        self._stack = QStackedWidget()
        self._landing = LandingView(container, self._tasks)
        self._stack.addWidget(self._landing)
        self._profile = create_profile(container.state_dir / "web", self)
        container.set_view_factory(
            WebViewFactory(
                self._stack,
                self._profile,
                container.certificates,
                container.registry.credentials_for,
            )
        )

        self._bus.subscribe_weak(LandingShown, self._on_landing_shown)
        self._bus.subscribe_weak(SidebarVisibilityChanged, self._on_sidebar_visibility)
        self._bus.subscribe_weak(GlobalBadgeChanged, self._on_global_badge)
        self._bus.subscribe_weak(HostTitleSet, self._on_host_title)
        self._bus.subscribe_weak(ContentMessage, self._on_content_message)

        container.start()

        sidebar = container.sidebar
        commands = container.commands
        self._server_list = ServerListWidget(sidebar, self._bus, self, icons=FaviconCache(self))
        self._server_list.server_clicked.connect(commands.activate_server)
        self._server_list.add_server_clicked.connect(commands.show_add_server)
        self._server_list.reload_requested.connect(commands.reload_server)
        self._server_list.remove_requested.connect(commands.remove_server)
        self._server_list.setVisible(not sidebar.is_hidden())

        self._layout.addWidget(self._server_list)
        self._layout.addWidget(self._stack, 1)

        container.views.set_screen_share(ScreenSharePicker(self))

        self._tray = TrayIcon(self, self._bus, self.toggle_visibility, self.quit_app)
        self._tray.setVisible(self._settings.get_tray_visible())

        self._server_menu = build_menu_bar(
            self,
            commands,
            WindowActions(
                toggle_tray=self.toggle_tray,
                toggle_menu_bar=self.toggle_menu_bar,
                about=self.show_about,
                quit=self.quit_app,
            ),
        )
        sidebar.set_menu(self._server_menu)
        self.menuBar().setVisible(not self._settings.get_menu_autohide())

        self._setup_network_watch()
        self._restore_geometry()

    # --- Bus handlers ---

    def _on_landing_shown(self, _event: LandingShown) -> None:
        self._stack.setCurrentWidget(self._landing)
        self._landing.focus_input()

    def _on_sidebar_visibility(self, event: SidebarVisibilityChanged) -> None:
        if self._server_list is not None:
            self._server_list.setVisible(not event.hidden)

    def _on_global_badge(self, event: GlobalBadgeChanged) -> None:
        self.setWindowTitle(f"({event.badge}) {APP_NAME}" if event.badge else APP_NAME)

    def _on_host_title(self, event: HostTitleSet) -> None:
        if self._server_menu is not None:
            self._server_menu.set_title(event.url, event.title)

    def _on_content_message(self, event: ContentMessage) -> None:
        # A page asking for focus (e.g. a clicked notification) raises the window.
        if event.channel == "focus":
            self.bring_to_front()

    # --- Window actions ---

    def toggle_visibility(self) -> None:
        if self.isVisible() and self.isActiveWindow():
            self.hide()
        else:
            self.bring_to_front()

    def bring_to_front(self) -> None:
        self.showNormal()
        self.raise_()
        self.activateWindow()

    def toggle_tray(self) -> None:
        visible = not self._tray.isVisible()
        self._tray.setVisible(visible)
        self._settings.set_tray_visible(visible)

    def toggle_menu_bar(self) -> None:
        hidden = self.menuBar().isVisible()
        self.menuBar().setVisible(not hidden)
        self._settings.set_menu_autohide(hidden)

    def show_about(self) -> None:
        text = f"{APP_NAME} {get_version_string()}"
        if not UPDATE_NOTIFICATIONS_ENABLED:
            text += "\n\nUpdate notifications are turned off."
        QMessageBox.about(self, f"About {APP_NAME}", text)

    def quit_app(self) -> None:
        self._quitting = True
        self.close()

    def handle_second_instance(self, argv: list[str]) -> None:
        self.bring_to_front()
        self._container.commands.open_from_argv(argv)

    # --- Network ---

    def _setup_network_watch(self) -> None:
        if not QNetworkInformation.loadDefaultBackend():
            log.debug("No network information backend; offline indicator disabled")
            return
        info = QNetworkInformation.instance()
        if info is None:
            return
        info.reachabilityChanged.connect(self._on_reachability_changed)
        self._on_reachability_changed(info.reachability())

    def _on_reachability_changed(self, reachability: QNetworkInformation.Reachability) -> None:
        self._landing.set_online(reachability != QNetworkInformation.Reachability.Disconnected)

    # --- Geometry ---

    def _restore_geometry(self) -> None:
        geom = self._settings.get_main_window_geometry()
        if isinstance(geom, QByteArray) and not geom.isEmpty():
            self.restoreGeometry(geom)
        state = self._settings.get_main_window_state()
        if isinstance(state, QByteArray) and not state.isEmpty():
            self.restoreState(state)

    def _save_geometry(self) -> None:
        self._settings.set_main_window_geometry(self.saveGeometry())
        self._settings.set_main_window_state(self.saveState())
        self._settings.sync()

    def changeEvent(self, event: QEvent) -> None:
        super().changeEvent(event)
        if event.type() == QEvent.Type.ActivationChange and self.isActiveWindow():
            self._container.views.focus_active()

    def closeEvent(self, event: QCloseEvent) -> None:
        if not self._quitting and self._tray.isVisible():
            # Keep running in the tray
            event.ignore()
            self.hide()
            return
        self._save_geometry()
        super().closeEvent(event)
        QApplication.quit()
