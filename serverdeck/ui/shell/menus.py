"""
Menu bar: application, view, window (one item per server) and help menus.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow, QMenu, QWidget

from serverdeck.application.commands import ShellCommands

MAX_SERVER_HOTKEY = 9


class ServerMenu:
    """``WindowMenuPort``: server items ordered by position with Ctrl+<n> accelerators."""

    def __init__(
        self,
        menu: QMenu,
        on_activate: Callable[[str], None],
        shortcut_owner: QWidget | None = None,
    ) -> None:
        self._menu = menu
        self._owner = shortcut_owner
        self._on_activate = on_activate
        self._items: dict[str, tuple[int, QAction]] = {}
        self._anchor = menu.addSeparator()

    def add_server(self, url: str, title: str, position: int) -> None:
        self.remove_server(url)
        action = QAction(title, self._menu)
        action.setData(url)
        if position <= MAX_SERVER_HOTKEY:
            action.setShortcut(QKeySequence(f"Ctrl+{position}"))
        action.triggered.connect(lambda checked=False, u=url: self._on_activate(u))
        self._items[url] = (position, action)
        if self._owner is not None:
            self._owner.addAction(action)
        self._rebuild()

    def remove_server(self, url: str) -> None:
        item = self._items.pop(url, None)
        if item is None:
            return
        self._menu.removeAction(item[1])
        if self._owner is not None:
            self._owner.removeAction(item[1])
        item[1].deleteLater()

    def set_title(self, url: str, title: str) -> None:
        item = self._items.get(url)
        if item is not None:
            item[1].setText(title)

    def titles(self) -> list[str]:
        return [action.text() for _pos, action in sorted(self._items.values(), key=lambda it: it[0])]

    def _rebuild(self) -> None:
        ordered = sorted(self._items.values(), key=lambda it: it[0])
        for _pos, action in ordered:
            self._menu.removeAction(action)
        for _pos, action in ordered:
            self._menu.insertAction(self._anchor, action)


@dataclass(frozen=True)
class WindowActions:
    """Shell-level callbacks the menus need beyond ``ShellCommands``."""

    toggle_tray: Callable[[], None]
    toggle_menu_bar: Callable[[], None]
    about: Callable[[], None]
    quit: Callable[[], None]


def _action(menu: QMenu, text: str, slot: Callable[[], None], shortcut: str | None = None) -> QAction:
    action = menu.addAction(text)
    if shortcut:
        action.setShortcut(QKeySequence(shortcut))
    action.triggered.connect(lambda checked=False: slot())
    return action


def build_menu_bar(window: QMainWindow, commands: ShellCommands, actions: WindowActions) -> ServerMenu:
    bar = window.menuBar()

    app_menu = bar.addMenu("&Server")
    _action(app_menu, "Add new server", commands.show_add_server, "Ctrl+N")
    app_menu.addSeparator()
    _action(app_menu, "Quit", actions.quit, "Ctrl+Q")

    view_menu = bar.addMenu("&View")
    _action(view_menu, "Reload current server", commands.reload_active, "Ctrl+R")
    _action(view_menu, "Back", commands.go_back, "Alt+Left")
    _action(view_menu, "Forward", commands.go_forward, "Alt+Right")
    view_menu.addSeparator()
    _action(view_menu, "Actual size", commands.reset_zoom, "Ctrl+0")
    _action(view_menu, "Zoom in", commands.zoom_in, "Ctrl+=")
    _action(view_menu, "Zoom out", commands.zoom_out, "Ctrl+-")
    view_menu.addSeparator()
    _action(view_menu, "Toggle server list", commands.toggle_sidebar, "Ctrl+Shift+S")
    _action(view_menu, "Toggle tray icon", actions.toggle_tray)
    _action(view_menu, "Toggle menu bar", actions.toggle_menu_bar, "Ctrl+Shift+M")
    view_menu.addSeparator()
    _action(view_menu, "Clear trusted certificates", commands.clear_certificate_trust)

    window_menu = bar.addMenu("&Window")
    server_menu = ServerMenu(window_menu, commands.activate_server, shortcut_owner=window)
    _action(window_menu, "Add new server", commands.show_add_server)

    help_menu = bar.addMenu("&Help")
    _action(help_menu, "About", actions.about)

    # Shortcuts keep working while the menu bar is hidden.
    for menu in (app_menu, view_menu, window_menu):
        window.addActions(menu.actions())
    return server_menu
