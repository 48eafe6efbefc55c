"""
QSettings wrapper: main window geometry, tray icon and menu bar visibility.
"""
from __future__ import annotations

from typing import cast

from PySide6.QtCore import QByteArray, QSettings

from serverdeck.config import APP_NAME, ORGANIZATION


class AppSettings:
    """Window-level persistence via QSettings (platform-specific path)."""

    def __init__(self, organization: str = ORGANIZATION, application: str = APP_NAME) -> None:
        self._q = QSettings(organization, application)

    # --- Main window ---
    def get_main_window_geometry(self) -> QByteArray | None:
        return cast(QByteArray | None, self._q.value("mainWindow/geometry", None, QByteArray))

    def set_main_window_geometry(self, geometry: QByteArray) -> None:
        self._q.setValue("mainWindow/geometry", geometry)

    def get_main_window_state(self) -> QByteArray | None:
        return cast(QByteArray | None, self._q.value("mainWindow/state", None, QByteArray))

    def set_main_window_state(self, state: QByteArray) -> None:
        self._q.setValue("mainWindow/state", state)

    # --- Tray ---
    def get_tray_visible(self) -> bool:
        return bool(self._q.value("tray/visible", True, bool))

    def set_tray_visible(self, visible: bool) -> None:
        self._q.setValue("tray/visible", visible)

    # --- Menu bar ---
    def get_menu_autohide(self) -> bool:
        return bool(self._q.value("menu/autohide", False, bool))

    def set_menu_autohide(self, autohide: bool) -> None:
        self._q.setValue("menu/autohide", autohide)

    def sync(self) -> None:
        self._q.sync()
