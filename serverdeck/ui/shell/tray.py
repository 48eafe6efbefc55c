"""
Tray icon: show/hide and quit, with an alert dot while there are unread counts.
"""
from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QColor, QIcon, QPainter, QPixmap
from PySide6.QtWidgets import QMenu, QStyle, QSystemTrayIcon, QWidget

from serverdeck.config import APP_NAME
from serverdeck.core.events import EventBus, GlobalBadgeChanged

ICON_SIZE = 64


def alert_icon(base: QIcon) -> QIcon:
    """``base`` with a red dot in the top-right corner."""
    pixmap = base.pixmap(ICON_SIZE, ICON_SIZE)
    if pixmap.isNull():
        pixmap = QPixmap(ICON_SIZE, ICON_SIZE)
        pixmap.fill(Qt.GlobalColor.transparent)
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor("#f5455c"))
    dot = ICON_SIZE // 3
    painter.drawEllipse(ICON_SIZE - dot, 0, dot, dot)
    painter.end()
    return QIcon(pixmap)


class TrayIcon(QSystemTrayIcon):
    def __init__(
        self,
        window: QWidget,
        event_bus: EventBus,
        on_toggle_window: Callable[[], None],
        on_quit: Callable[[], None],
    ) -> None:
        base = window.windowIcon()
        if base.isNull():
            base = window.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)
        super().__init__(base, window)
        self._base_icon = base
        self._alert_icon = alert_icon(base)
        self._alert = False
        self.setToolTip(APP_NAME)

        menu = QMenu(window)
        show_act = QAction("Show/Hide", menu)
        show_act.triggered.connect(lambda checked=False: on_toggle_window())
        menu.addAction(show_act)
        menu.addSeparator()
        quit_act = QAction("Quit", menu)
        quit_act.triggered.connect(lambda checked=False: on_quit())
        menu.addAction(quit_act)
        self.setContextMenu(menu)

        self.activated.connect(self._on_activated(on_toggle_window))
        event_bus.subscribe_weak(GlobalBadgeChanged, self._on_badge_changed)

    @staticmethod
    def _on_activated(on_toggle_window: Callable[[], None]) -> Callable[[QSystemTrayIcon.ActivationReason], None]:
        def handler(reason: QSystemTrayIcon.ActivationReason) -> None:
            if reason == QSystemTrayIcon.ActivationReason.Trigger:
                on_toggle_window()

        return handler

    @property
    def alert(self) -> bool:
        return self._alert

    def _on_badge_changed(self, event: GlobalBadgeChanged) -> None:
        self.show_alert(event.is_count, event.badge)

    def show_alert(self, alert: bool, badge: str = "") -> None:
        self._alert = alert
        self.setIcon(self._alert_icon if alert else self._base_icon)
        self.setToolTip(f"{APP_NAME} ({badge})" if badge else APP_NAME)
