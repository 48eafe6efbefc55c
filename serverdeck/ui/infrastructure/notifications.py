from __future__ import annotations

import logging
from dataclasses import dataclass

from PySide6.QtWidgets import QMessageBox

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class NotificationCenter:
    """Very small notification helper.

    Shows a short status bar message when the window has one and falls back to
    QMessageBox for errors. The last notification is kept for inspection.
    """

    def __init__(self, window) -> None:
        self._window = window
        self.last: Notification | None = None

    def _status(self, level: str, text: str, *, ms: int = 4500) -> None:
        self.last = Notification(level=level, message=text)
        sb = getattr(self._window, "statusBar", None)
        if callable(sb):
            sb = sb()
        if sb is not None and hasattr(sb, "showMessage"):
            sb.showMessage(text, ms)
        else:
            log.debug("No status bar for notification: %s", text)

    @staticmethod
    def _join_message(title_or_message: str, message: str | None = None) -> str:
        if message is None:
            return title_or_message
        return f"{title_or_message}: {message}" if title_or_message else message

    def info(self, title_or_message: str, message: str | None = None) -> None:
        self._status("info", self._join_message(title_or_message, message))

    def warning(self, title_or_message: str, message: str | None = None) -> None:
        self._status("warning", self._join_message(title_or_message, message))

    def error(self, title_or_message: str, message: str | None = None) -> None:
        text = self._join_message(title_or_message, message)
        self._status("error", text)
        QMessageBox.critical(self._window, "Error", text)
