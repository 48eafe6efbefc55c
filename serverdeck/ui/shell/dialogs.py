"""
Dialog adapters for the core's prompts: certificate trust, adding a server
from a link, and the screen-share source picker.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QInputDialog, QMessageBox, QWidget

from serverdeck.core.certificates import TrustPromptRequest
from serverdeck.core.errors import ValidationReason

log = logging.getLogger(__name__)

VALIDATION_MESSAGES = {
    ValidationReason.BASIC_AUTH: "Authentication required. Try username:password@host",
    ValidationReason.INVALID: "No valid server found at this URL",
    ValidationReason.TIMEOUT: "Timeout trying to connect",
}


class TrustPromptDialogs:
    """``TrustPrompt``: a non-modal question box per untrusted certificate."""

    def __init__(self, parent: QWidget) -> None:
        self._parent = parent
        self._open: list[QMessageBox] = []

    def __call__(self, request: TrustPromptRequest, respond: Callable[[bool], None]) -> None:
        text = f"Certificate error for {request.host}"
        info = f"Issuer: {request.issuer_name}"
        if request.detail:
            info += f"\n\n{request.detail}"
        if request.replaces_existing:
            info += "\n\nThis server presents a different certificate than the one you trusted before."
        info += "\n\nDo you want to trust it anyway?"

        box = QMessageBox(self._parent)
        box.setIcon(QMessageBox.Icon.Warning)
        box.setWindowTitle("Certificate error")
        box.setText(text)
        box.setInformativeText(info)
        box.setStandardButtons(QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
        box.setDefaultButton(QMessageBox.StandardButton.No)

        def finished(_result: int) -> None:
            trusted = box.clickedButton() == box.button(QMessageBox.StandardButton.Yes)
            self._open.remove(box)
            box.deleteLater()
            respond(trusted)

        box.finished.connect(finished)
        self._open.append(box)
        box.open()


class QtHostDialogs:
    """``HostDialogsPort`` with modal message boxes."""

    def __init__(self, parent: QWidget) -> None:
        self._parent = parent

    def confirm_add_host(self, url: str) -> bool:
        answer = QMessageBox.question(
            self._parent,
            "Add server",
            f"Do you want to add {url} to your list of servers?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def show_invalid_host(self, url: str, reason: ValidationReason) -> None:
        QMessageBox.critical(
            self._parent,
            "Invalid server",
            f"{url} could not be added.\n{VALIDATION_MESSAGES[reason]}",
        )


class ScreenSharePicker:
    """``ScreenSharePort``: pick one of the attached screens by name."""

    def __init__(self, parent: QWidget) -> None:
        self._parent = parent

    def request_source(self, reply: Callable[[str | None], None]) -> None:
        screens = QGuiApplication.screens()
        names = [f"{i + 1}: {s.name()}" for i, s in enumerate(screens)]
        if not names:
            reply(None)
            return
        choice, ok = QInputDialog.getItem(self._parent, "Share your screen", "Screen:", names, 0, False)
        if not ok:
            reply(None)
            return
        index = names.index(choice)
        log.debug("Screen %s selected for sharing", choice)
        reply(f"screen:{index}:0")
