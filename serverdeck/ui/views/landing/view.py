"""
Add-server form shown when no server is active.

Input is checked on a worker thread (bare words become ``<word>.<domain>``,
missing schemes become ``https://``). Results for text the user has since
edited are dropped.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from serverdeck.application.container import Container
from serverdeck.application.ports import TaskRunnerPort
from serverdeck.config import APP_NAME, DEFAULT_DOMAIN, DEFAULT_INSTANCE, FORM_VALIDATION_TIMEOUT_SEC
from serverdeck.core.errors import HostValidationError, ValidationReason
from serverdeck.core.hosts import resolve_host_input
from serverdeck.ui.shell.dialogs import VALIDATION_MESSAGES

log = logging.getLogger(__name__)


class LandingView(QWidget):
    def __init__(
        self,
        container: Container,
        tasks: TaskRunnerPort,
        parent: QWidget | None = None,
        *,
        timeout: float = FORM_VALIDATION_TIMEOUT_SEC,
        default_domain: str = DEFAULT_DOMAIN,
        default_instance: str = DEFAULT_INSTANCE,
    ) -> None:
        super().__init__(parent)
        self._container = container
        self._tasks = tasks
        self._timeout = timeout
        self._default_domain = default_domain
        self._default_instance = default_instance
        self._submit_after_validation = False
        self._validating: str | None = None

        root = QVBoxLayout(self)
        root.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("Connect to a server")
        title.setStyleSheet("font-size: 20px; font-weight: bold;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(title)

        self.host_field = QLineEdit()
        self.host_field.setPlaceholderText(self._default_instance)
        self.host_field.setMinimumWidth(360)
        self.host_field.returnPressed.connect(self.submit)
        self.host_field.editingFinished.connect(self.validate)
        root.addWidget(self.host_field)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #ef4444;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        root.addWidget(self.error_label)

        self.connect_button = QPushButton("Connect")
        self.connect_button.clicked.connect(self.submit)
        root.addWidget(self.connect_button)

        self.offline_label = QLabel(f"No network connection. {APP_NAME} will connect when you are back online.")
        self.offline_label.setStyleSheet("color: #94a3b8;")
        self.offline_label.hide()
        root.addWidget(self.offline_label)

    # --- Validation ---

    def validate(self) -> None:
        text = self.host_field.text().strip().rstrip("/")
        if text == self._validating:
            return
        self._set_error(None)
        if not text:
            self._validating = None
            self._set_busy(False)
            return
        self._validating = text
        self._set_busy(True)
        self._tasks.submit(
            lambda: resolve_host_input(
                text,
                self._container.registry.validate_host,
                self._timeout,
                default_domain=self._default_domain,
            ),
            lambda url: self._on_validated(text, url),
            lambda exc: self._on_failed(text, exc),
        )

    def _is_stale(self, text: str) -> bool:
        return self._validating != text or self.host_field.text().strip().rstrip("/") != text

    def _on_validated(self, text: str, url: str) -> None:
        if self._is_stale(text):
            log.debug("Dropping stale validation result for %r", text)
            return
        self._validating = None
        self._set_busy(False)
        self.host_field.setText(url)
        if self._submit_after_validation:
            self._submit_after_validation = False
            self._add(url)

    def _on_failed(self, text: str, exc: BaseException) -> None:
        if self._is_stale(text):
            return
        self._validating = None
        self._submit_after_validation = False
        self._set_busy(False)
        if isinstance(exc, HostValidationError):
            self._set_error(VALIDATION_MESSAGES[exc.reason])
            self.connect_button.setText("Invalid URL")
        else:
            log.error("Validation of %r crashed", text, exc_info=exc)
            self._set_error(VALIDATION_MESSAGES[ValidationReason.INVALID])

    # --- Submit ---

    def submit(self) -> None:
        text = self.host_field.text().strip().rstrip("/")
        if not text:
            self._add(self._default_instance)
            return
        self._submit_after_validation = True
        if self._validating != text:
            self.validate()

    def _add(self, url: str) -> None:
        registry = self._container.registry
        added = registry.add_host(url)
        if added:
            self._container.sidebar.show()
            registry.set_active(added)
        self.host_field.clear()
        self._set_error(None)

    # --- State ---

    def _set_busy(self, busy: bool) -> None:
        self.connect_button.setEnabled(not busy)
        self.connect_button.setText("Validating..." if busy else "Connect")

    def _set_error(self, message: str | None) -> None:
        self.error_label.setText(message or "")
        self.error_label.setVisible(bool(message))

    def set_online(self, online: bool) -> None:
        self.offline_label.setVisible(not online)

    def focus_input(self) -> None:
        self.host_field.setFocus()
