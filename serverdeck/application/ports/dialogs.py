"""Application port for the dialogs shown around adding a server.

Shell commands ask through this interface so they can run without Qt.
"""

from __future__ import annotations

from typing import Protocol

from serverdeck.core.errors import ValidationReason


class HostDialogsPort(Protocol):
    def confirm_add_host(self, url: str) -> bool:
        """Ask whether a server coming from a link should be added."""

    def show_invalid_host(self, url: str, reason: ValidationReason) -> None:
        """Tell the user the server could not be added."""
