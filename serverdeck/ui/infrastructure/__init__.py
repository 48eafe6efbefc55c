"""Infrastructure: application bootstrap, signals bridge, DI, settings.

Keep this package import lightweight: do not import Qt GUI modules at import time.
Some headless CI environments have PySide6 installed but miss runtime GUI libs
(e.g. ``libGL.so.1``). Lazy exports below allow importing
``serverdeck.ui.infrastructure.di`` without triggering Qt GUI initialization.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "create_application",
    "Container",
    "NotificationCenter",
    "install_error_boundary",
    "AppSettings",
    "SingleInstanceGuard",
    "QtTaskRunner",
]

_EXPORTS = {
    "create_application": "serverdeck.ui.infrastructure.application",
    "Container": "serverdeck.ui.infrastructure.di",
    "NotificationCenter": "serverdeck.ui.infrastructure.notifications",
    "install_error_boundary": "serverdeck.ui.infrastructure.error_boundary",
    "AppSettings": "serverdeck.ui.infrastructure.settings",
    "SingleInstanceGuard": "serverdeck.ui.infrastructure.single_instance",
    "QtTaskRunner": "serverdeck.ui.infrastructure.tasks",
}


def __getattr__(name: str) -> Any:
    module = _EXPORTS.get(name)
    if module is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module), name)
