"""
QApplication setup: High DPI, shared GL contexts for WebEngine, names for QSettings.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from PySide6.QtCore import QCoreApplication, Qt
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from serverdeck.config import APP_NAME, ORGANIZATION
from serverdeck.core.version import get_build_info


def create_application(argv: list[str] | None = None) -> QApplication:
    """Create and configure QApplication. Call before any Qt widgets.

    WebEngine views need shared OpenGL contexts, which must be requested before
    the application object exists.
    """
    QCoreApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )
    app = QApplication(sys.argv if argv is None else argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(ORGANIZATION)
    app.setApplicationVersion(get_build_info()["version"])
    # Closing the window hides it to the tray; quitting is explicit.
    app.setQuitOnLastWindowClosed(False)
    return app


def run_application(app: QApplication) -> NoReturn:
    """Run the event loop. Does not return until app quits."""
    sys.exit(app.exec())
