"""
Entry point for the ServerDeck desktop shell.

Run: python main.py [serverdeck://<host>]
Requires: pip install -e .
"""
from __future__ import annotations

import sys

from serverdeck.core.observability.logging_config import setup_logging
from serverdeck.ui.infrastructure import (
    Container,
    NotificationCenter,
    SingleInstanceGuard,
    create_application,
    install_error_boundary,
)
from serverdeck.ui.infrastructure.application import run_application

# QtWebEngine must be imported before the QApplication exists.
from serverdeck.ui.shell import MainWindow


def main() -> None:
    setup_logging()
    app = create_application()

    window: MainWindow | None = None

    def on_second_instance(argv: list[str]) -> None:
        if window is not None:
            window.handle_second_instance(argv)

    guard = SingleInstanceGuard()
    if not guard.try_lock(on_second_instance):
        return

    container = Container()
    window = MainWindow(container)
    window.show()

    notifications = NotificationCenter(window)
    container.set_notifications(notifications)
    install_error_boundary(notifications)

    container.commands.open_from_argv(sys.argv)

    app.aboutToQuit.connect(guard.release)
    run_application(app)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
