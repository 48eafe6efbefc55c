"""App shell: main window, server list, menus, tray and dialogs."""

__all__ = ["MainWindow", "ServerListWidget"]


def __getattr__(name):
    # Lazy re-exports: importing a submodule (e.g. dialogs) must not pull in
    # main_window, which imports views that themselves import shell.dialogs.
    if name == "MainWindow":
        from serverdeck.ui.shell.main_window import MainWindow

        return MainWindow
    if name == "ServerListWidget":
        from serverdeck.ui.shell.sidebar import ServerListWidget

        return ServerListWidget
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
