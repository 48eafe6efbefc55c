from __future__ import annotations

import os
import sys
from pathlib import Path

from serverdeck.config import APP_NAME, PACKAGE_ROOT


def get_app_state_dir(app_folder_name: str = APP_NAME) -> Path:
    """Return a writable directory for app state (hosts, certificates, logs).

    Preference order:
    1) ``SERVERDECK_STATE_DIR`` environment variable (tests, portable installs)
    2) OS user data dir (~/.config/<app>, %APPDATA%\\<app>, etc)
    """
    override = os.environ.get("SERVERDECK_STATE_DIR")
    if override:
        return Path(override).expanduser().resolve()
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
        return (base / app_folder_name).resolve()
    if sys.platform == "darwin":
        return (Path.home() / "Library" / "Application Support" / app_folder_name).resolve()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else (Path.home() / ".config")
    return (base / app_folder_name).resolve()


def get_install_dir() -> Path:
    """Directory the application runs from; searched for a bundled servers.json."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return PACKAGE_ROOT.parent
