"""
QWebChannel bridge between server pages and the shell.

The page side is ``assets/bridge.js``; it runs in the application script
world, so the remote page's own scripts cannot reach the channel object.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from PySide6.QtCore import QFile, QIODevice, QObject, Slot
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineScript

log = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
BRIDGE_OBJECT_NAME = "hostBridge"
SCRIPT_WORLD = QWebEngineScript.ScriptWorldId.ApplicationWorld

MessageHandler = Callable[[str, tuple[Any, ...]], None]


def _read_qrc_text(path: str) -> str:
    """Read a Qt resource file as UTF-8 text."""
    f = QFile(path)
    if f.open(QIODevice.OpenModeFlag.ReadOnly):
        data = bytes(f.readAll()).decode("utf-8", errors="replace")
        f.close()
        return data
    return ""


def load_bridge_script() -> str:
    """qwebchannel.js from Qt resources followed by our page shim."""
    qwc_js = _read_qrc_text(":/qtwebchannel/qwebchannel.js")
    if not qwc_js:
        log.warning("qwebchannel.js not found in Qt resources; page messages are disabled")
    shim = (ASSETS_DIR / "bridge.js").read_text(encoding="utf-8")
    # Keep newlines: flattening breaks // comments
    return qwc_js + "\n" + shim if qwc_js else shim


class HostBridge(QObject):
    """Receives ``desktopBridge.send(channel, ...args)`` calls from one page."""

    def __init__(self, on_message: MessageHandler, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._on_message = on_message

    @Slot(str, str)
    def send(self, channel: str, payload: str) -> None:
        try:
            args = json.loads(payload) if payload else []
        except ValueError:
            log.warning("Dropping malformed page message on %r", channel, extra={"channel": channel})
            return
        if not isinstance(args, list):
            args = [args]
        self._on_message(channel, tuple(args))


def install_bridge(page: QWebEnginePage, bridge: HostBridge, script_source: str) -> QWebChannel:
    """Register ``bridge`` on a channel and inject the page shim, both in the isolated world."""
    channel = QWebChannel(page)
    channel.registerObject(BRIDGE_OBJECT_NAME, bridge)
    page.setWebChannel(channel, SCRIPT_WORLD)

    script = QWebEngineScript()
    script.setName("serverdeck_bridge")
    script.setSourceCode(script_source)
    script.setInjectionPoint(QWebEngineScript.InjectionPoint.DocumentCreation)
    script.setWorldId(SCRIPT_WORLD)
    script.setRunsOnSubFrames(False)
    page.scripts().insert(script)
    return channel


def page_call(channel: str, args: tuple[Any, ...]) -> str:
    """JavaScript that hands a shell reply to the page shim."""
    return (
        "window.desktopBridge && window.desktopBridge.receive("
        f"{json.dumps(channel)}, {json.dumps(list(args))});"
    )
