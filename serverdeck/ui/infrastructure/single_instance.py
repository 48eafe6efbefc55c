"""Single-instance lock via QLocalServer.

The first launch listens on a local socket; later launches send their argv
to it (protocol links) and exit.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable

from PySide6.QtNetwork import QLocalServer, QLocalSocket

from serverdeck.config import APP_NAME

log = logging.getLogger(__name__)

SOCKET_NAME = f"{APP_NAME.lower()}-single-instance"


class SingleInstanceGuard:
    """Ensures only one app instance runs. Forwards argv to the existing instance."""

    def __init__(self, socket_name: str = SOCKET_NAME) -> None:
        self._socket_name = socket_name
        self._server: QLocalServer | None = None

    def try_lock(
        self,
        on_second_instance: Callable[[list[str]], None] | None = None,
        argv: list[str] | None = None,
    ) -> bool:
        """Return True for the first instance; otherwise forward argv and return False."""
        socket = QLocalSocket()
        socket.connectToServer(self._socket_name)
        if socket.waitForConnected(500):
            payload = json.dumps(sys.argv if argv is None else argv).encode("utf-8")
            socket.write(payload)
            socket.waitForBytesWritten(1000)
            socket.disconnectFromServer()
            log.info("Another instance is running; arguments forwarded")
            return False

        # Stale socket files survive crashes on Linux/macOS
        QLocalServer.removeServer(self._socket_name)

        self._server = QLocalServer()
        if not self._server.listen(self._socket_name):
            log.warning("Single-instance socket unavailable: %s", self._server.errorString())
            return True
        if on_second_instance is not None:
            self._server.newConnection.connect(lambda: self._handle_connection(on_second_instance))
        return True

    def _handle_connection(self, callback: Callable[[list[str]], None]) -> None:
        if self._server is None:
            return
        conn = self._server.nextPendingConnection()
        if conn is None:
            return
        conn.waitForReadyRead(1000)
        data = conn.readAll().data()
        conn.disconnectFromServer()
        try:
            argv = json.loads(data.decode("utf-8"))
        except ValueError:
            log.warning("Discarding unreadable arguments from a second instance")
            return
        if isinstance(argv, list):
            callback([str(a) for a in argv])

    def release(self) -> None:
        if self._server is not None:
            self._server.close()
            self._server = None
