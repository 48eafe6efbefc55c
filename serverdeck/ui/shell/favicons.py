"""
Server icons for the server list, fetched from each server's favicon url.

Icons are refetched whenever a server page finishes loading so a changed
server logo shows up without a restart.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import QByteArray, QObject, QSize, Qt, QUrl, Signal
from PySide6.QtGui import QIcon, QPainter, QPixmap
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest
from PySide6.QtSvg import QSvgRenderer

from serverdeck.core.sidebar import favicon_url

log = logging.getLogger(__name__)

ICON_SIZE = QSize(32, 32)


def render_icon(data: bytes, size: QSize = ICON_SIZE) -> QIcon | None:
    """SVG or raster bytes to an icon; ``None`` when Qt cannot read them."""
    renderer = QSvgRenderer(QByteArray(data))
    if renderer.isValid():
        pixmap = QPixmap(size)
        pixmap.fill(Qt.GlobalColor.transparent)
        painter = QPainter(pixmap)
        renderer.render(painter)
        painter.end()
        return QIcon(pixmap)
    pixmap = QPixmap()
    if pixmap.loadFromData(data):
        return QIcon(pixmap)
    return None


class FaviconCache(QObject):
    icon_changed = Signal(str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._manager = QNetworkAccessManager(self)
        self._icons: dict[str, QIcon] = {}
        self._pending: set[str] = set()

    def icon(self, host_url: str) -> QIcon | None:
        return self._icons.get(host_url)

    def fetch(self, host_url: str) -> None:
        if host_url in self._pending:
            return
        self._pending.add(host_url)
        request = QNetworkRequest(QUrl(favicon_url(host_url)))
        request.setAttribute(
            QNetworkRequest.Attribute.CacheLoadControlAttribute,
            QNetworkRequest.CacheLoadControl.AlwaysNetwork,
        )
        reply = self._manager.get(request)
        reply.finished.connect(lambda: self._on_finished(host_url, reply))

    def _on_finished(self, host_url: str, reply: QNetworkReply) -> None:
        self._pending.discard(host_url)
        reply.deleteLater()
        if reply.error() != QNetworkReply.NetworkError.NoError:
            log.debug("No icon for %s: %s", host_url, reply.errorString(), extra={"host": host_url})
            return
        icon = render_icon(bytes(reply.readAll().data()))
        if icon is None:
            log.debug("Unreadable icon for %s", host_url, extra={"host": host_url})
            return
        self._icons[host_url] = icon
        self.icon_changed.emit(host_url)
