"""
QtWebEngine implementation of the content views.

One ``HostContentView`` per server lives in the main window's stack. Pages
share one persistent profile; certificate errors go to the certificate store
and basic-auth challenges are answered from the registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from PySide6.QtCore import Qt, QUrl
from PySide6.QtNetwork import QAuthenticator
from PySide6.QtWebEngineCore import (
    QWebEngineCertificateError,
    QWebEngineLoadingInfo,
    QWebEnginePage,
    QWebEngineProfile,
)
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QLabel, QStackedWidget, QWidget

from serverdeck.config import APP_NAME
from serverdeck.core.certificates import CertificateInfo, CertificateStore
from serverdeck.core.hosts import HostRecord
from serverdeck.core.views import ViewCallbacks
from serverdeck.ui.webview.bridge import (
    ASSETS_DIR,
    SCRIPT_WORLD,
    HostBridge,
    install_bridge,
    load_bridge_script,
    page_call,
)

log = logging.getLogger(__name__)

ERROR_PAGE = ASSETS_DIR / "loading_error.html"

# Qt accepts zoom factors between 0.25 and 5.0.
ZOOM_FACTOR_STEP = 1.1
ZOOM_MIN = 0.25
ZOOM_MAX = 5.0

Credentials = Callable[[str], "tuple[str, str] | None"]

_MEDIA_FEATURES = (
    QWebEnginePage.Feature.Notifications,
    QWebEnginePage.Feature.MediaAudioCapture,
    QWebEnginePage.Feature.MediaVideoCapture,
    QWebEnginePage.Feature.MediaAudioVideoCapture,
    QWebEnginePage.Feature.DesktopVideoCapture,
    QWebEnginePage.Feature.DesktopAudioVideoCapture,
)


def create_profile(storage_dir: Path, parent=None) -> QWebEngineProfile:
    """Persistent profile shared by all server pages (cookies, cache, local storage)."""
    profile = QWebEngineProfile(APP_NAME.lower(), parent)
    profile.setPersistentStoragePath(str(storage_dir / "storage"))
    profile.setCachePath(str(storage_dir / "cache"))
    return profile


class PopupWindow(QWebEngineView):
    """Top-level window for ``window.open`` / ``target=_blank`` from a server page."""

    def __init__(self, profile: QWebEngineProfile, on_closed: Callable[[PopupWindow], None]) -> None:
        super().__init__()
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self.setPage(QWebEnginePage(profile, self))
        self.page().windowCloseRequested.connect(self.close)
        self.page().titleChanged.connect(self.setWindowTitle)
        self.destroyed.connect(lambda: on_closed(self))
        self.resize(1000, 700)


class HostPage(QWebEnginePage):
    def __init__(self, profile: QWebEngineProfile, parent: QWidget, open_popup: Callable[[], QWebEnginePage]) -> None:
        super().__init__(profile, parent)
        self._open_popup = open_popup

    def createWindow(self, _window_type: QWebEnginePage.WebWindowType) -> QWebEnginePage:
        return self._open_popup()


class HostContentView:
    """``ContentView`` backed by a ``QWebEngineView`` inside the shell's stack."""

    def __init__(
        self,
        host: HostRecord,
        callbacks: ViewCallbacks,
        *,
        stack: QStackedWidget,
        profile: QWebEngineProfile,
        bridge_script: str,
        certificates: CertificateStore,
        credentials: Credentials,
        open_popup: Callable[[], QWebEnginePage],
    ) -> None:
        self._url = host.url
        self._callbacks = callbacks
        self._stack = stack
        self._certificates = certificates
        self._credentials = credentials
        self._active = False
        self._pending_cert_errors: list[QWebEngineCertificateError] = []

        self.widget = QWebEngineView(stack)
        self.widget.setObjectName("hostView")
        self.widget.setProperty("server", host.url)
        page = HostPage(profile, self.widget, open_popup)
        self.widget.setPage(page)

        self._loading = QLabel("Loading\u2026", self.widget)
        self._loading.setObjectName("hostLoading")
        self._loading.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._loading.setAutoFillBackground(True)
        self._loading.hide()

        self._bridge = HostBridge(callbacks.on_message, page)
        self._channel = install_bridge(page, self._bridge, bridge_script)

        page.urlChanged.connect(self._on_url_changed)
        page.loadingChanged.connect(self._on_loading_changed)
        page.loadFinished.connect(self._on_load_finished)
        page.certificateError.connect(self._on_certificate_error)
        page.authenticationRequired.connect(self._on_authentication_required)
        page.featurePermissionRequested.connect(self._on_permission_requested)

        stack.addWidget(self.widget)

    @property
    def url(self) -> str:
        return self._url

    @property
    def page(self) -> QWebEnginePage:
        return self.widget.page()

    # --- ContentView ---

    def load(self, url: str) -> None:
        self.widget.load(QUrl(url))

    def activate(self) -> None:
        self._active = True
        self._stack.setCurrentWidget(self.widget)

    def deactivate(self) -> None:
        self._active = False

    def focus(self) -> None:
        self.widget.setFocus(Qt.FocusReason.OtherFocusReason)

    def go_back(self) -> None:
        self.widget.back()

    def go_forward(self) -> None:
        self.widget.forward()

    def show_error_page(self) -> None:
        self.widget.load(QUrl.fromLocalFile(str(ERROR_PAGE)))

    def show_loading(self) -> None:
        self._loading.setGeometry(self.widget.rect())
        self._loading.raise_()
        self._loading.show()

    def is_local_page(self) -> bool:
        return self.widget.url().isLocalFile()

    def retry_host(self, url: str) -> None:
        self.load(url)

    def zoom(self, step: int) -> None:
        if step == 0:
            factor = 1.0
        else:
            factor = self.widget.zoomFactor() * ZOOM_FACTOR_STEP**step
        self.widget.setZoomFactor(min(ZOOM_MAX, max(ZOOM_MIN, factor)))

    def send(self, channel: str, *args: Any) -> None:
        self.page.runJavaScript(page_call(channel, args), SCRIPT_WORLD)

    def dispose(self) -> None:
        for error in self._pending_cert_errors:
            error.rejectCertificate()
        self._pending_cert_errors.clear()
        self._stack.removeWidget(self.widget)
        self.widget.deleteLater()

    # --- Page signals ---

    def _on_url_changed(self, url: QUrl) -> None:
        if not url.isLocalFile():
            self._callbacks.on_navigated_in_page(url.toString())

    def _on_loading_changed(self, info: QWebEngineLoadingInfo) -> None:
        if info.status() != QWebEngineLoadingInfo.LoadStatus.LoadFailedStatus:
            return
        if info.url().isLocalFile():
            log.error("Local page failed to load: %s", info.url().toString())
            return
        if info.errorDomain() == QWebEngineLoadingInfo.ErrorDomain.HttpStatusCodeDomain:
            self._callbacks.on_http_status(info.errorCode(), True)
        else:
            self._callbacks.on_load_failed(True)

    def _on_load_finished(self, ok: bool) -> None:
        self._loading.hide()
        if ok:
            self._callbacks.on_dom_ready()

    def _on_certificate_error(self, error: QWebEngineCertificateError) -> None:
        chain = error.certificateChain()
        if not chain:
            error.rejectCertificate()
            return
        cert = chain[0]
        info = CertificateInfo(issuer_name=cert.issuerDisplayName(), data=bytes(cert.toDer().data()))
        error.defer()
        self._pending_cert_errors.append(error)

        def decide(trusted: bool) -> None:
            if not any(e is error for e in self._pending_cert_errors):
                return
            self._pending_cert_errors = [e for e in self._pending_cert_errors if e is not error]
            if trusted:
                error.acceptCertificate()
            else:
                error.rejectCertificate()

        self._certificates.handle_certificate_error(
            error.url().toString(),
            info,
            decide,
            error=error.description(),
            source=self,
        )

    def _on_authentication_required(self, request_url: QUrl, authenticator: QAuthenticator) -> None:
        creds = self._credentials(request_url.toString())
        if creds is None:
            log.info("No stored credentials for %s", request_url.toString(), extra={"host": self._url})
            return
        authenticator.setUser(creds[0])
        authenticator.setPassword(creds[1])

    def _on_permission_requested(self, origin: QUrl, feature: QWebEnginePage.Feature) -> None:
        granted = feature in _MEDIA_FEATURES and origin.toString().startswith(self._url)
        policy = (
            QWebEnginePage.PermissionPolicy.PermissionGrantedByUser
            if granted
            else QWebEnginePage.PermissionPolicy.PermissionDeniedByUser
        )
        self.page.setFeaturePermission(origin, feature, policy)


class WebViewFactory:
    """``ContentViewFactory`` building ``HostContentView`` widgets into one stack."""

    def __init__(
        self,
        stack: QStackedWidget,
        profile: QWebEngineProfile,
        certificates: CertificateStore,
        credentials: Credentials,
    ) -> None:
        self._stack = stack
        self._profile = profile
        self._certificates = certificates
        self._credentials = credentials
        self._bridge_script = load_bridge_script()
        self._popups: list[PopupWindow] = []

    def __call__(self, host: HostRecord, callbacks: ViewCallbacks) -> HostContentView:
        return HostContentView(
            host,
            callbacks,
            stack=self._stack,
            profile=self._profile,
            bridge_script=self._bridge_script,
            certificates=self._certificates,
            credentials=self._credentials,
            open_popup=self._open_popup,
        )

    def _open_popup(self) -> QWebEnginePage:
        popup = PopupWindow(self._profile, self._popups.remove)
        self._popups.append(popup)
        popup.show()
        return popup.page()
