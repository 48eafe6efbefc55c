"""Per-host TLS trust overrides.

A certificate is trusted for a host only when the fingerprint stored for that
host equals the presented one. Concurrent errors for the same certificate
share a single prompt; every waiting connection gets the same answer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

from serverdeck.core.errors import CertificateTrustDenied
from serverdeck.core.storage import KeyValueStore

log = logging.getLogger(__name__)

TRUSTED_KEY = "trusted"

Decision = Callable[[bool], None]


@dataclass(frozen=True, slots=True)
class CertificateInfo:
    issuer_name: str
    data: bytes

    @property
    def fingerprint(self) -> str:
        """Issuer name plus raw certificate bytes, compared as an opaque token."""
        return f"{self.issuer_name}\n{self.data.hex()}"


@dataclass(frozen=True, slots=True)
class TrustPromptRequest:
    url: str
    host: str
    issuer_name: str
    detail: str
    replaces_existing: bool


class TrustPrompt(Protocol):
    def __call__(self, request: TrustPromptRequest, respond: Decision) -> None:
        """Ask the user; call ``respond`` once, now or later."""


class ContentSurface(Protocol):
    """Surface that raised the certificate error (a content view)."""

    def is_local_page(self) -> bool: ...

    def retry_host(self, url: str) -> None: ...


class CertificateStore:
    def __init__(self, store: KeyValueStore, prompt: TrustPrompt | None = None) -> None:
        self._store = store
        self._prompt = prompt
        self._data: dict[str, str] = {}
        self._queued: dict[str, list[Decision]] = {}

    def set_prompt(self, prompt: TrustPrompt) -> None:
        self._prompt = prompt

    # --- Persistence ---

    def load(self) -> None:
        raw = self._store.get(TRUSTED_KEY)
        if raw is None:
            self._data = {}
            return
        if not isinstance(raw, dict):
            log.warning("Trusted certificate table unreadable, starting empty")
            self.clear()
            return
        self._data = {str(host): fp for host, fp in raw.items() if isinstance(fp, str)}

    def save(self) -> None:
        self._store.set(TRUSTED_KEY, dict(self._data))

    def clear(self) -> None:
        self._data = {}
        self.save()
        log.info("Trusted certificates cleared")

    # --- Queries ---

    @staticmethod
    def get_host(cert_url: str) -> str:
        return urlsplit(cert_url).hostname or cert_url

    def add(self, cert_url: str, certificate: CertificateInfo) -> None:
        self._data[self.get_host(cert_url)] = certificate.fingerprint

    def is_existing(self, cert_url: str) -> bool:
        return self.get_host(cert_url) in self._data

    def is_trusted(self, cert_url: str, certificate: CertificateInfo) -> bool:
        stored = self._data.get(self.get_host(cert_url))
        return stored is not None and stored == certificate.fingerprint

    # --- Error flow ---

    def handle_certificate_error(
        self,
        url: str,
        certificate: CertificateInfo,
        callback: Decision,
        *,
        error: str = "",
        source: ContentSurface | None = None,
    ) -> None:
        if self.is_trusted(url, certificate):
            callback(True)
            return

        fingerprint = certificate.fingerprint
        waiting = self._queued.get(fingerprint)
        if waiting is not None:
            waiting.append(callback)
            return
        self._queued[fingerprint] = [callback]

        if self._prompt is None:
            log.warning("No trust prompt installed; rejecting certificate for %s", url)
            self._resolve(url, certificate, False, source)
            return

        detail = f"URL: {url}\nError: {error}"
        request = TrustPromptRequest(
            url=url,
            host=self.get_host(url),
            issuer_name=certificate.issuer_name,
            detail=detail,
            replaces_existing=self.is_existing(url),
        )
        answered = False

        def respond(trusted: bool) -> None:
            nonlocal answered
            if answered:
                return
            answered = True
            self._resolve(url, certificate, bool(trusted), source)

        try:
            self._prompt(request, respond)
        except Exception:
            log.exception("Trust prompt failed for %s", url, extra={"host": url})
            respond(False)

    def _resolve(
        self,
        url: str,
        certificate: CertificateInfo,
        trusted: bool,
        source: ContentSurface | None,
    ) -> None:
        if trusted:
            self.add(url, certificate)
            self.save()
            log.info("Certificate trusted for %s", self.get_host(url), extra={"host": url})
            if source is not None and source.is_local_page():
                source.retry_host(url)
        else:
            log.info("%s", CertificateTrustDenied(f"certificate for {url} rejected by user"))

        for cb in self._queued.pop(certificate.fingerprint, []):
            try:
                cb(trusted)
            except Exception:
                log.exception("Certificate decision callback failed")
