"""Host validation for the add-server flow.

``GET <host>/api/info`` decides whether a url points at a usable server:

- 2xx with a JSON body: valid
- 401 carrying ``WWW-Authenticate: Basic ...``: ``basic-auth``
- anything else, including transport errors: ``invalid``
- no answer within the timeout: ``timeout``
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from serverdeck.config import DEFAULT_DOMAIN, VALIDATION_TIMEOUT_SEC
from serverdeck.core.errors import HostValidationError, ValidationReason
from serverdeck.core.hosts.models import strip_trailing_slash

log = logging.getLogger(__name__)

_HAS_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HAS_SCHEME_AND_HOST_RE = re.compile(r"^https?://.+", re.IGNORECASE)
_LOCALHOST_RE = re.compile(r"^([^:]+:[^@]+@)?localhost(:\d+)?$", re.IGNORECASE)


class HostValidator:
    """Fetches ``/api/info`` with httpx; the request races a timer and the first to finish wins."""

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        verify: bool = True,
    ) -> None:
        self._transport = transport
        self._verify = verify

    async def _fetch_info(self, host_url: str) -> ValidationReason | None:
        async with httpx.AsyncClient(
            transport=self._transport,
            verify=self._verify,
            timeout=None,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(f"{host_url}/api/info")
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                log.debug("Info request to %s failed: %s", host_url, exc)
                return ValidationReason.INVALID

        if response.is_success:
            try:
                response.json()
            except ValueError:
                return ValidationReason.INVALID
            return None
        if response.status_code == 401:
            challenge = response.headers.get("www-authenticate", "")
            if challenge.lower().startswith("basic "):
                return ValidationReason.BASIC_AUTH
        return ValidationReason.INVALID

    async def validate(self, host_url: str, timeout: float | None = VALIDATION_TIMEOUT_SEC) -> None:
        """Return when the host is valid, raise :class:`HostValidationError` otherwise."""
        request = asyncio.ensure_future(self._fetch_info(host_url))
        if not timeout:
            reason = await request
        else:
            timer = asyncio.ensure_future(asyncio.sleep(timeout))
            try:
                done, _ = await asyncio.wait({request, timer}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in (request, timer):
                    if not task.done():
                        task.cancel()
            reason = request.result() if request in done else ValidationReason.TIMEOUT

        if reason is not None:
            log.info("Host %s rejected", host_url, extra={"host": host_url, "reason": reason.value})
            raise HostValidationError(reason)
        log.debug("Host %s validated", host_url)


Validate = Callable[[str, float], Awaitable[None]]


async def resolve_host_input(
    text: str,
    validate: Validate,
    timeout: float,
    *,
    default_domain: str = DEFAULT_DOMAIN,
) -> str:
    """Turn what the user typed into a validated server url.

    Empty input comes back as ``""`` (caller substitutes its default server).
    A bare word is tried as ``https://<word>.<default_domain>``, other inputs
    without a scheme get ``https://``. Explicit urls and basic-auth challenges
    fail immediately with the server's reason.
    """
    candidate = strip_trailing_slash(text.strip())
    while candidate:
        try:
            await validate(candidate, timeout)
            return candidate
        except HostValidationError as exc:
            if _HAS_SCHEME_AND_HOST_RE.match(candidate) or exc.reason is ValidationReason.BASIC_AUTH:
                raise
            if not ("." in candidate or _LOCALHOST_RE.match(candidate)):
                candidate = f"https://{candidate}.{default_domain}"
                continue
            if not _HAS_SCHEME_RE.match(candidate):
                candidate = f"https://{candidate}"
                continue
            raise
    return ""
