"""Deep links of the form ``serverdeck://<host>[/...][?insecure=true]``."""

from __future__ import annotations

import re
from collections.abc import Sequence

from serverdeck.config import PROTOCOL_SCHEME

_SEGMENT_SPLIT_RE = re.compile(r"[/?]")


def parse_protocol_url(uri: str, scheme: str = PROTOCOL_SCHEME) -> str | None:
    """Map a deep link to the server url it points at.

    ``serverdeck://chat.example.org`` -> ``https://chat.example.org``;
    with ``insecure=true`` in the query the scheme drops to ``http://``.
    """
    prefix = f"{scheme}://"
    if not uri.startswith(prefix):
        return None
    parts = _SEGMENT_SPLIT_RE.split(uri)
    site = parts[2] if len(parts) > 2 else ""
    if not site:
        return None
    target_scheme = "http://" if "insecure=true" in uri else "https://"
    return target_scheme + site


def get_protocol_url_from_process(args: Sequence[str], scheme: str = PROTOCOL_SCHEME) -> str | None:
    """Return the server url of the first deep link in launch arguments.

    ``args`` is a full argv; the program name alone never carries a link.
    """
    if len(args) <= 1:
        return None
    prefix = f"{scheme}://"
    for arg in args:
        if arg.startswith(prefix):
            return parse_protocol_url(arg, scheme)
    return None
