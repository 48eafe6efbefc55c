"""TLS trust overrides keyed by host, with prompt coalescing per certificate."""

from .store import (
    CertificateInfo,
    CertificateStore,
    ContentSurface,
    TrustPrompt,
    TrustPromptRequest,
)

__all__ = [
    "CertificateInfo",
    "CertificateStore",
    "ContentSurface",
    "TrustPrompt",
    "TrustPromptRequest",
]
