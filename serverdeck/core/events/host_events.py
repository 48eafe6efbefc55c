"""Events published by the host registry, the sidebar model and the view manager.

One event per mutation. Subscribers must tolerate repeated notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# --- Registry ---


@dataclass(frozen=True, slots=True)
class HostsLoaded:
    """Registry finished loading, or fell back to the landing state."""

    count: int


@dataclass(frozen=True, slots=True)
class HostAdded:
    url: str


@dataclass(frozen=True, slots=True)
class HostRemoved:
    url: str


@dataclass(frozen=True, slots=True)
class ActiveSet:
    url: str


@dataclass(frozen=True, slots=True)
class ActiveCleared:
    pass


@dataclass(frozen=True, slots=True)
class HostTitleSet:
    url: str
    title: str


# --- Sidebar ---


@dataclass(frozen=True, slots=True)
class SidebarEntryAdded:
    url: str
    position: int


@dataclass(frozen=True, slots=True)
class SidebarEntryRemoved:
    url: str


@dataclass(frozen=True, slots=True)
class SidebarReordered:
    order: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BadgeSet:
    url: str
    badge: str | None


@dataclass(frozen=True, slots=True)
class GlobalBadgeChanged:
    """Aggregated unread indicator: a count, the attention dot, or ""."""

    badge: str

    @property
    def is_count(self) -> bool:
        return self.badge.isdigit() and int(self.badge) > 0


@dataclass(frozen=True, slots=True)
class SidebarVisibilityChanged:
    hidden: bool


@dataclass(frozen=True, slots=True)
class SidebarColorChanged:
    color: str | None
    background: str | None


# --- Content views ---


@dataclass(frozen=True, slots=True)
class ContentReady:
    """A hosted page finished building its DOM."""

    url: str


@dataclass(frozen=True, slots=True)
class ContentMessage:
    """Raw message raised by a hosted session through the bridge."""

    url: str
    channel: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class LandingShown:
    pass
