"""Lightweight in-process event bus.

The registry, the sidebar model and the view manager publish typed events;
Qt widgets and presentation relays subscribe.
"""

from .event_bus import EventBus, Subscription
from .host_events import (
    ActiveCleared,
    ActiveSet,
    BadgeSet,
    ContentMessage,
    ContentReady,
    GlobalBadgeChanged,
    HostAdded,
    HostRemoved,
    HostsLoaded,
    HostTitleSet,
    LandingShown,
    SidebarColorChanged,
    SidebarEntryAdded,
    SidebarEntryRemoved,
    SidebarReordered,
    SidebarVisibilityChanged,
)

__all__ = [
    "EventBus",
    "Subscription",
    "HostsLoaded",
    "HostAdded",
    "HostRemoved",
    "ActiveSet",
    "ActiveCleared",
    "HostTitleSet",
    "SidebarEntryAdded",
    "SidebarEntryRemoved",
    "SidebarReordered",
    "BadgeSet",
    "GlobalBadgeChanged",
    "SidebarVisibilityChanged",
    "SidebarColorChanged",
    "ContentReady",
    "ContentMessage",
    "LandingShown",
]
