"""Ordered server list with badges, hotkeys and drag-reorder."""

from .model import (
    ATTENTION_MARK,
    SORT_ORDER_KEY,
    SidebarEntry,
    SidebarModel,
    WindowMenuPort,
    badge_count,
    favicon_url,
    hotkey_label,
    make_initials,
)

__all__ = [
    "ATTENTION_MARK",
    "SORT_ORDER_KEY",
    "SidebarEntry",
    "SidebarModel",
    "WindowMenuPort",
    "badge_count",
    "favicon_url",
    "hotkey_label",
    "make_initials",
]
