"""Per-server content views and in-content message dispatch."""

from .manager import (
    SIDEBAR_COLOR_REQUEST,
    ContentView,
    ContentViewFactory,
    ContentViewManager,
    ScreenSharePort,
    ViewCallbacks,
)

__all__ = [
    "ContentView",
    "ContentViewFactory",
    "ContentViewManager",
    "SIDEBAR_COLOR_REQUEST",
    "ScreenSharePort",
    "ViewCallbacks",
]
