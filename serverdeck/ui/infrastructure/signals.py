"""
Thread-safe signal bridge: worker threads hand results back to the main thread.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class TaskSignals(QObject):
    """Emit from any thread; slots run on the thread that owns the object."""

    finished = Signal(object, object)  # (callback, result or exception)

