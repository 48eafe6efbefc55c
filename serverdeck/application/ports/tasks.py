"""Application port for running host checks off the UI thread."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class TaskRunnerPort(Protocol):
    def submit(
        self,
        coro_factory: Callable[[], Awaitable[Any]],
        on_success: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        """Run the coroutine to completion; callbacks fire on the UI thread."""
