"""Run host checks on a worker thread and deliver results on the UI thread."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Any

from serverdeck.ui.infrastructure.signals import TaskSignals

log = logging.getLogger(__name__)


class QtTaskRunner:
    """``TaskRunnerPort`` backed by one short-lived thread per task.

    Each task gets its own ``asyncio.run`` loop. Callbacks are queued through a
    Qt signal, so they always run on the thread that created the runner.
    """

    def __init__(self) -> None:
        self._signals = TaskSignals()
        self._signals.finished.connect(self._dispatch)

    def submit(
        self,
        coro_factory: Callable[[], Awaitable[Any]],
        on_success: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        def _run() -> None:
            try:
                result = asyncio.run(_await(coro_factory))
            except Exception as exc:  # noqa: BLE001
                self._signals.finished.emit(on_error, exc)
                return
            self._signals.finished.emit(on_success, result)

        threading.Thread(target=_run, name="serverdeck-task", daemon=True).start()

    @staticmethod
    def _dispatch(callback: Callable[[Any], None], value: Any) -> None:
        callback(value)


async def _await(coro_factory: Callable[[], Awaitable[Any]]) -> Any:
    return await coro_factory()
