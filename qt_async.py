# qt_async.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional

from PySide6.QtCore import QObject, QTimer


logger = logging.getLogger(__name__)


class AsyncPump(QObject):
    """
    Runs coroutines on a private asyncio loop, advanced a slice at a time
    from a QTimer so the Qt event loop never blocks on them.
    """

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = 10) -> None:
        super().__init__(parent)
        self._loop = asyncio.new_event_loop()
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = self._loop.create_task(coro)
        task.add_done_callback(self._report)
        return task

    def _report(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task failed: %s", exc, exc_info=exc)

    def _tick(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon(self._loop.stop)
        self._loop.run_forever()

    def close(self) -> None:
        self._timer.stop()
        if self._loop.is_closed():
            return
        pending = [t for t in asyncio.all_tasks(self._loop) if not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        self._loop.run_until_complete(self._loop.shutdown_default_executor())
        self._loop.close()
