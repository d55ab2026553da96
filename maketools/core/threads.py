"""Threading helpers for background work."""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class BackgroundWorkers:
    """Shared thread pool for discovery work.

    Jobs are keyed by kind. :meth:`submit_once` joins an outstanding job of
    the same kind instead of starting a second one.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        self._tasks: dict[str, concurrent.futures.Future] = {}
        self.shutting_down = False

    def submit_once(self, key: str, func: Callable, *args, **kwargs) -> concurrent.futures.Future | None:
        if self.shutting_down:
            return None
        pending = self._tasks.get(key)
        if pending is not None and not pending.done():
            logger.info("A %s job is already running, waiting for its result", key)
            return pending
        try:
            future = self._executor.submit(func, *args, **kwargs)
        except RuntimeError:
            return None
        self._tasks[key] = future
        future.add_done_callback(lambda done, key=key: self._forget(key, done))
        return future

    def pending(self, key: str) -> concurrent.futures.Future | None:
        return self._tasks.get(key)

    def in_flight(self, key: str) -> bool:
        future = self._tasks.get(key)
        return future is not None and not future.done()

    def _forget(self, key: str, future: concurrent.futures.Future) -> None:
        if self._tasks.get(key) is future:
            self._tasks.pop(key, None)

    def shutdown(self, wait: bool = False) -> None:
        self.shutting_down = True
        for key, future in list(self._tasks.items()):
            if not future.done():
                future.cancel()
            self._tasks.pop(key, None)
        self._executor.shutdown(wait=wait, cancel_futures=True)
