"""Run device calls on worker threads instead of the host's event thread."""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Callable, List, Optional, Tuple

log = logging.getLogger(__name__)

__all__ = ["AsyncCallQueue"]


class AsyncCallQueue:
    """Execute callables on a small pool of daemon worker threads."""

    def __init__(
        self,
        name: str = "AsyncCallQueue",
        *,
        workers: int = 2,
        maxsize: int = 256,
        perf_logging: bool = False,
    ) -> None:
        self._name = name
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue(maxsize=maxsize)
        self._maxsize = maxsize
        self._perf_logging = perf_logging
        self._workers: List[threading.Thread] = []
        for index in range(max(1, workers)):
            worker = threading.Thread(target=self._run, name=f"{name}-{index}", daemon=True)
            worker.start()
            self._workers.append(worker)

    def submit(self, fn: Optional[Callable[[], None]]) -> bool:
        """Enqueue *fn*; return ``False`` if the queue is saturated."""

        if fn is None:
            return False
        try:
            self._queue.put_nowait(fn)
        except queue.Full:
            log.warning("%s full, rejecting task", self._name)
            return False
        return True

    def load(self) -> Tuple[int, int]:
        """Return the current queue length and capacity."""

        return (self._queue.qsize(), self._maxsize)

    def join(self) -> None:
        """Block until every submitted task has run."""

        self._queue.join()

    # ------------------------------------------------------------------
    def _run(self) -> None:
        while True:
            fn = self._queue.get()
            start = time.perf_counter()
            try:
                fn()
            except Exception:
                log.exception("%s task failed", self._name)
            finally:
                self._queue.task_done()
                if self._perf_logging:
                    duration = (time.perf_counter() - start) * 1000.0
                    if duration >= 250.0:
                        log.debug("%s task took %.2f ms", self._name, duration)
