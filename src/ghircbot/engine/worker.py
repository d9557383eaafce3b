from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, Sequence

FAILURE_LINE = "Sorry, something went wrong while talking to GitHub. Please, try again."


class BackgroundWorker:
    """Run GitHub jobs on a thread pool and queue their chat lines.

    Only the thread that calls drain() ever sees the results, so channel
    state stays owned by the main loop.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="github")
        self._results: queue.Queue[tuple[str, list[str]]] = queue.Queue()
        self.logger = logging.getLogger(self.__class__.__name__)

    def submit(self, channel: str, job: Callable[[], Sequence[str]]) -> None:
        future = self._executor.submit(job)
        future.add_done_callback(partial(self._collect, channel))

    def _collect(self, channel: str, future: Future) -> None:
        try:
            lines = list(future.result())
        except Exception:
            self.logger.exception("Background job failed", extra={"channel": channel})
            lines = [FAILURE_LINE]
        self._results.put((channel, lines))

    def drain(self) -> list[tuple[str, list[str]]]:
        """Return every finished result, oldest first, without blocking."""
        finished: list[tuple[str, list[str]]] = []
        while True:
            try:
                finished.append(self._results.get_nowait())
            except queue.Empty:
                return finished

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
