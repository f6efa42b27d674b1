"""Delivery contexts that run consumer callbacks on one designated thread.

Watch workers never call the consumer directly. They submit work here and the
dispatcher runs it in FIFO order on its own context.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from queue import Empty, Queue
from typing import Protocol

logger = logging.getLogger(__name__)

Task = Callable[[], None]


class Dispatcher(Protocol):
    def submit(self, task: Task) -> None:
        ...

    def is_dispatch_thread(self) -> bool:
        ...

    def close(self) -> None:
        ...


def _run_task(task: Task) -> None:
    try:
        task()
    except Exception:
        logger.exception("Delivery task failed")


class ThreadDispatcher:
    """Run submitted tasks on one dedicated daemon thread."""

    def __init__(self, name: str = "livedir-delivery") -> None:
        self._tasks: Queue[Task | None] = Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while True:
            task = self._tasks.get()
            if task is None:
                return
            _run_task(task)

    def submit(self, task: Task) -> None:
        with self._lock:
            if self._closed:
                return
            self._tasks.put(task)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def is_dispatch_thread(self) -> bool:
        return threading.current_thread() is self._thread

    def close(self, timeout: float | None = 1.0) -> None:
        """Stop accepting work and let queued tasks finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._tasks.put(None)
        if not self.is_dispatch_thread():
            self._thread.join(timeout)


class PolledDispatcher:
    """Queue tasks until the owning loop calls ``run_pending``.

    Suits a UI or terminal loop that already polls for input: the thread
    calling ``run_pending`` becomes the delivery context.
    """

    def __init__(self) -> None:
        self._tasks: Queue[Task] = Queue()
        self._closed = False
        self._owner: threading.Thread | None = None

    def submit(self, task: Task) -> None:
        if self._closed:
            return
        self._tasks.put(task)

    def run_pending(self) -> int:
        """Run every queued task on the calling thread; return how many ran."""
        self._owner = threading.current_thread()
        count = 0
        while True:
            try:
                task = self._tasks.get_nowait()
            except Empty:
                break
            _run_task(task)
            count += 1
        return count

    def is_dispatch_thread(self) -> bool:
        return self._owner is threading.current_thread()

    def close(self) -> None:
        self._closed = True
        while True:
            try:
                self._tasks.get_nowait()
            except Empty:
                break


__all__ = [
    "Task",
    "Dispatcher",
    "ThreadDispatcher",
    "PolledDispatcher",
]
