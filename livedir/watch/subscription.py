"""Native directory-change subscription backed by ``watchdog``.

One subscription watches the immediate children of one directory. The
observer thread only enqueues notices; consumers pull coalesced batches with
``next_batch`` from their own thread.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..errors import WatchRegistrationError

logger = logging.getLogger(__name__)

# Notices that never change what a listing shows.
IGNORED_EVENT_TYPES = frozenset({"opened", "closed_no_write"})


@dataclass(frozen=True)
class ChangeNotice:
    """One low-level change notification."""

    kind: str
    path: Path


@dataclass(frozen=True)
class ChangeBatch:
    """All notices drained in one wake-up of the watch worker."""

    changes: tuple[ChangeNotice, ...] = ()
    invalidated: bool = False


class DirectorySubscription(Protocol):
    """Pull-side contract the watch worker relies on."""

    def next_batch(self, timeout: float) -> ChangeBatch | None:
        """Block up to ``timeout`` seconds; ``None`` means nothing arrived."""
        ...

    def is_valid(self) -> bool:
        """Return ``False`` once the watched directory is gone."""
        ...

    def close(self) -> None:
        """Release the native handle and wake a blocked ``next_batch``."""
        ...

    def join(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for any native helper thread to exit."""
        ...


SubscriptionFactory = Callable[[Path], DirectorySubscription]

_INVALIDATED = object()
_CLOSED = object()


def _event_path(raw: str | bytes) -> Path:
    return Path(os.path.normpath(os.fsdecode(raw)))


class _QueueingEventHandler(FileSystemEventHandler):
    """Translate watchdog events for one directory into queued notices."""

    def __init__(self, directory: Path, notices: Queue[object]) -> None:
        super().__init__()
        self._directory = directory
        self._notices = notices

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in IGNORED_EVENT_TYPES:
            return
        src_path = _event_path(event.src_path)
        if src_path == self._directory:
            if event.event_type in ("deleted", "moved"):
                self._notices.put(_INVALIDATED)
            # Listing the directory itself reports as a self-modification.
            return
        self._notices.put(ChangeNotice(kind=event.event_type, path=src_path))


class WatchdogSubscription:
    """Non-recursive ``watchdog`` observer for one directory."""

    def __init__(
        self,
        directory: Path,
        *,
        settle_seconds: float = 0.05,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.directory = Path(os.path.normpath(directory))
        self.settle_seconds = max(0.0, settle_seconds)
        self._notices: Queue[object] = Queue()
        self._closed = threading.Event()
        self._close_lock = threading.Lock()
        self._observer = observer_factory()
        self._handler = _QueueingEventHandler(self.directory, self._notices)

    def open(self) -> WatchdogSubscription:
        """Register the watch and start the observer thread."""
        try:
            self._observer.schedule(self._handler, str(self.directory), recursive=False)
            self._observer.start()
        except (OSError, RuntimeError) as exc:
            self._closed.set()
            raise WatchRegistrationError(self.directory, str(exc)) from exc
        logger.debug("Subscribed to changes in %s", self.directory)
        return self

    def next_batch(self, timeout: float) -> ChangeBatch | None:
        if self._closed.is_set():
            return ChangeBatch()
        try:
            first = self._notices.get(timeout=timeout)
        except Empty:
            return None
        if first is _CLOSED:
            return ChangeBatch()

        # Let the rest of a burst arrive, then take all of it at once.
        if self.settle_seconds > 0 and first is not _INVALIDATED:
            self._closed.wait(self.settle_seconds)

        items = [first]
        while True:
            try:
                items.append(self._notices.get_nowait())
            except Empty:
                break

        changes = tuple(item for item in items if isinstance(item, ChangeNotice))
        invalidated = any(item is _INVALIDATED for item in items) or not self.is_valid()
        return ChangeBatch(changes=changes, invalidated=invalidated)

    def is_valid(self) -> bool:
        return self.directory.is_dir()

    def close(self) -> None:
        with self._close_lock:
            if self._closed.is_set():
                return
            self._closed.set()
        self._notices.put(_CLOSED)
        try:
            self._observer.stop()
        except Exception:
            logger.debug("Observer stop failed for %s", self.directory, exc_info=True)
        logger.debug("Unsubscribed from %s", self.directory)

    def join(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for the observer thread to exit."""
        observer = self._observer
        if observer is threading.current_thread() or not observer.is_alive():
            return
        observer.join(timeout)
        if observer.is_alive():
            logger.debug("Observer for %s still running after %.2fs", self.directory, timeout)


def open_watchdog_subscription(directory: Path, *, settle_seconds: float = 0.05) -> WatchdogSubscription:
    """Create and start a ``WatchdogSubscription`` for ``directory``."""
    return WatchdogSubscription(directory, settle_seconds=settle_seconds).open()


__all__ = [
    "IGNORED_EVENT_TYPES",
    "ChangeNotice",
    "ChangeBatch",
    "DirectorySubscription",
    "SubscriptionFactory",
    "WatchdogSubscription",
    "open_watchdog_subscription",
]
