"""Public state holder for "the live listing of the current directory"."""

from __future__ import annotations

import logging
import threading
from functools import partial
from pathlib import Path

from ..config import WatchSettings
from ..errors import EngineStoppedError, require_directory
from ..listing import EntryFilter, EntryOrdering, Snapshot, directories_first_key
from .delivery import Dispatcher, ThreadDispatcher
from .session import SnapshotCallback, WatchSession
from .subscription import SubscriptionFactory

logger = logging.getLogger(__name__)


class DirectoryWatchController:
    """Track the current directory and keep exactly one session watching it.

    ``set_current_directory`` and ``shutdown`` are serialized by one lock.
    Snapshots travel from the session worker to ``dispatcher`` and are
    handed to the registered consumer there, unless they belong to a session
    that is no longer active.
    """

    def __init__(
        self,
        *,
        ordering: EntryOrdering = directories_first_key,
        entry_filter: EntryFilter | None = None,
        dispatcher: Dispatcher | None = None,
        settings: WatchSettings | None = None,
        subscribe: SubscriptionFactory | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._delivery_lock = threading.RLock()
        self._ordering = ordering
        self._entry_filter = entry_filter
        self._settings = settings or WatchSettings()
        self._subscribe = subscribe
        self._owns_dispatcher = dispatcher is None
        self._dispatcher: Dispatcher = dispatcher if dispatcher is not None else ThreadDispatcher()
        self._consumer: SnapshotCallback | None = None
        self._current_directory: Path | None = None
        self._active_session: WatchSession | None = None
        self._stopped = False

    def __enter__(self) -> DirectoryWatchController:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.shutdown()

    @property
    def current_directory(self) -> Path | None:
        """Last directory successfully set, or ``None`` before the first."""
        with self._lock:
            return self._current_directory

    @property
    def active_session(self) -> WatchSession | None:
        with self._lock:
            return self._active_session

    @property
    def entry_filter(self) -> EntryFilter | None:
        with self._lock:
            return self._entry_filter

    @property
    def is_stopped(self) -> bool:
        with self._lock:
            return self._stopped

    def register_snapshot_consumer(self, callback: SnapshotCallback | None) -> None:
        """Replace the consumer; later snapshots go only to ``callback``."""
        with self._lock:
            self._consumer = callback

    def set_current_directory(self, path: Path | str) -> Path:
        """Switch the watch to ``path`` and return it resolved.

        Raises ``EngineStoppedError`` after shutdown and
        ``InvalidDirectoryError`` for a missing or non-directory path, leaving
        the running session untouched in both cases.
        """
        with self._lock:
            self._ensure_running()
            directory = require_directory(path)
            self._restart_locked(directory)
            return directory

    def set_entry_filter(self, entry_filter: EntryFilter | None) -> None:
        """Install ``entry_filter`` (``None`` accepts everything).

        A still-active watch is restarted so the next snapshot already
        reflects the new filter. When the watched directory has gone away the
        filter is only stored and applies to the next directory set.
        """
        with self._lock:
            self._ensure_running()
            self._entry_filter = entry_filter
            session = self._active_session
            directory = self._current_directory
            if session is None or not session.is_active or directory is None or not directory.is_dir():
                return
            self._restart_locked(directory)

    def shutdown(self) -> None:
        """Cancel the active session and release delivery resources.

        Safe to call more than once. No consumer call runs after this returns,
        unless ``shutdown`` is itself called from inside the consumer.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            session = self._active_session
            self._active_session = None

        try:
            if session is not None:
                session.cancel()
            # Wait out a consumer call already in progress.
            with self._delivery_lock:
                pass
            if session is not None and not session.wait_terminated(self._settings.join_timeout_seconds):
                logger.warning("Watch worker for %s did not stop in time", session.directory)
        finally:
            if self._owns_dispatcher:
                self._dispatcher.close()
        logger.debug("Controller shut down")

    def _ensure_running(self) -> None:
        if self._stopped:
            raise EngineStoppedError("directory watch controller has been shut down")

    def _restart_locked(self, directory: Path) -> None:
        previous = self._active_session
        self._active_session = None
        if previous is not None:
            previous.cancel()

        session = WatchSession.start(
            directory,
            self._enqueue_snapshot,
            entry_filter=self._entry_filter,
            ordering=self._ordering,
            subscribe=self._subscribe,
            wait_timeout=self._settings.wait_timeout_seconds,
            settle_seconds=self._settings.settle_seconds,
        )
        self._active_session = session
        self._current_directory = directory

    def _enqueue_snapshot(self, snapshot: Snapshot) -> None:
        self._dispatcher.submit(partial(self._deliver, snapshot))

    def _deliver(self, snapshot: Snapshot) -> None:
        with self._delivery_lock:
            with self._lock:
                session = self._active_session
                consumer = self._consumer
                current = (
                    not self._stopped
                    and session is not None
                    and session.session_id == snapshot.session_id
                )
            if not current or consumer is None:
                logger.debug("Dropping snapshot of %s from session %d", snapshot.directory, snapshot.session_id)
                return
            consumer(snapshot)


__all__ = ["DirectoryWatchController"]
