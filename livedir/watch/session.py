"""One watch session: a native subscription bridged to a snapshot stream."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from enum import Enum
from functools import partial
from pathlib import Path

from ..errors import DirectoryUnreadableError, LiveDirError, WatchRegistrationError, require_directory
from ..listing import EntryFilter, EntryOrdering, Snapshot, build_snapshot, directories_first_key, sort_entries
from .subscription import DirectorySubscription, SubscriptionFactory, open_watchdog_subscription

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Snapshot], None]

_session_ids = itertools.count(1)

# Bound on waiting for the native observer thread once a session ends.
SUBSCRIPTION_JOIN_SECONDS = 0.5


def next_session_id() -> int:
    """Return a process-unique session id."""
    return next(_session_ids)


class SessionState(Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    TERMINATED = "terminated"


class WatchSession:
    """Own one subscription and one worker thread for one directory.

    The worker emits an initial snapshot, then one snapshot per coalesced
    batch of change notices until it is cancelled or the directory goes away.
    Cancellation is advisory and never blocks: the caller must tolerate one
    more in-flight ``on_snapshot`` call after ``cancel`` returns.
    """

    def __init__(
        self,
        directory: Path,
        on_snapshot: SnapshotCallback,
        subscription: DirectorySubscription,
        *,
        session_id: int,
        entry_filter: EntryFilter | None = None,
        ordering: EntryOrdering = directories_first_key,
        wait_timeout: float = 0.25,
        on_terminated: Callable[[WatchSession], None] | None = None,
    ) -> None:
        self.directory = directory
        self.session_id = session_id
        self._on_snapshot = on_snapshot
        self._subscription = subscription
        self._entry_filter = entry_filter
        self._ordering = ordering
        self._wait_timeout = wait_timeout
        self._on_terminated = on_terminated
        self._cancel_event = threading.Event()
        self._state_lock = threading.Lock()
        self._state = SessionState.ACTIVE
        self._worker: threading.Thread | None = None
        self.termination_reason: str | None = None

    @classmethod
    def start(
        cls,
        directory: Path | str,
        on_snapshot: SnapshotCallback,
        *,
        entry_filter: EntryFilter | None = None,
        ordering: EntryOrdering = directories_first_key,
        subscribe: SubscriptionFactory | None = None,
        session_id: int | None = None,
        wait_timeout: float = 0.25,
        settle_seconds: float = 0.05,
        on_terminated: Callable[[WatchSession], None] | None = None,
    ) -> WatchSession:
        """Validate ``directory``, subscribe to it and spawn the worker.

        Raises ``InvalidDirectoryError``, ``WatchRegistrationError`` or
        ``DirectoryUnreadableError`` (initial listing) before any worker
        exists.
        """
        resolved = require_directory(directory)
        if session_id is None:
            session_id = next_session_id()
        if subscribe is None:
            subscribe = partial(open_watchdog_subscription, settle_seconds=settle_seconds)

        try:
            subscription = subscribe(resolved)
        except LiveDirError:
            raise
        except OSError as exc:
            raise WatchRegistrationError(resolved, str(exc)) from exc

        session = cls(
            resolved,
            on_snapshot,
            subscription,
            session_id=session_id,
            entry_filter=entry_filter,
            ordering=ordering,
            wait_timeout=wait_timeout,
            on_terminated=on_terminated,
        )
        try:
            initial = session._build()
        except DirectoryUnreadableError:
            subscription.close()
            raise

        session._worker = threading.Thread(
            target=session._run,
            args=(initial,),
            name=f"livedir-watch-{session_id}",
            daemon=True,
        )
        session._worker.start()
        logger.info("Watching %s (session %d)", resolved, session_id)
        return session

    @property
    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def cancel(self) -> None:
        """Request the worker to stop and force-close the subscription."""
        with self._state_lock:
            if self._state is SessionState.ACTIVE:
                self._state = SessionState.CANCELLED
        if self._cancel_event.is_set():
            return
        self._cancel_event.set()
        self._subscription.close()
        logger.debug("Cancelled session %d for %s", self.session_id, self.directory)

    def wait_terminated(self, timeout: float | None = None) -> bool:
        """Join the worker for up to ``timeout`` seconds; return whether it exited."""
        worker = self._worker
        if worker is None:
            return True
        if worker is threading.current_thread():
            return False
        worker.join(timeout)
        return not worker.is_alive()

    def _build(self) -> Snapshot:
        snapshot = build_snapshot(self.directory, self._entry_filter, session_id=self.session_id)
        return Snapshot(
            directory=snapshot.directory,
            entries=sort_entries(snapshot.entries, key=self._ordering),
            session_id=self.session_id,
        )

    def _emit(self, snapshot: Snapshot) -> None:
        if self._cancel_event.is_set():
            return
        try:
            self._on_snapshot(snapshot)
        except Exception:
            logger.exception("Snapshot callback failed for %s", self.directory)

    def _rebuild(self) -> bool:
        """Emit a fresh snapshot; return ``False`` if the directory is gone."""
        try:
            snapshot = self._build()
        except DirectoryUnreadableError as exc:
            if not self._subscription.is_valid():
                return False
            logger.warning("Skipping refresh of %s: %s", self.directory, exc)
            return True
        self._emit(snapshot)
        return True

    def _run(self, initial: Snapshot) -> None:
        reason = "cancelled"
        try:
            self._emit(initial)
            while not self._cancel_event.is_set():
                batch = self._subscription.next_batch(self._wait_timeout)
                if self._cancel_event.is_set():
                    break
                if batch is None:
                    if not self._subscription.is_valid():
                        reason = "invalidated"
                        break
                    continue
                if batch.invalidated:
                    reason = "invalidated"
                    break
                if batch.changes and not self._rebuild():
                    reason = "invalidated"
                    break
        except Exception:
            logger.exception("Watch worker for %s failed", self.directory)
            reason = "failed"
        finally:
            self._subscription.close()
            self._subscription.join(SUBSCRIPTION_JOIN_SECONDS)
            with self._state_lock:
                self._state = SessionState.TERMINATED
                self.termination_reason = reason
            logger.info("Stopped watching %s (session %d, %s)", self.directory, self.session_id, reason)
            if self._on_terminated is not None:
                try:
                    self._on_terminated(self)
                except Exception:
                    logger.exception("Termination hook failed for session %d", self.session_id)


__all__ = [
    "SnapshotCallback",
    "SessionState",
    "WatchSession",
    "next_session_id",
]
