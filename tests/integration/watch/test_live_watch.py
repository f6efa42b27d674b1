"""End-to-end watch behavior against the real filesystem and watchdog."""

from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path

from livedir.config import WatchSettings
from livedir.listing import Snapshot
from livedir.watch import DirectoryWatchController, SessionState, ThreadDispatcher, WatchSession


def _wait_until(predicate, timeout_seconds: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


class _Collector:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshots: list[Snapshot] = []

    def __call__(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshots.append(snapshot)

    @property
    def snapshots(self) -> list[Snapshot]:
        with self._lock:
            return list(self._snapshots)


class LiveWatchTests(unittest.TestCase):
    def test_new_file_appears_in_a_later_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            collector = _Collector()
            settings = WatchSettings(settle_seconds=0.05, wait_timeout_seconds=0.1)
            with DirectoryWatchController(settings=settings) as controller:
                controller.register_snapshot_consumer(collector)
                controller.set_current_directory(root)
                self.assertTrue(_wait_until(lambda: len(collector.snapshots) >= 1))
                self.assertEqual(collector.snapshots[0].names(), [])

                (root / "fresh.txt").write_text("hello", encoding="utf-8")

                self.assertTrue(_wait_until(lambda: collector.snapshots[-1].names() == ["fresh.txt"]))

    def test_burst_within_settle_window_yields_one_rebuild(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            collector = _Collector()
            session = WatchSession.start(root, collector, settle_seconds=0.5, wait_timeout=0.1)
            try:
                self.assertTrue(_wait_until(lambda: len(collector.snapshots) == 1))
                for index in range(5):
                    (root / f"burst{index}.txt").write_text("x", encoding="utf-8")

                self.assertTrue(_wait_until(lambda: len(collector.snapshots) >= 2))
                time.sleep(1.0)

                self.assertEqual(len(collector.snapshots), 2)
                self.assertEqual(len(collector.snapshots[1]), 5)
            finally:
                session.cancel()
                session.wait_terminated(2.0)

    def test_removing_watched_directory_ends_session_quietly(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve() / "d"
            root.mkdir()
            collector = _Collector()
            session = WatchSession.start(root, collector, settle_seconds=0.0, wait_timeout=0.1)
            self.assertTrue(_wait_until(lambda: len(collector.snapshots) == 1))

            root.rmdir()

            self.assertTrue(session.wait_terminated(5.0))
            self.assertIs(session.state, SessionState.TERMINATED)
            self.assertEqual(session.termination_reason, "invalidated")
            self.assertEqual(len(collector.snapshots), 1)

    def test_cancel_releases_worker_promptly(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            session = WatchSession.start(root, lambda _s: None, wait_timeout=10.0)

            started = time.monotonic()
            session.cancel()

            self.assertTrue(session.wait_terminated(2.0))
            self.assertLess(time.monotonic() - started, 2.0)

    def test_rapid_switch_delivers_only_latest_directory_after_it_appears(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp).resolve()
            first = base / "first"
            second = base / "second"
            first.mkdir()
            second.mkdir()
            collector = _Collector()
            dispatcher = ThreadDispatcher(name="livedir-test-switch")
            with DirectoryWatchController(dispatcher=dispatcher) as controller:
                controller.register_snapshot_consumer(collector)
                controller.set_current_directory(first)
                controller.set_current_directory(second)
                (first / "noise.txt").write_text("x", encoding="utf-8")
                self.assertTrue(_wait_until(lambda: any(s.directory == second for s in collector.snapshots)))
                time.sleep(0.3)

            dispatcher.close()
            directories = [snapshot.directory for snapshot in collector.snapshots]
            first_second = directories.index(second)
            self.assertNotIn(first, directories[first_second:])


if __name__ == "__main__":
    unittest.main()
