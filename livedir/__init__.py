"""Public package surface for livedir.

Exports the watch engine types and ``main`` for programmatic CLI invocation.
"""

from __future__ import annotations

from .config import WatchSettings
from .errors import (
    DirectoryUnreadableError,
    EngineStoppedError,
    InvalidDirectoryError,
    LiveDirError,
    WatchRegistrationError,
)
from .listing import DirectoryEntry, Snapshot, build_snapshot, directories_first_key, sort_entries
from .watch import DirectoryWatchController, PolledDispatcher, ThreadDispatcher, WatchSession


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "WatchSettings",
    "LiveDirError",
    "InvalidDirectoryError",
    "WatchRegistrationError",
    "DirectoryUnreadableError",
    "EngineStoppedError",
    "DirectoryEntry",
    "Snapshot",
    "build_snapshot",
    "directories_first_key",
    "sort_entries",
    "DirectoryWatchController",
    "PolledDispatcher",
    "ThreadDispatcher",
    "WatchSession",
    "main",
]
