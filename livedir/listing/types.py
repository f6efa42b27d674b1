"""Immutable datatypes for one directory listing."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a watched directory as observed at snapshot time.

    ``is_dir`` is resolved once when the snapshot is built and is not kept
    live; a later filesystem change produces a new snapshot instead.
    """

    path: Path
    is_dir: bool

    @property
    def name(self) -> str:
        """Last path component used for display and ordering."""
        return self.path.name


@dataclass(frozen=True)
class Snapshot:
    """One coherent view of a directory's visible children.

    ``session_id`` tags the watch session that produced the snapshot so a
    consumer can discard output of superseded sessions.
    """

    directory: Path
    entries: tuple[DirectoryEntry, ...] = ()
    session_id: int = 0

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> DirectoryEntry:
        return self.entries[index]

    def names(self) -> list[str]:
        """Return entry names in snapshot order."""
        return [entry.name for entry in self.entries]


__all__ = [
    "DirectoryEntry",
    "Snapshot",
]
