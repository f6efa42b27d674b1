"""Directory enumeration and snapshot construction."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable
from pathlib import Path

from ..errors import DirectoryUnreadableError
from .types import DirectoryEntry, Snapshot

logger = logging.getLogger(__name__)

EntryFilter = Callable[[DirectoryEntry], bool]

_WINDOWS_HIDDEN = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2)
_BSD_HIDDEN = getattr(stat, "UF_HIDDEN", 0x8000)


def accept_all(_entry: DirectoryEntry) -> bool:
    """Default entry filter accepting everything."""
    return True


def is_dot_name(name: str) -> bool:
    """Return whether ``name`` follows the dot-file hidden convention."""
    return not name or name.startswith(".")


def is_os_hidden(st: os.stat_result) -> bool:
    """Return whether the OS flags a stat result as hidden.

    Windows reports ``FILE_ATTRIBUTE_HIDDEN`` via ``st_file_attributes`` and
    macOS/BSD report ``UF_HIDDEN`` via ``st_flags``. Other platforms carry no
    hidden attribute.
    """
    attributes = getattr(st, "st_file_attributes", 0) or 0
    if attributes & _WINDOWS_HIDDEN:
        return True
    flags = getattr(st, "st_flags", 0) or 0
    return bool(flags & _BSD_HIDDEN)


def list_visible_entries(
    directory: Path,
    entry_filter: EntryFilter = accept_all,
) -> list[DirectoryEntry]:
    """List the visible immediate children of ``directory`` in scan order.

    Dot-named and OS-hidden children are skipped, then ``entry_filter`` is
    applied. A child that vanishes while its metadata is being read is
    dropped. Raises ``DirectoryUnreadableError`` when the directory itself
    cannot be listed.
    """
    entries: list[DirectoryEntry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                if is_dot_name(child.name):
                    continue
                try:
                    st = child.stat(follow_symlinks=False)
                except FileNotFoundError:
                    logger.debug("Entry disappeared during listing: %s", child.path)
                    continue
                except OSError as exc:
                    logger.debug("Could not stat %s: %s", child.path, exc)
                    st = None
                if st is not None and is_os_hidden(st):
                    continue

                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False

                entry = DirectoryEntry(path=Path(child.path), is_dir=is_dir)
                if not entry_filter(entry):
                    continue
                entries.append(entry)
    except OSError as exc:
        raise DirectoryUnreadableError(directory, str(exc)) from exc
    return entries


def build_snapshot(
    directory: Path,
    entry_filter: EntryFilter | None = None,
    *,
    session_id: int = 0,
) -> Snapshot:
    """Build an unordered snapshot of ``directory``'s visible children."""
    directory = Path(directory)
    entries = list_visible_entries(directory, entry_filter or accept_all)
    return Snapshot(directory=directory, entries=tuple(entries), session_id=session_id)


__all__ = [
    "EntryFilter",
    "accept_all",
    "is_dot_name",
    "is_os_hidden",
    "list_visible_entries",
    "build_snapshot",
]
