"""Presentation order for directory entries."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .types import DirectoryEntry

EntryOrdering = Callable[[DirectoryEntry], object]


def directories_first_key(entry: DirectoryEntry) -> tuple[bool, str, str]:
    """Sort key: directories before files, then case-insensitive name.

    Names equal under case folding fall back to exact codepoint order so the
    result is total and deterministic.
    """
    name = entry.name
    return (not entry.is_dir, name.casefold(), name)


def sort_entries(
    entries: Iterable[DirectoryEntry],
    key: EntryOrdering = directories_first_key,
) -> tuple[DirectoryEntry, ...]:
    """Return ``entries`` sorted with ``key``."""
    return tuple(sorted(entries, key=key))


__all__ = [
    "EntryOrdering",
    "directories_first_key",
    "sort_entries",
]
