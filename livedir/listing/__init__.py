"""Directory listing model: entry datatypes, snapshot building, ordering.

This package has no threads and no watch state:
- immutable entry/snapshot datatypes
- one-shot listing of a directory's visible children
- presentation ordering keys
"""

from __future__ import annotations

from .types import DirectoryEntry, Snapshot
from .fs import EntryFilter, accept_all, build_snapshot, is_dot_name, is_os_hidden, list_visible_entries
from .ordering import EntryOrdering, directories_first_key, sort_entries

__all__ = [
    "DirectoryEntry",
    "Snapshot",
    "EntryFilter",
    "accept_all",
    "is_dot_name",
    "is_os_hidden",
    "list_visible_entries",
    "build_snapshot",
    "EntryOrdering",
    "directories_first_key",
    "sort_entries",
]
