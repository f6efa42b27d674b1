"""Plain-text rendering of snapshots for the terminal front end."""

from __future__ import annotations

from typing import Protocol

from .listing import DirectoryEntry, Snapshot


class EntryRenderer(Protocol):
    """Presentation capability: turn one entry into one display row."""

    def render(self, entry: DirectoryEntry) -> str:
        ...


class PlainEntryRenderer:
    """Label rows ``dir``/``file`` and mark directories with a slash."""

    def render(self, entry: DirectoryEntry) -> str:
        if entry.is_dir:
            return f"dir   {entry.name}/"
        return f"file  {entry.name}"


def render_snapshot(snapshot: Snapshot, renderer: EntryRenderer | None = None) -> list[str]:
    """Return display lines for ``snapshot``: a directory header, then rows."""
    renderer = renderer or PlainEntryRenderer()
    lines = [str(snapshot.directory)]
    if not snapshot.entries:
        lines.append("  (empty)")
        return lines
    lines.extend(f"  {renderer.render(entry)}" for entry in snapshot)
    return lines


__all__ = [
    "EntryRenderer",
    "PlainEntryRenderer",
    "render_snapshot",
]
