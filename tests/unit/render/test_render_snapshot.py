"""Tests for plain-text snapshot rendering."""

from __future__ import annotations

import unittest
from pathlib import Path

from livedir.listing import DirectoryEntry, Snapshot
from livedir.render import PlainEntryRenderer, render_snapshot


class RenderSnapshotTests(unittest.TestCase):
    def test_rows_label_directories_and_files(self) -> None:
        root = Path("/tmp/d")
        snapshot = Snapshot(
            directory=root,
            entries=(
                DirectoryEntry(path=root / "Zeta", is_dir=True),
                DirectoryEntry(path=root / "alpha.txt", is_dir=False),
            ),
        )

        lines = render_snapshot(snapshot)

        self.assertEqual(lines, [str(root), "  dir   Zeta/", "  file  alpha.txt"])

    def test_empty_snapshot_renders_placeholder(self) -> None:
        lines = render_snapshot(Snapshot(directory=Path("/tmp/empty")))
        self.assertEqual(lines, ["/tmp/empty", "  (empty)"])

    def test_custom_renderer_is_used_per_entry(self) -> None:
        class UpperRenderer:
            def render(self, entry: DirectoryEntry) -> str:
                return entry.name.upper()

        root = Path("/tmp/d")
        snapshot = Snapshot(directory=root, entries=(DirectoryEntry(path=root / "x", is_dir=False),))

        self.assertEqual(render_snapshot(snapshot, UpperRenderer())[1:], ["  X"])
        self.assertEqual(PlainEntryRenderer().render(snapshot[0]), "file  x")


if __name__ == "__main__":
    unittest.main()
