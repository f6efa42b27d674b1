"""Command-line front door for livedir.

Watches one directory and reprints its listing whenever it changes.
Typed directory names navigate; the watch engine does the rest.
"""

from __future__ import annotations

import argparse
import fnmatch
import logging
import sys
import threading
import time
from pathlib import Path
from queue import Empty, Queue
from typing import TextIO

from .config import load_watch_settings
from .errors import LiveDirError
from .listing import DirectoryEntry, EntryFilter, Snapshot
from .render import EntryRenderer, PlainEntryRenderer, render_snapshot
from .watch import DirectoryWatchController, PolledDispatcher

CLEAR_SCREEN = "\033[H\033[2J"
PROMPT = "cd> "
POLL_SECONDS = 0.1
FIRST_SNAPSHOT_TIMEOUT_SECONDS = 5.0


def glob_filter(pattern: str) -> EntryFilter:
    """Entry filter keeping directories and files whose name matches ``pattern``."""

    def matches(entry: DirectoryEntry) -> bool:
        return entry.is_dir or fnmatch.fnmatch(entry.name, pattern)

    return matches


def resolve_navigation(current: Path, command: str) -> Path:
    """Map a typed navigation command to a target path."""
    if command == "..":
        return current.parent
    target = Path(command).expanduser()
    if target.is_absolute():
        return target
    return current / target


class ListingPrinter:
    """Snapshot consumer that reprints the whole listing."""

    def __init__(self, out: TextIO, renderer: EntryRenderer | None = None, clear: bool = False) -> None:
        self.out = out
        self.renderer = renderer or PlainEntryRenderer()
        self.clear = clear
        self.snapshots_seen = 0

    def __call__(self, snapshot: Snapshot) -> None:
        self.snapshots_seen += 1
        if self.clear:
            self.out.write(CLEAR_SCREEN)
        self.out.write("\n".join(render_snapshot(snapshot, self.renderer)) + "\n")
        self.out.flush()


def wait_for_first_snapshot(
    dispatcher: PolledDispatcher,
    printer: ListingPrinter,
    timeout_seconds: float = FIRST_SNAPSHOT_TIMEOUT_SECONDS,
) -> bool:
    """Pump ``dispatcher`` until ``printer`` has shown one snapshot."""
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        dispatcher.run_pending()
        if printer.snapshots_seen:
            return True
        time.sleep(0.01)
    return False


def _read_lines(stdin: TextIO, lines: Queue[str | None]) -> None:
    for line in stdin:
        lines.put(line)
    lines.put(None)


def run_interactive(
    controller: DirectoryWatchController,
    dispatcher: PolledDispatcher,
    stdin: TextIO,
    out: TextIO,
) -> None:
    """Pump snapshots and handle navigation commands until ``q`` or EOF."""
    lines: Queue[str | None] = Queue()
    reader = threading.Thread(target=_read_lines, args=(stdin, lines), name="livedir-stdin", daemon=True)
    reader.start()

    out.write(PROMPT)
    out.flush()
    while True:
        dispatcher.run_pending()
        try:
            line = lines.get(timeout=POLL_SECONDS)
        except Empty:
            continue
        if line is None:
            return
        command = line.strip()
        if command in ("q", "quit"):
            return
        if command:
            current = controller.current_directory or Path.cwd()
            try:
                controller.set_current_directory(resolve_navigation(current, command))
            except LiveDirError as exc:
                out.write(f"{exc}\n")
        out.write(PROMPT)
        out.flush()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and watch a directory until the user quits."""
    parser = argparse.ArgumentParser(description="Show a live, auto-refreshing directory listing.")
    parser.add_argument("path", nargs="?", default=None, help="Directory to watch. Defaults to current directory.")
    parser.add_argument("--glob", metavar="PATTERN", help="Only list files matching PATTERN (directories always shown).")
    parser.add_argument("--once", action="store_true", help="Print the current listing and exit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log watch activity to stderr.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    out = sys.stdout
    dispatcher = PolledDispatcher()
    printer = ListingPrinter(out, clear=not args.once and out.isatty())
    controller = DirectoryWatchController(
        entry_filter=glob_filter(args.glob) if args.glob else None,
        dispatcher=dispatcher,
        settings=load_watch_settings(),
    )
    controller.register_snapshot_consumer(printer)
    try:
        try:
            controller.set_current_directory(Path(args.path) if args.path else Path.cwd())
        except LiveDirError as exc:
            raise SystemExit(str(exc)) from exc

        if args.once:
            if not wait_for_first_snapshot(dispatcher, printer):
                raise SystemExit("Timed out waiting for directory listing.")
            return
        run_interactive(controller, dispatcher, sys.stdin, out)
    finally:
        controller.shutdown()
        dispatcher.close()


if __name__ == "__main__":
    main()
