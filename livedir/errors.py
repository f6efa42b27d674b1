"""Exception taxonomy for the directory watch engine.

Setup-time failures are raised synchronously to the caller. Failures that
happen inside a running watch worker never reach the consumer as exceptions.
"""

from __future__ import annotations

from pathlib import Path


class LiveDirError(Exception):
    """Base class for all engine errors."""


class InvalidDirectoryError(LiveDirError, ValueError):
    """Target path is missing or is not a directory."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(reason)
        self.path = path


class WatchRegistrationError(LiveDirError):
    """Native change subscription could not be created."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not watch {path}: {reason}")
        self.path = path


class DirectoryUnreadableError(LiveDirError):
    """Listing a directory failed with a permission or I/O error."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not list {path}: {reason}")
        self.path = path


class EngineStoppedError(LiveDirError, RuntimeError):
    """Operation attempted after the controller was shut down."""


def require_directory(path: Path | str) -> Path:
    """Return ``path`` resolved to an absolute directory path.

    Raises ``InvalidDirectoryError`` when the path does not exist or is not a
    directory.
    """
    if path is None:
        raise TypeError("path must not be None")
    candidate = Path(path)
    if not candidate.exists():
        raise InvalidDirectoryError(candidate, f"Could not find {candidate}")
    if not candidate.is_dir():
        raise InvalidDirectoryError(candidate, f"{candidate} is not a directory")
    try:
        return candidate.resolve()
    except OSError:
        return candidate.absolute()


__all__ = [
    "LiveDirError",
    "InvalidDirectoryError",
    "WatchRegistrationError",
    "DirectoryUnreadableError",
    "EngineStoppedError",
    "require_directory",
]
