"""Watch timing knobs read from a JSON file in the user config directory.

The engine never reads this file itself; the CLI loads ``WatchSettings`` and
passes them in. Malformed, missing or out-of-range values fall back to
defaults.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "livedir"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

# Keeps cancellation latency sub-second when a native wait cannot be woken.
MAX_WAIT_TIMEOUT_MS = 900
MAX_SETTLE_MS = 5_000
MAX_JOIN_TIMEOUT_MS = 60_000


@dataclass(frozen=True)
class WatchSettings:
    """Timing knobs for watch sessions, in seconds."""

    settle_seconds: float = 0.05
    wait_timeout_seconds: float = 0.25
    join_timeout_seconds: float = 1.0


def read_settings_object(path: Path | None = None) -> dict[str, object]:
    """Return the top-level JSON object stored at ``path``.

    Unreadable files, invalid JSON and non-object documents all yield ``{}``.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _millis_as_seconds(value: object, default_seconds: float, upper_ms: int) -> float:
    """Convert a positive finite millisecond count, clamped to ``upper_ms``.

    Booleans, non-numbers, ``NaN``/``Infinity`` and non-positive values fall
    back to the default.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default_seconds
    if not math.isfinite(value) or value <= 0:
        return default_seconds
    return min(float(value), float(upper_ms)) / 1000.0


def load_watch_settings(path: Path | None = None) -> WatchSettings:
    """Load ``WatchSettings``, defaulting each missing or invalid field."""
    data = read_settings_object(path)
    defaults = WatchSettings()
    return WatchSettings(
        settle_seconds=_millis_as_seconds(data.get("settle_ms"), defaults.settle_seconds, MAX_SETTLE_MS),
        wait_timeout_seconds=_millis_as_seconds(
            data.get("wait_timeout_ms"),
            defaults.wait_timeout_seconds,
            MAX_WAIT_TIMEOUT_MS,
        ),
        join_timeout_seconds=_millis_as_seconds(
            data.get("join_timeout_ms"),
            defaults.join_timeout_seconds,
            MAX_JOIN_TIMEOUT_MS,
        ),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "MAX_WAIT_TIMEOUT_MS",
    "MAX_SETTLE_MS",
    "MAX_JOIN_TIMEOUT_MS",
    "WatchSettings",
    "read_settings_object",
    "load_watch_settings",
]
