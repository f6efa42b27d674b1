"""Live directory watching: subscriptions, sessions, delivery, controller.

Threads live here:
- one ``watchdog`` observer thread per subscription
- one worker thread per ``WatchSession``
- one delivery context per controller
"""

from __future__ import annotations

from .subscription import (
    ChangeBatch,
    ChangeNotice,
    DirectorySubscription,
    SubscriptionFactory,
    WatchdogSubscription,
    open_watchdog_subscription,
)
from .session import SessionState, SnapshotCallback, WatchSession, next_session_id
from .delivery import Dispatcher, PolledDispatcher, ThreadDispatcher
from .controller import DirectoryWatchController

__all__ = [
    "ChangeBatch",
    "ChangeNotice",
    "DirectorySubscription",
    "SubscriptionFactory",
    "WatchdogSubscription",
    "open_watchdog_subscription",
    "SessionState",
    "SnapshotCallback",
    "WatchSession",
    "next_session_id",
    "Dispatcher",
    "PolledDispatcher",
    "ThreadDispatcher",
    "DirectoryWatchController",
]
