"""Offline synchronization: reachability, action queue and accessors."""

from wandergo.cli.sync.network import NetworkMonitor
from wandergo.cli.sync.offline import OfflineApi
from wandergo.cli.sync.queue import (
    ActionType,
    DrainResult,
    OfflineQueue,
    QueuedAction,
)
from wandergo.cli.sync.runtime import OfflineRuntime, OfflineStatus

__all__ = [
    "ActionType",
    "DrainResult",
    "NetworkMonitor",
    "OfflineApi",
    "OfflineQueue",
    "OfflineRuntime",
    "OfflineStatus",
    "QueuedAction",
]
