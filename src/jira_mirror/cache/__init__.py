"""Snapshot cache: persistence, refresh, daemon and foreground access."""

from .accessor import ForegroundAccessor
from .daemon import Daemon, DaemonState
from .refresh import CATEGORIES, RefreshOrchestrator
from .store import (
    REFRESH_INTERVAL,
    FileSnapshotStore,
    SnapshotStore,
    default_snapshot_path,
    is_stale,
)

__all__ = [
    "CATEGORIES",
    "REFRESH_INTERVAL",
    "Daemon",
    "DaemonState",
    "FileSnapshotStore",
    "ForegroundAccessor",
    "RefreshOrchestrator",
    "SnapshotStore",
    "default_snapshot_path",
    "is_stale",
]
