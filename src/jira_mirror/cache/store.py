"""Persistence of the snapshot file.

The snapshot lives in a single file guarded by an advisory ``flock`` on the
file itself. Writers truncate and rewrite the whole file while holding the
lock, so readers holding the lock see either the previous snapshot or the
new one, never a torn write.
"""

import fcntl
import logging
import os
import pickle
import tempfile
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Protocol

import click

from ..exceptions import SnapshotCorruptError
from ..models import Snapshot

logger = logging.getLogger("jira-mirror.cache")

# Daemon refresh cadence in seconds
REFRESH_INTERVAL = 10

CACHE_PATH_ENV = "JIRA_MIRROR_CACHE"
DAEMON_WARNING = "Warning: daemon not running, check logs. Performing slow request."


def default_snapshot_path() -> Path:
    """Location of the snapshot file, ``<tempdir>/jira-mirror`` by default."""
    override = os.getenv(CACHE_PATH_ENV)
    if override:
        return Path(override)
    return Path(tempfile.gettempdir()) / "jira-mirror"


def is_stale(
    snapshot: Snapshot,
    now: float | None = None,
    refresh_interval: float = REFRESH_INTERVAL,
) -> bool:
    """
    Check whether a snapshot is older than twice the refresh interval.

    One missed daemon cycle is tolerated before callers fall back to
    synchronous requests.

    Args:
        snapshot: The snapshot to check
        now: Current time in seconds since the epoch, defaults to time.time()
        refresh_interval: Daemon cadence in seconds

    Returns:
        True iff ``now - snapshot.timestamp > 2 * refresh_interval``
    """
    if now is None:
        now = time.time()
    return now - snapshot.timestamp > 2 * refresh_interval


class SnapshotStore(Protocol):
    """Read/write access to the persisted snapshot."""

    def load(self) -> Snapshot: ...

    def write(self, snapshot: Snapshot) -> None: ...

    def update(self, mutate: Callable[[Snapshot], Snapshot]) -> Snapshot: ...


def encode_snapshot(snapshot: Snapshot) -> bytes:
    return pickle.dumps(snapshot, protocol=pickle.HIGHEST_PROTOCOL)


def decode_snapshot(raw: bytes) -> Snapshot:
    """
    Deserialize a snapshot.

    Raises:
        SnapshotCorruptError: If the bytes are not a complete snapshot
    """
    try:
        snapshot = pickle.loads(raw)  # noqa: S301 - file is written by this tool only
    except Exception as e:  # noqa: BLE001 - any decoding failure means corruption
        raise SnapshotCorruptError(f"cannot decode snapshot: {e!r}") from e
    if not isinstance(snapshot, Snapshot):
        raise SnapshotCorruptError(f"unexpected snapshot type {type(snapshot)}")
    return snapshot


class FileSnapshotStore:
    """Snapshot store backed by a lock-guarded file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else default_snapshot_path()

    @contextmanager
    def _locked(self, mode: str) -> Iterator[IO[bytes]]:
        """Open the snapshot file and hold the exclusive lock.

        Blocks without timeout until the lock is available.
        """
        with self.path.open(mode) as handle:
            fcntl.flock(handle, fcntl.LOCK_EX)
            try:
                yield handle
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _report_missing(self) -> Snapshot:
        logger.warning(f"Snapshot file {self.path} missing")
        click.echo(DAEMON_WARNING, err=True)
        return Snapshot()

    def _report_corrupt(self, error: SnapshotCorruptError) -> Snapshot:
        logger.warning(f"Snapshot file {self.path} corrupt, deleting: {error}")
        click.echo(f"file potentially corrupt, deleting {self.path}", err=True)
        self.path.unlink(missing_ok=True)
        return Snapshot()

    def load(self) -> Snapshot:
        """
        Read the snapshot.

        A missing file yields an empty snapshot and a warning. A corrupt
        file is deleted and also yields an empty snapshot.

        Raises:
            OSError: If the file cannot be locked or read
        """
        if not self.path.exists():
            return self._report_missing()

        try:
            with self._locked("rb") as handle:
                raw = handle.read()
                try:
                    return decode_snapshot(raw)
                except SnapshotCorruptError as e:
                    return self._report_corrupt(e)
        except FileNotFoundError:
            # removed by another process between exists() and open()
            return self._report_missing()

    def write(self, snapshot: Snapshot) -> None:
        """
        Replace the snapshot file with ``snapshot``.

        Raises:
            OSError: If the file cannot be locked or written
        """
        payload = encode_snapshot(snapshot)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # append mode creates the file without truncating it before the lock is held
        with self._locked("ab") as handle:
            handle.seek(0)
            handle.truncate()
            handle.write(payload)
            handle.flush()
        logger.debug(f"Snapshot written to {self.path} ({len(payload)} bytes)")

    def update(self, mutate: Callable[[Snapshot], Snapshot]) -> Snapshot:
        """
        Read, modify and rewrite the snapshot under a single lock.

        A missing or corrupt file is treated as an empty snapshot.

        Args:
            mutate: Receives the current snapshot, returns the one to store

        Returns:
            The stored snapshot
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._locked("a+b") as handle:
            handle.seek(0)
            raw = handle.read()
            try:
                current = decode_snapshot(raw) if raw else Snapshot()
            except SnapshotCorruptError as e:
                logger.warning(f"Replacing corrupt snapshot {self.path}: {e}")
                current = Snapshot()

            updated = mutate(current)
            payload = encode_snapshot(updated)
            handle.seek(0)
            handle.truncate()
            handle.write(payload)
            handle.flush()
        return updated
