"""Background refresher keeping the snapshot file warm."""

import enum
import logging
import time
from collections.abc import Callable

from ..exceptions import RefreshCancelledError
from ..logging_config import log_operation
from ..models import Snapshot
from .refresh import RefreshOrchestrator
from .store import REFRESH_INTERVAL, SnapshotStore

logger = logging.getLogger("jira-mirror.daemon")


class DaemonState(str, enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class Daemon:
    """
    Refreshes the snapshot forever, one cycle every ``interval`` seconds.

    A failing cycle is logged and the snapshot is written anyway, so the
    categories that did refresh are published while the timestamp keeps
    its last successful value.
    """

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        store: SnapshotStore,
        interval: float = REFRESH_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.orchestrator = orchestrator
        self.store = store
        self.interval = interval
        self.sleep = sleep
        self.state = DaemonState.IDLE
        self.snapshot: Snapshot | None = None

    def run_once(self) -> bool:
        """
        Run a single refresh cycle and persist the result.

        Returns:
            True if the refresh succeeded
        """
        if self.snapshot is None:
            self.snapshot = self.store.load()
        snapshot = self.snapshot

        def merge(current: Snapshot) -> Snapshot:
            # the foreground records created issues directly in the file
            if current.last_issue_created:
                snapshot.last_issue_created = current.last_issue_created
            return snapshot

        self.state = DaemonState.REFRESHING
        succeeded = False
        try:
            with log_operation(logger, "refresh", project=self.orchestrator.project):
                self.orchestrator.refresh(snapshot)
            succeeded = True
        except RefreshCancelledError:
            logger.warning("Refresh cancelled, snapshot not written")
            self.state = DaemonState.IDLE
            raise
        except Exception as e:  # noqa: BLE001 - a failed cycle must not stop the daemon
            logger.debug(f"Refresh failure details: {e!r}", exc_info=True)

        try:
            self.store.update(merge)
        except OSError as e:
            logger.error(f"Failed to write snapshot: {e}")
        finally:
            self.state = DaemonState.IDLE
        return succeeded

    def run(self, max_cycles: int | None = None) -> None:
        """
        Refresh until interrupted, or for ``max_cycles`` cycles.

        Raises:
            RefreshCancelledError: If a cycle is interrupted
        """
        logger.info(
            f"Daemon started for {self.orchestrator.project}, "
            f"refreshing every {self.interval}s"
        )
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            self.run_once()
            cycles += 1
            if max_cycles is None or cycles < max_cycles:
                self.sleep(self.interval)
