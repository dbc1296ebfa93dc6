"""Concurrent refresh of every snapshot category."""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait

from ..exceptions import RefreshCancelledError
from ..jira import JiraFetcher
from ..logging_config import log_operation
from ..models import Snapshot

logger = logging.getLogger("jira-mirror.cache")

# Applies a fetched result to the snapshot, run on the calling thread
Apply = Callable[[Snapshot], None]

CATEGORIES = (
    "issues",
    "epics",
    "initiatives",
    "board_id",
    "sprint_issues",
    "sprints",
)


class RefreshOrchestrator:
    """
    Fetches all snapshot categories concurrently.

    Each loader fetches on a worker thread and returns a closure that
    applies its result. Results are applied on the calling thread once
    every loader finished, so a snapshot is never mutated concurrently and
    successful categories survive a failing sibling.
    """

    def __init__(
        self,
        client: JiraFetcher,
        project: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.project = project or client.config.project
        self.clock = clock
        self._loaders: dict[str, Callable[[Snapshot, threading.Event], Apply]] = {
            "issues": self._load_issues,
            "epics": self._load_epics,
            "initiatives": self._load_initiatives,
            "board_id": self._load_board_id,
            "sprint_issues": self._load_sprint_issues,
            "sprints": self._load_sprints,
        }

    def _load_issues(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        issues = self.client.list_issues(self.project, cancel=cancel)
        return lambda target: target.set_issues(issues)

    def _load_epics(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        epics = self.client.list_epics(self.project, cancel=cancel)

        def apply(target: Snapshot) -> None:
            target.epics = epics

        return apply

    def _load_initiatives(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        initiatives = self.client.list_initiatives(self.project, cancel=cancel)

        def apply(target: Snapshot) -> None:
            target.initiatives = initiatives

        return apply

    def _load_board_id(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        if cancel.is_set():
            raise RefreshCancelledError("board refresh cancelled")
        board_id = self.client.get_board_id(self.project)

        def apply(target: Snapshot) -> None:
            target.board_id = board_id

        return apply

    def _load_sprint_issues(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        sprint_issues = self.client.list_sprint_issues(cancel=cancel)

        def apply(target: Snapshot) -> None:
            target.sprint_issues = sprint_issues

        return apply

    def _load_sprints(self, snapshot: Snapshot, cancel: threading.Event) -> Apply:
        if cancel.is_set():
            raise RefreshCancelledError("sprint refresh cancelled")
        # the board loader may not have run yet, resolve the board here too
        board_id = snapshot.board_id or self.client.get_board_id(self.project)
        sprints = self.client.list_sprints(board_id, cancel=cancel)

        def apply(target: Snapshot) -> None:
            if not target.board_id:
                target.board_id = board_id
            target.set_sprints(sprints)

        return apply

    def refresh(
        self, snapshot: Snapshot, cancel: threading.Event | None = None
    ) -> Snapshot:
        """
        Refresh every category of ``snapshot`` in place.

        All loaders run to completion even when one fails. The timestamp
        is only stamped when every loader succeeded.

        Args:
            snapshot: Snapshot to update
            cancel: Optional event; once set, no result is applied

        Returns:
            The updated snapshot

        Raises:
            RemoteError: The first failure in loader order; categories
                that succeeded are still applied
            RefreshCancelledError: If cancelled or interrupted
        """
        cancel = cancel or threading.Event()
        executor = ThreadPoolExecutor(
            max_workers=len(CATEGORIES), thread_name_prefix="refresh"
        )
        futures: dict[str, Future[Apply]] = {
            name: executor.submit(self._loaders[name], snapshot, cancel)
            for name in CATEGORIES
        }

        try:
            wait(futures.values())
        except KeyboardInterrupt:
            cancel.set()
            executor.shutdown(wait=False, cancel_futures=True)
            raise RefreshCancelledError("refresh interrupted") from None
        executor.shutdown()

        if cancel.is_set():
            raise RefreshCancelledError("refresh cancelled")

        first_error: BaseException | None = None
        for name, future in futures.items():
            error = future.exception()
            if error is None:
                future.result()(snapshot)
                continue
            logger.warning(f"Refreshing {name} failed: {error}")
            if first_error is None:
                first_error = error

        if first_error is not None:
            raise first_error

        snapshot.timestamp = int(self.clock())
        logger.debug(f"Snapshot refreshed: {snapshot.to_simplified_dict()}")
        return snapshot

    def refresh_category(
        self, snapshot: Snapshot, name: str, cancel: threading.Event | None = None
    ) -> Snapshot:
        """
        Synchronously refetch a single category of ``snapshot``.

        The timestamp is left untouched since the rest of the snapshot is
        not refreshed.

        Raises:
            KeyError: If ``name`` is not a snapshot category
            RemoteError: If the fetch fails
        """
        loader = self._loaders[name]
        with log_operation(logger, "refresh_category", category=name):
            apply = loader(snapshot, cancel or threading.Event())
        apply(snapshot)
        return snapshot
