"""Foreground access to the snapshot with on-demand fallback fetches."""

import logging
import threading
import time
from collections.abc import Callable

import click

from ..jira import JiraFetcher
from ..models import Issue, Snapshot, Sprint
from .refresh import RefreshOrchestrator
from .store import DAEMON_WARNING, REFRESH_INTERVAL, SnapshotStore, is_stale

logger = logging.getLogger("jira-mirror.cache")


class ForegroundAccessor:
    """
    Serves snapshot categories to CLI commands.

    A fresh snapshot is served as is. When the snapshot is stale (the
    daemon is not running) only the requested category is refetched.
    The remote client is created on first use, so reading a fresh
    snapshot does not need any configuration.
    """

    def __init__(
        self,
        store: SnapshotStore,
        client_factory: Callable[[], JiraFetcher],
        project: str | None = None,
        interval: float = REFRESH_INTERVAL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.client_factory = client_factory
        self.project = project
        self.interval = interval
        self.clock = clock
        self._snapshot: Snapshot | None = None
        self._orchestrator: RefreshOrchestrator | None = None
        self._warned = False

    @property
    def snapshot(self) -> Snapshot:
        if self._snapshot is None:
            self._snapshot = self.store.load()
        return self._snapshot

    @property
    def orchestrator(self) -> RefreshOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = RefreshOrchestrator(
                self.client_factory(), project=self.project, clock=self.clock
            )
        return self._orchestrator

    @property
    def client(self) -> JiraFetcher:
        return self.orchestrator.client

    def is_stale(self) -> bool:
        return is_stale(self.snapshot, self.clock(), self.interval)

    def _get(self, category: str) -> Snapshot:
        snapshot = self.snapshot
        if not self.is_stale():
            return snapshot

        if not self._warned and snapshot.timestamp:
            click.echo(DAEMON_WARNING, err=True)
            self._warned = True
        logger.info(f"Snapshot stale, fetching {category}")
        return self.orchestrator.refresh_category(snapshot, category)

    def get_issues(self) -> list[Issue]:
        return self._get("issues").issues

    def get_issue_by_key(self) -> dict[str, Issue]:
        return self._get("issues").issue_by_key

    def get_epics(self) -> list[Issue]:
        return self._get("epics").epics

    def get_initiatives(self) -> list[Issue]:
        return self._get("initiatives").initiatives

    def get_sprint_issues(self) -> list[Issue]:
        return self._get("sprint_issues").sprint_issues

    def get_board_id(self) -> int:
        snapshot = self.snapshot
        if snapshot.board_id and not self.is_stale():
            return snapshot.board_id
        return self._get("board_id").board_id

    def get_sprints(self) -> list[Sprint]:
        return self._get("sprints").sprints

    def get_sprints_by_name(self) -> dict[str, Sprint]:
        return self._get("sprints").sprints_by_name

    def load_blocking(self, cancel: threading.Event | None = None) -> Snapshot:
        """
        Refresh every category synchronously and persist the result.

        Raises:
            RemoteError: If any category fails; nothing is written
            RefreshCancelledError: If cancelled or interrupted
        """
        snapshot = self.orchestrator.refresh(self.snapshot, cancel)
        self.store.write(snapshot)
        return snapshot

    def record_last_issue_created(self, key: str) -> None:
        """Remember the key of the most recently created issue."""
        if not key:
            return

        def mutate(current: Snapshot) -> Snapshot:
            current.last_issue_created = key
            return current

        self.store.update(mutate)
        self.snapshot.last_issue_created = key
