"""Tests for foreground snapshot access."""

from unittest.mock import MagicMock

import pytest

from jira_mirror.cache import ForegroundAccessor
from jira_mirror.cache.store import DAEMON_WARNING
from jira_mirror.exceptions import RemoteError
from jira_mirror.models import Snapshot
from tests.utils.fakes import MemorySnapshotStore, make_issues, make_sprints

NOW = 1_700_000_000


def cached_snapshot(timestamp):
    snapshot = Snapshot(timestamp=timestamp, board_id=7)
    snapshot.set_issues(make_issues(("KONG-1", "To Do", "new")))
    snapshot.epics = make_issues(("KONG-10", "To Do", "new"))
    snapshot.set_sprints(make_sprints("Kong 1/4"))
    return snapshot


@pytest.fixture
def client():
    client = MagicMock()
    client.config.project = "KONG"
    client.list_issues.return_value = make_issues(
        ("KONG-1", "Done", "done"), ("KONG-2", "To Do", "new")
    )
    client.list_epics.return_value = []
    client.get_board_id.return_value = 11
    client.list_sprints.return_value = make_sprints("Kong 2/1", "Kong 2/15")
    return client


@pytest.fixture
def client_factory(client):
    return MagicMock(return_value=client)


def make_accessor(store, client_factory):
    return ForegroundAccessor(store, client_factory, clock=lambda: NOW)


class TestFreshSnapshot:
    @pytest.fixture
    def accessor(self, client_factory):
        store = MemorySnapshotStore(cached_snapshot(NOW - 5))
        return make_accessor(store, client_factory)

    def test_served_without_client(self, accessor, client_factory):
        assert [i.key for i in accessor.get_issues()] == ["KONG-1"]
        assert list(accessor.get_issue_by_key()) == ["KONG-1"]
        assert [i.key for i in accessor.get_epics()] == ["KONG-10"]
        assert accessor.get_board_id() == 7
        assert list(accessor.get_sprints_by_name()) == ["Kong 1/4"]

        client_factory.assert_not_called()

    def test_not_stale(self, accessor):
        assert accessor.is_stale() is False

    def test_snapshot_loaded_once(self, accessor):
        accessor.get_issues()
        accessor.get_epics()

        assert accessor.store.loads == 1


class TestStaleSnapshot:
    @pytest.fixture
    def store(self):
        return MemorySnapshotStore(cached_snapshot(NOW - 60))

    @pytest.fixture
    def accessor(self, store, client_factory):
        return make_accessor(store, client_factory)

    def test_refetches_requested_category(self, accessor, client, capsys):
        issues = accessor.get_issues()

        assert [i.key for i in issues] == ["KONG-1", "KONG-2"]
        client.list_issues.assert_called_once()
        client.list_epics.assert_not_called()
        client.list_sprints.assert_not_called()
        assert DAEMON_WARNING in capsys.readouterr().err

    def test_warning_printed_once(self, accessor, capsys):
        accessor.get_issues()
        accessor.get_epics()

        assert capsys.readouterr().err.count(DAEMON_WARNING) == 1

    def test_refetch_not_persisted(self, accessor, store):
        accessor.get_issues()

        assert store.writes == 0
        assert store.stored.timestamp == NOW - 60

    def test_board_id_refetched(self, accessor, client):
        assert accessor.get_board_id() == 11
        client.get_board_id.assert_called_once_with("KONG")

    def test_sprints_refetched(self, accessor):
        assert list(accessor.get_sprints_by_name()) == ["Kong 2/1", "Kong 2/15"]

    def test_fetch_failure_propagates(self, accessor, client):
        client.list_epics.side_effect = RemoteError("unavailable")

        with pytest.raises(RemoteError):
            accessor.get_epics()

    def test_empty_snapshot_has_no_warning(self, client_factory, capsys):
        accessor = make_accessor(MemorySnapshotStore(), client_factory)

        accessor.get_issues()

        assert DAEMON_WARNING not in capsys.readouterr().err


class TestLoadBlocking:
    def test_refreshes_and_persists(self, client_factory, client):
        client.list_initiatives.return_value = []
        client.list_sprint_issues.return_value = []
        store = MemorySnapshotStore()
        accessor = make_accessor(store, client_factory)

        snapshot = accessor.load_blocking()

        assert snapshot.timestamp == NOW
        assert store.stored.timestamp == NOW
        assert list(store.stored.issue_by_key) == ["KONG-1", "KONG-2"]
        assert accessor.is_stale() is False

    def test_failure_writes_nothing(self, client_factory, client):
        client.list_initiatives.side_effect = RemoteError("down")
        store = MemorySnapshotStore()
        accessor = make_accessor(store, client_factory)

        with pytest.raises(RemoteError):
            accessor.load_blocking()

        assert store.writes == 0


class TestRecordLastIssueCreated:
    def test_persists_key(self, client_factory):
        store = MemorySnapshotStore(cached_snapshot(NOW))
        accessor = make_accessor(store, client_factory)

        accessor.record_last_issue_created("KONG-3")

        assert store.stored.last_issue_created == "KONG-3"
        assert store.stored.board_id == 7
        assert accessor.snapshot.last_issue_created == "KONG-3"
        client_factory.assert_not_called()

    def test_empty_key_ignored(self, client_factory):
        store = MemorySnapshotStore(cached_snapshot(NOW))
        accessor = make_accessor(store, client_factory)

        accessor.record_last_issue_created("")

        assert store.writes == 0
