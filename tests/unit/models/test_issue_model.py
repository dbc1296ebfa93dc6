"""Tests for the issue, workflow and sprint models."""

import pickle
from unittest.mock import patch

import pytest

from jira_mirror.models import (
    Issue,
    Snapshot,
    Sprint,
    Status,
    Transition,
    Workflow,
    issues_from_api_response,
    sort_issues,
    status_acronym,
    workflow_transitions,
    warn_if_multiple_active,
)
from tests.utils.factories import (
    SPRINTS_FIELD,
    JiraIssueFactory,
    JiraSprintFactory,
    JiraTransitionFactory,
)
from tests.utils.fakes import make_issues, make_sprints

LEGACY_SPRINT = "com.atlassian.greenhopper.service.sprint.Sprint@1"


class TestStatus:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("In Progress", "ip"),
            ("To Do", "td"),
            ("Done", "d"),
            ("Ready for QA", "rfq"),
            ("", ""),
        ],
    )
    def test_status_acronym(self, name, expected):
        assert status_acronym(name) == expected

    def test_from_api_response(self):
        status = Status.from_api_response(
            {"name": "Done", "statusCategory": {"key": "done"}}
        )

        assert status.name == "Done"
        assert status.acronym == "d"
        assert status.is_done

    def test_empty_status(self):
        assert Status.from_api_response({}) == Status()


class TestWorkflow:
    def test_transition_uses_target_status(self):
        transition = Transition.from_api_response(
            {"id": 31, "name": "Send to review", "to": {"name": "In Review"}}
        )

        assert transition.id == "31"
        assert transition.name == "In Review"
        assert transition.acronym == "ir"

    def test_indices(self):
        workflow = Workflow.from_api_response(
            {"transitions": JiraTransitionFactory.create_workflow()}
        )

        assert [t.name for t in workflow.transitions] == [
            "To Do",
            "In Progress",
            "In Review",
            "Done",
        ]
        assert workflow.by_acronym["ip"].id == "21"
        assert workflow.rank["Done"] == 3

    def test_without_transitions(self):
        workflow = Workflow.from_api_response({})

        assert workflow.transitions == []
        assert workflow.rank == {}


class TestIssue:
    def test_from_api_response(self):
        issue = Issue.from_api_response(
            JiraIssueFactory.create(key="KONG-1", sprint_id=5),
            sprints_field=SPRINTS_FIELD,
        )

        assert issue.key == "KONG-1"
        assert issue.summary == "Add command to list issues"
        assert issue.priority == "Medium"
        assert issue.status.name == "To Do"
        assert issue.sprint == 5
        assert issue.transitions_by_acronym["d"].name == "Done"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 0),
            ([], 0),
            ([{"id": 3, "state": "closed"}, {"id": 4, "state": "active"}], 4),
            ([{"id": 3, "state": "closed"}, {"id": 4, "state": "closed"}], 4),
            ([f"{LEGACY_SPRINT}[id=12,state=ACTIVE]"], 12),
            (8, 8),
        ],
        ids=["none", "empty", "active-wins", "last-wins", "legacy-string", "plain-id"],
    )
    def test_sprint_field_formats(self, value, expected):
        raw = JiraIssueFactory.create()
        raw["fields"][SPRINTS_FIELD] = value

        issue = Issue.from_api_response(raw, sprints_field=SPRINTS_FIELD)

        assert issue.sprint == expected

    def test_missing_fields_rejected(self):
        with pytest.raises(ValueError, match="no fields"):
            Issue.from_api_response({"key": "KONG-1"})

    def test_empty_summary_rejected(self):
        with pytest.raises(ValueError, match="empty summary"):
            Issue.from_api_response(JiraIssueFactory.create(summary=""))

    def test_batch_shares_first_workflow(self):
        raw = [
            JiraIssueFactory.create(key="KONG-1", with_transitions=False),
            JiraIssueFactory.create(key="KONG-2"),
            JiraIssueFactory.create(key="KONG-3"),
        ]

        issues = issues_from_api_response(raw)

        assert issues[0].workflow is issues[1].workflow is issues[2].workflow
        assert len(issues[0].transitions) == 4

    def test_shared_workflow_survives_pickle(self):
        snapshot = Snapshot()
        snapshot.set_issues(
            make_issues(("KONG-1", "To Do", "new"), ("KONG-2", "Done", "done"))
        )

        restored = pickle.loads(pickle.dumps(snapshot))

        assert restored.issues[0].workflow is restored.issues[1].workflow
        assert restored.issue_by_key["KONG-2"] is restored.issues[1]


class TestSortIssues:
    def test_sorted_by_workflow_rank(self):
        issues = make_issues(
            ("KONG-1", "Done", "done"),
            ("KONG-2", "In Progress", "indeterminate"),
            ("KONG-3", "To Do", "new"),
        )

        assert [i.key for i in sort_issues(issues)] == ["KONG-3", "KONG-2", "KONG-1"]

    def test_stable_and_unknown_last(self):
        issues = make_issues(
            ("KONG-1", "Blocked", "indeterminate"),
            ("KONG-2", "To Do", "new"),
            ("KONG-3", "In Progress", "indeterminate"),
            ("KONG-4", "To Do", "new"),
        )

        assert [i.key for i in sort_issues(issues)] == [
            "KONG-2",
            "KONG-4",
            "KONG-3",
            "KONG-1",
        ]

    def test_workflow_transitions(self):
        assert workflow_transitions([]) == []
        issues = make_issues(("KONG-1", "To Do", "new"))
        acronyms = [t.acronym for t in workflow_transitions(issues)]
        assert acronyms == ["td", "ip", "ir", "d"]


class TestSprint:
    def test_from_api_response(self):
        sprint = Sprint.from_api_response(JiraSprintFactory.create(3, "Kong 1/4"))

        assert sprint.id == 3
        assert sprint.name == "Kong 1/4"
        assert sprint.is_active
        assert sprint.end_date is not None
        assert (sprint.end_date.year, sprint.end_date.month) == (2024, 1)

    def test_without_end_date(self):
        sprint = Sprint.from_api_response(
            JiraSprintFactory.create(3, "Kong", "future", endDate=None)
        )

        assert sprint.end_date is None
        assert not sprint.is_active

    def test_single_active_sprint(self):
        with patch("jira_mirror.models.sprint.logger") as logger:
            assert not warn_if_multiple_active(make_sprints("Kong 1", "Kong 2"))

        logger.warning.assert_not_called()

    def test_parallel_active_sprints_warn(self):
        two_active = [
            Sprint(id=1, name="A", state="active"),
            Sprint(id=2, name="B", state="active"),
        ]

        with patch("jira_mirror.models.sprint.logger") as logger:
            assert warn_if_multiple_active(two_active)

        logger.warning.assert_called_once_with("More than one active sprint: A, B")


class TestSnapshot:
    def test_setters_rebuild_indices(self):
        snapshot = Snapshot()
        snapshot.set_issues(make_issues(("KONG-1", "To Do", "new")))
        snapshot.set_sprints(make_sprints("Kong 1", "Kong 2"))

        assert list(snapshot.issue_by_key) == ["KONG-1"]
        assert snapshot.sprints_by_name["Kong 2"].id == 2

        snapshot.set_issues([])
        assert snapshot.issue_by_key == {}

    def test_to_simplified_dict(self):
        snapshot = Snapshot(timestamp=10, board_id=7)
        snapshot.set_sprints(make_sprints("Kong 1"))

        assert snapshot.to_simplified_dict() == {
            "timestamp": 10,
            "issues": 0,
            "epics": 0,
            "initiatives": 0,
            "sprint_issues": 0,
            "board_id": 7,
            "sprints": ["Kong 1"],
        }
