"""Tests for the Jira Issues mixin."""

from datetime import date

import pytest

from jira_mirror.exceptions import RemoteError
from jira_mirror.jira import CustomFieldsConfig, IssueDraft
from tests.utils.fakes import make_http_error


class TestBuildIssueFields:
    """Tests for the create payload builder."""

    def test_minimal_story(self, jira_fetcher):
        fields = jira_fetcher.build_issue_fields(
            IssueDraft(summary="Add command", issue_type="Story")
        )

        assert fields == {
            "project": {"key": "KONG"},
            "summary": "Add command",
            "issuetype": {"name": "Story"},
            "assignee": {"accountId": "abc-123"},
            "reporter": {"accountId": "abc-123"},
            "labels": ["team-kong"],
            "components": [{"name": "cli"}],
        }

    def test_story_with_epic_sprint_and_points(self, jira_fetcher):
        draft = IssueDraft(
            summary="Add command",
            issue_type="Story",
            description="Details",
            story_points=3,
            epic_key="KONG-10",
            sprint_id=5,
            due_date=date(2024, 1, 18),
        )

        fields = jira_fetcher.build_issue_fields(draft)

        assert fields["description"] == "Details"
        assert fields["customfield_10016"] == 3
        assert fields["customfield_10014"] == "KONG-10"
        assert fields["customfield_10020"] == 5
        assert fields["duedate"] == "2024-01-18"
        assert "customfield_10011" not in fields

    def test_epic_sets_name_and_parent_link(self, jira_fetcher):
        draft = IssueDraft(summary="Big thing", issue_type="Epic", parent_key="KONG-1")

        fields = jira_fetcher.build_issue_fields(draft)

        assert fields["customfield_10011"] == "Big thing"
        assert fields["customfield_10018"] == "KONG-1"

    def test_parent_without_parent_link_field(self, jira_fetcher_factory):
        fetcher = jira_fetcher_factory(
            custom_fields=CustomFieldsConfig(
                epics_field="customfield_10014",
                sprints_field="customfield_10020",
                story_points_field="customfield_10016",
            )
        )

        fields = fetcher.build_issue_fields(
            IssueDraft(summary="Big thing", issue_type="Epic", parent_key="KONG-1")
        )

        assert fields["parent"] == {"key": "KONG-1"}

    def test_server_user_reference(self, jira_fetcher_factory):
        fetcher = jira_fetcher_factory(url="https://jira.example.com")

        fields = fetcher.build_issue_fields(IssueDraft(summary="S", issue_type="Story"))

        assert fields["assignee"] == {"name": "tester"}

    def test_current_user_is_fetched_once(self, jira_fetcher):
        draft = IssueDraft(summary="S", issue_type="Story")

        jira_fetcher.build_issue_fields(draft)
        jira_fetcher.build_issue_fields(draft)

        jira_fetcher.jira.myself.assert_called_once()


class TestCreateIssues:
    """Tests for single and batch issue creation."""

    def test_create_issue_prints_key(self, jira_fetcher, capsys):
        jira_fetcher.jira.create_issue.return_value = {"id": "1", "key": "KONG-7"}

        key = jira_fetcher.create_issue(IssueDraft(summary="New", issue_type="Story"))

        assert key == "KONG-7"
        assert capsys.readouterr().out == "Created KONG-7 - New\n"

    def test_create_issue_without_key(self, jira_fetcher):
        jira_fetcher.jira.create_issue.return_value = {"id": "1"}

        with pytest.raises(RemoteError, match="No issue key"):
            jira_fetcher.create_issue(IssueDraft(summary="New", issue_type="Story"))

    def test_create_issues_returns_last_key(self, jira_fetcher, capsys):
        def create(fields):
            return {"key": f"KONG-{fields['summary'][-1]}"}

        jira_fetcher.jira.create_issue.side_effect = create
        drafts = [
            IssueDraft(summary=f"Issue {i}", issue_type="Story") for i in range(1, 4)
        ]

        assert jira_fetcher.create_issues(drafts) == "KONG-3"
        lines = sorted(capsys.readouterr().out.splitlines())
        assert lines == [
            "Created KONG-1 - Issue 1",
            "Created KONG-2 - Issue 2",
            "Created KONG-3 - Issue 3",
        ]

    def test_create_issues_empty_batch(self, jira_fetcher):
        assert jira_fetcher.create_issues([]) == ""
        jira_fetcher.jira.create_issue.assert_not_called()

    def test_create_issues_partial_failure(self, jira_fetcher, capsys):
        """Every draft is attempted; successes stay created and are printed."""

        def create(fields):
            if fields["summary"] == "Issue 2":
                raise make_http_error(400, '{"errors":{"summary":"too long"}}')
            return {"key": f"KONG-{fields['summary'][-1]}"}

        jira_fetcher.jira.create_issue.side_effect = create
        drafts = [
            IssueDraft(summary=f"Issue {i}", issue_type="Story") for i in range(1, 4)
        ]

        with pytest.raises(RemoteError) as excinfo:
            jira_fetcher.create_issues(drafts)

        assert str(excinfo.value) == '{"errors":{"summary":"too long"}}'
        assert jira_fetcher.jira.create_issue.call_count == 3
        out = capsys.readouterr().out
        assert "Created KONG-1 - Issue 1" in out
        assert "Created KONG-3 - Issue 3" in out
        assert "KONG-2" not in out


class TestUpdateIssue:
    """Tests for editing existing issues."""

    def test_update_issue(self, jira_fetcher, capsys):
        jira_fetcher.update_issue("KONG-2", {"summary": "Renamed"})

        jira_fetcher.jira.update_issue_field.assert_called_once_with(
            "KONG-2", {"summary": "Renamed"}
        )
        assert capsys.readouterr().out == "Updated KONG-2\n"

    def test_update_issue_rejected(self, jira_fetcher):
        jira_fetcher.jira.update_issue_field.side_effect = make_http_error(
            400, '{"errors":{"priority":"invalid"}}'
        )

        with pytest.raises(RemoteError) as excinfo:
            jira_fetcher.update_issue("KONG-2", {"priority": {"name": "Urgent"}})

        assert "invalid" in str(excinfo.value)
