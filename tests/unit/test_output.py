"""Tests for the plain text renderers."""

import re

from jira_mirror.models import Issue, Sprint
from jira_mirror.output import (
    align_rows,
    format_end_date,
    format_issues,
    format_sprint_issues,
    format_sprints,
)
from tests.utils.factories import JiraIssueFactory
from tests.utils.fakes import make_issues, make_sprints


class TestAlignRows:
    def test_pads_all_but_last_cell(self):
        rows = [["a", "-", "bb"], ["ccc", "-", "d"]]

        assert align_rows(rows) == "a   - bb\nccc - d\n"

    def test_rows_without_cell_end_column_block(self):
        rows = [["a", "b"], ["#"], ["long", "c"]]

        assert align_rows(rows) == "a b\n#\nlong c\n"

    def test_empty_row(self):
        assert align_rows([["a", "b"], [], ["c"]]) == "a b\n\nc\n"

    def test_nested_blocks(self):
        rows = [["x", "y", "z"], ["xx", "w"], ["x", "yyy", "z"]]

        assert align_rows(rows) == "x  y z\nxx w\nx  yyy z\n"

    def test_padding(self):
        assert align_rows([["a", "b"]], padding=3) == "a   b\n"

    def test_no_rows(self):
        assert align_rows([]) == ""


class TestFormatIssues:
    def test_single_issue(self):
        issue = Issue.from_api_response(JiraIssueFactory.create())

        assert format_issues([issue]) == "KONG-1 - To Do - Add command to list issues\n"

    def test_sorted_and_aligned(self):
        issues = make_issues(
            ("KONG-1", "In Progress", "indeterminate"), ("KONG-2", "To Do", "new")
        )

        assert format_issues(issues) == (
            "KONG-2 - To Do       - Summary of KONG-2\n"
            "KONG-1 - In Progress - Summary of KONG-1\n"
        )

    def test_no_issues(self):
        assert format_issues([]) == ""


class TestFormatSprintIssues:
    def test_done_hidden_by_default(self):
        issues = make_issues(("KONG-1", "Done", "done"), ("KONG-2", "To Do", "new"))

        assert format_sprint_issues(issues) == "To Do - KONG-2 - Summary of KONG-2\n"

    def test_include_done(self):
        issues = make_issues(("KONG-1", "Done", "done"), ("KONG-2", "To Do", "new"))

        assert format_sprint_issues(issues, include_done=True) == (
            "To Do - KONG-2 - Summary of KONG-2\n"
            "Done  - KONG-1 - Summary of KONG-1\n"
        )


class TestFormatSprints:
    def test_end_date_without_padding(self):
        sprint = make_sprints("Kong 1/4")[0]

        assert re.fullmatch(r"2024/1/1[89]", format_end_date(sprint))

    def test_missing_end_date(self):
        assert format_end_date(Sprint(id=1, name="Kong")) == "N/A"

    def test_rows(self):
        sprints = make_sprints("Kong 1/4") + [Sprint(id=12, name="Kong 2/1")]

        lines = format_sprints(sprints).splitlines()

        assert re.fullmatch(r"1  - 2024/1/1[89] - Kong 1/4", lines[0])
        assert lines[1] == "12 - N/A       - Kong 2/1"
