"""Batch input through the user's editor.

Each workflow renders a commented template, opens it with ``click.edit``
and parses the saved buffer. Issue edits use a YAML document. Lines
starting with ``#`` and blank lines are ignored; an empty buffer aborts.
Input that does not match the snapshot (unknown epic, sprint, issue or
transition) re-opens the edited buffer so the user can fix it.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click
import yaml

from .exceptions import DomainMismatchError
from .jira import IssueDraft, IssueTransition, JiraFetcher
from .jira.constants import EPIC_ISSUE_TYPE
from .models import Issue, Snapshot, sort_issues, workflow_transitions
from .output import align_rows

logger = logging.getLogger("jira-mirror.editor")

# Action moving a sprint issue back into the backlog
BACKLOG_ACRONYM = "ice"

# Issue fields offered for editing, in document order
EDITABLE_FIELDS = ("summary", "priority")

STANDUP_KINDS = ("sprint", "epics")

T = TypeVar("T")


def parse_lines(text: str) -> list[str]:
    """Lines of the buffer that are neither comments nor blank."""
    return [
        line
        for line in text.splitlines()
        if line.strip() and not line.startswith("#")
    ]


def parse_columns(lines: list[str], count: int) -> list[list[str]]:
    """
    Split lines on commas into exactly ``count`` columns.

    The last column keeps any further commas.

    Raises:
        DomainMismatchError: If a line has fewer columns
    """
    rows = []
    for line in lines:
        columns = line.split(",", count - 1)
        if len(columns) != count:
            raise DomainMismatchError(f"missing column: {line}")
        rows.append([column.strip() for column in columns])
    return rows


def parse_action_columns(lines: list[str]) -> list[list[str]]:
    """
    Split lines on whitespace into ``action key summary...`` rows.

    Raises:
        DomainMismatchError: If a line has fewer than three fields
    """
    rows = []
    for line in lines:
        columns = line.split()
        if len(columns) < 3:
            raise DomainMismatchError(f"missing column: {line}")
        rows.append(columns)
    return rows


def _parse_index(value: str, name: str, upper: int) -> int:
    try:
        index = int(value)
    except ValueError:
        raise DomainMismatchError(f"{name} index is not a number: {value!r}") from None
    if index < 0 or index > upper:
        raise DomainMismatchError(f"{name} does not exist: {index}")
    return index


def _parse_story_points(value: str) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise DomainMismatchError(f"story points is not a number: {value!r}") from None


def edit_issue_template(issue: Issue) -> str:
    document = yaml.safe_dump(
        {"summary": issue.summary, "priority": issue.priority},
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return f"# {issue.key}\n{document}"


def render_standup(template: str, issues: list[Issue]) -> str:
    """
    Fill ``template`` once per issue, one row per line.

    The row template may use ``{key}``, ``{summary}``, ``{status}``,
    ``{acronym}`` and ``{priority}``.

    Raises:
        ValueError: If the template uses another field
    """
    rows = []
    for issue in issues:
        try:
            row = template.format(
                key=issue.key,
                summary=issue.summary,
                status=issue.status.name,
                acronym=issue.status.acronym,
                priority=issue.priority,
            )
        except (KeyError, IndexError) as e:
            raise ValueError(f"invalid standup template {template!r}: {e}") from None
        rows.append(f"{row}\n")
    return "".join(rows)


def _table_border(parents: list[Issue]) -> list[str]:
    key_width = max((len(parent.key) for parent in parents), default=0)
    summary_width = max((len(parent.summary) for parent in parents), default=0)
    return ["# --", "|", "-" * key_width, "|", "--------", "|", "-" * summary_width]


class Editor:
    """Editor workflows creating issues and epics and updating the sprint."""

    def __init__(
        self,
        snapshot: Snapshot,
        client: JiraFetcher,
        edit: Callable[..., str | None] | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.client = client
        self.edit = edit or click.edit

    def _parents_for(self, issue_type: str) -> list[Issue]:
        if issue_type == EPIC_ISSUE_TYPE:
            return self.snapshot.initiatives
        return self.snapshot.epics

    def _creation_template(
        self, parents_title: str, parents: list[Issue], new_title: str, columns: str
    ) -> str:
        border = _table_border(parents)
        rows: list[list[str]] = [
            [f"# {parents_title}"],
            ["#"],
            ["# ID", "|", "Key", "|", "Priority", "|", "Summary"],
            border,
            ["# 0", "|", "", "|", "", "|", "Unassigned"],
            border,
        ]
        rows.extend(
            [f"# {i}", "|", parent.key, "|", parent.priority, "|", parent.summary]
            for i, parent in enumerate(parents, start=1)
        )
        rows.extend([border, ["#"], ["#"]])

        rows.extend(
            [
                ["# Sprints"],
                ["#"],
                ["# ID", "|", "Name"],
                ["# --", "|", "----"],
                ["# 0", "|", "Unassigned"],
            ]
        )
        rows.extend(
            [f"# {i}", "|", sprint.name]
            for i, sprint in enumerate(self.snapshot.sprints, start=1)
        )
        rows.extend([["#"], [f"# {new_title}"], ["#"], [f"# {columns}"], []])
        return align_rows(rows)

    def issue_template(self) -> str:
        return self._creation_template(
            "Epics",
            self.snapshot.epics,
            "New Issues",
            "Epic, Sprint, Summary, Story Points, Description",
        )

    def epic_template(self) -> str:
        return self._creation_template(
            "Initiatives",
            self.snapshot.initiatives,
            "New Epics",
            "Initiative, Sprint, Summary, Story Points, Description",
        )

    def sprint_template(self, include_done: bool = False) -> str:
        issues = self.snapshot.sprint_issues
        rows: list[list[str]] = [
            [issue.status.acronym, issue.key, issue.summary]
            for issue in sort_issues(issues)
            if include_done or not issue.status.is_done
        ]
        rows.extend(
            [
                [],
                ["# Update the status of any sprint issues"],
                ["#"],
                ["# Commands:"],
                ["#"],
            ]
        )
        rows.extend(
            [f"# {transition.acronym}", "<key> =", transition.name]
            for transition in workflow_transitions(issues)
        )
        rows.extend([["#"], [f"# {BACKLOG_ACRONYM}", "<key> =", "Move into backlog"]])
        return align_rows(rows)

    def parse_issue(self, columns: list[str], issue_type: str) -> IssueDraft:
        """
        Convert one ``parent, sprint, summary, story points, description`` row.

        Index 0 leaves the parent or sprint unassigned. The due date is the
        end date of the chosen sprint.

        Raises:
            DomainMismatchError: If an index or number is invalid
        """
        parents = self._parents_for(issue_type)
        sprints = self.snapshot.sprints
        parent_index = _parse_index(columns[0], "epic or initiative", len(parents))
        sprint_index = _parse_index(columns[1], "sprint", len(sprints))

        summary = columns[2]
        if not summary:
            raise DomainMismatchError("summary is empty")

        draft = IssueDraft(
            summary=summary,
            issue_type=issue_type,
            description=columns[4],
            story_points=_parse_story_points(columns[3]),
        )

        if parent_index:
            parent = parents[parent_index - 1]
            if issue_type == EPIC_ISSUE_TYPE:
                draft.parent_key = parent.key
            else:
                draft.epic_key = parent.key

        if sprint_index:
            sprint = sprints[sprint_index - 1]
            draft.sprint_id = sprint.id
            if sprint.end_date is not None:
                draft.due_date = sprint.end_date.date()

        return draft

    def parse_issues(self, lines: list[str], issue_type: str) -> list[IssueDraft]:
        return [
            self.parse_issue(columns, issue_type)
            for columns in parse_columns(lines, 5)
        ]

    def parse_sprint_actions(
        self, lines: list[str]
    ) -> tuple[list[IssueTransition], list[str]]:
        """
        Convert ``action key summary`` rows into transitions and backlog moves.

        Rows whose action equals the current status are skipped.

        Returns:
            Transitions to apply and keys to move into the backlog

        Raises:
            DomainMismatchError: On unknown issue keys or transition acronyms
        """
        known = {issue.key: issue for issue in self.snapshot.sprint_issues}
        transitions: list[IssueTransition] = []
        backlog: list[str] = []

        for row in parse_action_columns(lines):
            action, key = row[0], row[1]
            issue = known.get(key) or self.snapshot.issue_by_key.get(key)
            if issue is None:
                raise DomainMismatchError(f"issue does not exist: {key}")

            if action == issue.status.acronym:
                continue

            if action == BACKLOG_ACRONYM:
                backlog.append(key)
                continue

            transition = issue.transitions_by_acronym.get(action)
            if transition is None:
                raise DomainMismatchError(f"transition does not exist: {action}")
            transitions.append(IssueTransition(key, transition))

        return transitions, backlog

    def parse_issue_edit(self, lines: list[str], issue: Issue) -> dict[str, Any]:
        """
        Convert an edited YAML document into the fields that changed.

        Returns:
            Update payload keyed by Jira field id, empty without changes

        Raises:
            DomainMismatchError: On invalid YAML, unknown fields or an empty
                summary
        """
        try:
            values = yaml.safe_load("\n".join(lines))
        except yaml.YAMLError as e:
            raise DomainMismatchError(f"invalid issue document: {e}") from None
        if not isinstance(values, dict):
            raise DomainMismatchError("issue document must map fields to values")

        unknown = [str(name) for name in values if name not in EDITABLE_FIELDS]
        if unknown:
            names = ", ".join(unknown)
            raise DomainMismatchError(f"field cannot be edited: {names}")

        summary = str(values.get("summary") or "").strip()
        if not summary:
            raise DomainMismatchError("summary is empty")
        priority = str(values.get("priority") or "").strip()

        fields: dict[str, Any] = {}
        if summary != issue.summary:
            fields["summary"] = summary
        if priority and priority != issue.priority:
            fields["priority"] = {"name": priority}
        return fields

    def _edit_until_valid(
        self, template: str, parse: Callable[[list[str]], T]
    ) -> T | None:
        text = template
        while True:
            edited = self.edit(text, extension=".txt", require_save=True)
            if edited is None:
                return None

            lines = parse_lines(edited)
            if not lines:
                logger.info("Empty input, nothing to do")
                return None

            try:
                return parse(lines)
            except DomainMismatchError as e:
                logger.debug(f"Invalid editor input: {e}")
                click.echo(str(e), err=True)
                click.pause()
                text = edited

    def open_new_issue_editor(self) -> str:
        """
        Create issues of the configured type from the editor buffer.

        Returns:
            Key of the last issue created, "" when aborted
        """
        issue_type = self.client.config.issue_type
        drafts = self._edit_until_valid(
            self.issue_template(), lambda lines: self.parse_issues(lines, issue_type)
        )
        if not drafts:
            return ""
        return self.client.create_issues(drafts)

    def open_epic_editor(self) -> str:
        """
        Create epics from the editor buffer.

        Returns:
            Key of the last epic created, "" when aborted
        """
        drafts = self._edit_until_valid(
            self.epic_template(),
            lambda lines: self.parse_issues(lines, EPIC_ISSUE_TYPE),
        )
        if not drafts:
            return ""
        return self.client.create_issues(drafts)

    def open_sprint_editor(self, include_done: bool = False) -> None:
        """Apply the status changes entered for the sprint issues."""
        actions = self._edit_until_valid(
            self.sprint_template(include_done), self.parse_sprint_actions
        )
        if actions is None:
            return

        transitions, backlog = actions
        self.client.move_issues_to_backlog(backlog)
        self.client.transition_issues(transitions)

    def open_edit_issue_editor(self, key: str) -> bool:
        """
        Edit the summary and priority of an issue of the snapshot.

        Returns:
            True if the issue was updated

        Raises:
            DomainMismatchError: If the snapshot has no issue ``key``
        """
        issue = self.snapshot.issue_by_key.get(key)
        if issue is None:
            raise DomainMismatchError(f"unknown issue: {key}")

        fields = self._edit_until_valid(
            edit_issue_template(issue),
            lambda lines: self.parse_issue_edit(lines, issue),
        )
        if not fields:
            logger.info(f"No changes to {key}")
            return False

        self.client.update_issue(key, fields)
        return True

    def open_standup_editor(self, kind: str, template: str) -> str:
        """
        Render a standup message and let the user adjust it.

        ``sprint`` lists the sprint issues in workflow order, ``epics`` the
        epics of the project.

        Returns:
            The saved message, "" when it is empty

        Raises:
            ValueError: On an unknown kind or an invalid template
        """
        if kind == "sprint":
            issues = sort_issues(self.snapshot.sprint_issues)
        elif kind == "epics":
            issues = self.snapshot.epics
        else:
            raise ValueError(f"unknown standup: {kind}")

        text = self.edit(
            render_standup(template, issues), extension=".txt", require_save=False
        )
        if not text or not text.strip():
            return ""
        return text
