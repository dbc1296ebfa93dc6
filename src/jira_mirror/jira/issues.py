"""Module for Jira issue creation and updates."""

import logging
from datetime import date
from typing import Any

import click
from pydantic import BaseModel

from ..exceptions import RemoteError
from ..utils.decorators import handle_remote_errors
from .client import JiraClient
from .constants import EPIC_ISSUE_TYPE
from .utils import run_batch

logger = logging.getLogger("jira-mirror.jira")


class IssueDraft(BaseModel):
    """An issue (or epic) ready to be created."""

    summary: str
    issue_type: str
    description: str = ""
    story_points: float | None = None
    epic_key: str | None = None  # Epic the new issue belongs to
    parent_key: str | None = None  # Initiative the new epic belongs to
    sprint_id: int = 0  # 0 means unassigned
    due_date: date | None = None


class IssuesMixin(JiraClient):
    """Mixin for Jira issue operations."""

    def build_issue_fields(self, draft: IssueDraft) -> dict[str, Any]:
        """
        Build the create payload of a draft.

        Epic link, sprint, story points, epic name and parent link live in
        project specific custom fields whose ids come from the config.

        Args:
            draft: The issue to create

        Returns:
            The ``fields`` object of the create request
        """
        custom_fields = self.config.custom_fields
        user = self.user_reference()

        fields: dict[str, Any] = {
            "project": {"key": self.config.project},
            "summary": draft.summary,
            "issuetype": {"name": draft.issue_type},
            "assignee": user,
            "reporter": user,
        }
        if draft.description:
            fields["description"] = draft.description
        if self.config.labels:
            fields["labels"] = list(self.config.labels)
        if self.config.components:
            fields["components"] = [{"name": name} for name in self.config.components]

        if draft.story_points is not None:
            fields[custom_fields.story_points_field] = draft.story_points

        if draft.epic_key:
            fields[custom_fields.epics_field] = draft.epic_key

        if draft.issue_type == EPIC_ISSUE_TYPE and custom_fields.epic_name_field:
            fields[custom_fields.epic_name_field] = draft.summary

        if draft.parent_key:
            if custom_fields.parent_link_field:
                fields[custom_fields.parent_link_field] = draft.parent_key
            else:
                fields["parent"] = {"key": draft.parent_key}

        if draft.sprint_id:
            fields[custom_fields.sprints_field] = draft.sprint_id

        if draft.due_date:
            fields["duedate"] = draft.due_date.isoformat()

        return fields

    @handle_remote_errors("Jira issue API")
    def create_issue(self, draft: IssueDraft) -> str:
        """
        Create a single issue.

        Returns:
            Key of the created issue

        Raises:
            RemoteError: If Jira rejects the issue
        """
        response = self.jira.create_issue(fields=self.build_issue_fields(draft))
        issue_key = response.get("key") if isinstance(response, dict) else None
        if not issue_key:
            raise RemoteError("No issue key returned from Jira API", str(response))

        click.echo(f"Created {issue_key} - {draft.summary}")
        return issue_key

    def create_issues(self, drafts: list[IssueDraft]) -> str:
        """
        Create a batch of issues concurrently.

        Every success is printed as it happens. Issues created before a
        failure are kept; there is no rollback.

        Args:
            drafts: Issues to create

        Returns:
            Key of the last issue of the batch, "" for an empty batch

        Raises:
            RemoteError: The first failure in input order
        """
        keys = run_batch(drafts, self.create_issue)
        logger.info(f"Created {len(keys)} issues")
        return keys[-1] if keys else ""

    @handle_remote_errors("Jira issue API")
    def update_issue(self, key: str, fields: dict[str, Any]) -> None:
        """
        Update fields of an existing issue.

        Args:
            key: Issue key
            fields: New field values keyed by Jira field id

        Raises:
            RemoteError: If Jira rejects the update
        """
        self.jira.update_issue_field(key, fields)
        logger.info(f"Updated {key}: {', '.join(fields)}")
        click.echo(f"Updated {key}")
