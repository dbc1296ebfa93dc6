"""Module for Jira transition operations."""

import logging
from typing import NamedTuple

import click

from ..models import Transition
from ..utils.decorators import handle_remote_errors
from .client import JiraClient
from .utils import run_batch

logger = logging.getLogger("jira-mirror.jira")


class IssueTransition(NamedTuple):
    """A transition to apply to one issue."""

    issue_key: str
    transition: Transition


class TransitionsMixin(JiraClient):
    """Mixin for Jira transition operations."""

    @handle_remote_errors("Jira issue API")
    def transition_issue(self, item: IssueTransition) -> str:
        """
        Apply one workflow transition.

        Returns:
            The transitioned issue key
        """
        self.jira.set_issue_status_by_transition_id(item.issue_key, item.transition.id)
        click.echo(f"Transitioned {item.issue_key} to {item.transition.name}")
        return item.issue_key

    def transition_issues(self, batch: list[IssueTransition]) -> None:
        """
        Apply transitions concurrently.

        Raises:
            RemoteError: The first failure in input order, after every
                transition of the batch was attempted
        """
        run_batch(batch, self.transition_issue)

    @handle_remote_errors("Jira agile API")
    def move_issues_to_backlog(self, keys: list[str]) -> None:
        """
        Move issues out of their sprint into the backlog.

        Args:
            keys: Issue keys, an empty list is a no-op
        """
        if not keys:
            return
        self.jira.post("rest/agile/1.0/backlog/issue", data={"issues": keys})
        for key in keys:
            click.echo(f"Moved {key} to backlog")
