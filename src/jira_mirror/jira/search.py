"""Module for Jira search operations.

Searches use the offset based search API (``startAt`` / ``maxResults`` /
``total``) and always fetch every page. A failure on any page aborts the
whole search: partial result sets are never returned.
"""

import logging
import threading
from typing import Any

from ..exceptions import RefreshCancelledError, RemoteError
from ..models import Issue, issues_from_api_response
from ..utils.decorators import handle_remote_errors
from .client import JiraClient
from .constants import (
    BUG_ISSUE_TYPE,
    CLOSED_STATUS,
    DEFAULT_SEARCH_FIELDS,
    EPIC_ISSUE_TYPE,
    INITIATIVE_ISSUE_TYPE,
)
from .utils import escape_jql_string, jql_list

logger = logging.getLogger("jira-mirror.jira")


class SearchMixin(JiraClient):
    """Mixin providing search operations for Jira issues."""

    def _search_fields(self) -> str:
        sprints_field = self.config.custom_fields.sprints_field
        return ",".join([*DEFAULT_SEARCH_FIELDS, sprints_field])

    @handle_remote_errors("Jira search API")
    def search(self, jql: str, cancel: threading.Event | None = None) -> list[Issue]:
        """
        Search for issues using JQL, following pagination to the end.

        Args:
            jql: JQL query string
            cancel: Optional event; when set the search stops before the
                next page request

        Returns:
            All matching issues in the order returned by Jira. Issues of
            the result share one workflow instance.

        Raises:
            RemoteError: If any page request fails
            RefreshCancelledError: If ``cancel`` is set
        """
        raw_issues: list[dict[str, Any]] = []
        start = 0
        fields = self._search_fields()

        while True:
            if cancel is not None and cancel.is_set():
                raise RefreshCancelledError(f"search cancelled: {jql}")

            response = self.jira.jql(
                jql,
                fields=fields,
                start=start,
                limit=self.page_size,
                expand="transitions",
            )
            if not isinstance(response, dict):
                msg = f"Unexpected return value type from `jira.jql`: {type(response)}"
                logger.error(msg)
                raise RemoteError(msg)

            page = response.get("issues") or []
            raw_issues.extend(page)
            start += len(page)

            total = int(response.get("total") or 0)
            logger.debug(f"Fetched {start}/{total} issues for '{jql}'")
            if not page or start >= total:
                break

        try:
            return issues_from_api_response(
                raw_issues, sprints_field=self.config.custom_fields.sprints_field
            )
        except ValueError as e:
            raise RemoteError(f"Malformed issue in search result: {e}") from e

    def _base_conditions(self, project: str) -> list[str]:
        return [
            f"project = {escape_jql_string(project)}",
            f"status != {escape_jql_string(CLOSED_STATUS)}",
        ]

    def _label_condition(self) -> list[str]:
        if not self.config.labels:
            return []
        return [f"labels IN {jql_list(self.config.labels)}"]

    def list_issues(
        self, project: str, cancel: threading.Event | None = None
    ) -> list[Issue]:
        """List open issues of the configured type assigned to the current user."""
        conditions = [
            *self._base_conditions(project),
            f"issuetype = {escape_jql_string(self.config.issue_type)}",
            "assignee = currentUser()",
        ]
        return self.search(" AND ".join(conditions), cancel=cancel)

    def list_epics(
        self, project: str, cancel: threading.Event | None = None
    ) -> list[Issue]:
        """List open epics of a project, restricted to the configured labels."""
        conditions = [
            *self._base_conditions(project),
            f"issuetype = {escape_jql_string(EPIC_ISSUE_TYPE)}",
            *self._label_condition(),
        ]
        return self.search(" AND ".join(conditions), cancel=cancel)

    def list_initiatives(
        self, project: str, cancel: threading.Event | None = None
    ) -> list[Issue]:
        """List open initiatives of a project, restricted to the configured labels."""
        conditions = [
            *self._base_conditions(project),
            f"issuetype = {escape_jql_string(INITIATIVE_ISSUE_TYPE)}",
            *self._label_condition(),
        ]
        return self.search(" AND ".join(conditions), cancel=cancel)

    def list_sprint_issues(self, cancel: threading.Event | None = None) -> list[Issue]:
        """List the current user's issues in the open sprints of the project."""
        conditions = [
            *self._base_conditions(self.config.project),
            f"issuetype IN {jql_list([self.config.issue_type, BUG_ISSUE_TYPE])}",
            "assignee = currentUser()",
            "sprint in openSprints()",
        ]
        return self.search(" AND ".join(conditions), cancel=cancel)
