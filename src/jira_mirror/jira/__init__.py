"""Jira API client for jira-mirror.

The client is split into mixins by concern and assembled here, so each
mixin can be tested against a mocked ``atlassian.Jira`` instance.
"""

from .client import JiraClient
from .config import CustomFieldsConfig, JiraConfig
from .issues import IssueDraft, IssuesMixin
from .search import SearchMixin
from .sprints import SprintsMixin
from .transitions import IssueTransition, TransitionsMixin


class JiraFetcher(SearchMixin, SprintsMixin, IssuesMixin, TransitionsMixin):
    """Jira client combining all operations used by jira-mirror."""

    pass


__all__ = [
    "CustomFieldsConfig",
    "IssueDraft",
    "IssueTransition",
    "JiraClient",
    "JiraConfig",
    "JiraFetcher",
]
