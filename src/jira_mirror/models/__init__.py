"""
Data models for jira-mirror.

This package provides Pydantic models for the reduced Jira data kept in
the local snapshot.
"""

from .base import ApiModel
from .issue import (
    Issue,
    Status,
    Transition,
    Workflow,
    issues_from_api_response,
    sort_issues,
    status_acronym,
    workflow_transitions,
)
from .snapshot import Snapshot
from .sprint import Sprint, warn_if_multiple_active

__all__ = [
    "ApiModel",
    "Issue",
    "Snapshot",
    "Sprint",
    "Status",
    "Transition",
    "Workflow",
    "issues_from_api_response",
    "sort_issues",
    "status_acronym",
    "workflow_transitions",
    "warn_if_multiple_active",
]
