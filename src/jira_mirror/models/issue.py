"""
Jira issue models.

Issues are reduced to the handful of fields the snapshot needs. The
workflow (legal transitions and the rank of every status) is per project,
so all issues of one fetch batch share a single Workflow instance.
"""

import logging
import re
from typing import Any

from pydantic import Field

from .base import ApiModel

logger = logging.getLogger("jira-mirror.models")

STATUS_CATEGORY_DONE = "done"

_SPRINT_ID_PATTERN = re.compile(r"\bid=(\d+)")


def status_acronym(name: str) -> str:
    """Lower-cased initials of a status name, e.g. "In Progress" -> "ip"."""
    return "".join(word[0] for word in name.lower().split())


class Status(ApiModel):
    """
    Model representing the current status of an issue.
    """

    name: str = ""
    acronym: str = ""
    is_done: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Status":
        if not data:
            return cls()

        name = data.get("name") or ""
        category = data.get("statusCategory") or {}
        return cls(
            name=name,
            acronym=status_acronym(name),
            is_done=category.get("key") == STATUS_CATEGORY_DONE,
        )


class Transition(ApiModel):
    """
    Model representing a legal workflow transition.

    ``name`` and ``description`` describe the target status.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    acronym: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Transition":
        if not data:
            return cls()

        target = data.get("to") or {}
        name = target.get("name") or data.get("name") or ""
        return cls(
            id=str(data.get("id") or ""),
            name=name,
            description=target.get("description") or "",
            acronym=status_acronym(name),
        )


class Workflow(ApiModel):
    """
    Ordered transitions of a project with their derived indices.
    """

    transitions: list[Transition] = Field(default_factory=list)
    by_acronym: dict[str, Transition] = Field(default_factory=dict)
    rank: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Workflow":
        """
        Build a workflow from the ``transitions`` of one raw issue.
        """
        raw_transitions = (data or {}).get("transitions") or []
        transitions = [
            Transition.from_api_response(raw)
            for raw in raw_transitions
            if isinstance(raw, dict)
        ]
        return cls(
            transitions=transitions,
            by_acronym={t.acronym: t for t in transitions},
            rank={t.name: i for i, t in enumerate(transitions)},
        )


def _sprint_id(value: Any) -> int:
    """Extract a sprint id from the sprint custom field.

    Cloud returns a list of sprint objects, older servers a list of
    serialized strings. The active sprint wins, otherwise the last one.
    """
    if not value:
        return 0
    entries = value if isinstance(value, list) else [value]

    chosen: Any = entries[-1]
    for entry in entries:
        if isinstance(entry, dict) and entry.get("state") == "active":
            chosen = entry

    if isinstance(chosen, dict):
        return int(chosen.get("id") or 0)
    if isinstance(chosen, int):
        return chosen
    match = _SPRINT_ID_PATTERN.search(str(chosen))
    return int(match.group(1)) if match else 0


class Issue(ApiModel):
    """
    Model representing a Jira issue as kept in the snapshot.
    """

    key: str = ""
    summary: str = ""
    priority: str = ""
    status: Status = Field(default_factory=Status)
    sprint: int = 0
    workflow: Workflow = Field(default_factory=Workflow)

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Issue":
        """
        Create an Issue from a raw Jira issue.

        Args:
            data: The raw issue
            **kwargs:
                workflow: Workflow shared by the whole fetch batch
                sprints_field: Custom field id holding sprint membership

        Raises:
            ValueError: If the issue has no fields or no summary
        """
        key = data.get("key") or ""
        fields = data.get("fields")
        if not fields:
            raise ValueError(f"issue {key} has no fields")

        summary = fields.get("summary")
        if not summary:
            raise ValueError(f"issue {key} has an empty summary")

        priority = fields.get("priority") or {}
        sprints_field = kwargs.get("sprints_field")
        workflow = kwargs.get("workflow")
        if workflow is None:
            workflow = Workflow.from_api_response(data)

        return cls(
            key=key,
            summary=summary,
            priority=priority.get("name") or "",
            status=Status.from_api_response(fields.get("status") or {}),
            sprint=_sprint_id(fields.get(sprints_field)) if sprints_field else 0,
            workflow=workflow,
        )

    @property
    def transitions(self) -> list[Transition]:
        return self.workflow.transitions

    @property
    def transitions_by_acronym(self) -> dict[str, Transition]:
        return self.workflow.by_acronym

    @property
    def rank(self) -> dict[str, int]:
        return self.workflow.rank


def issues_from_api_response(
    raw_issues: list[dict[str, Any]], sprints_field: str | None = None
) -> list[Issue]:
    """
    Convert one fetch batch, sharing a single workflow across all issues.

    The workflow is taken from the first raw issue carrying transitions.
    """
    workflow = Workflow()
    for raw in raw_issues:
        if raw.get("transitions"):
            workflow = Workflow.from_api_response(raw)
            break

    return [
        Issue.from_api_response(raw, workflow=workflow, sprints_field=sprints_field)
        for raw in raw_issues
    ]


def sort_issues(issues: list[Issue]) -> list[Issue]:
    """Stable sort by workflow position of the status; unknown statuses last."""

    def position(issue: Issue) -> int:
        return issue.rank.get(issue.status.name, len(issue.rank))

    return sorted(issues, key=position)


def workflow_transitions(issues: list[Issue]) -> list[Transition]:
    """Transitions of the batch, empty when there are no issues."""
    if not issues:
        return []
    return issues[0].transitions
