"""
The snapshot: the complete cached mirror of Jira state, persisted as one unit.
"""

from typing import Any

from pydantic import Field

from .base import ApiModel
from .issue import Issue
from .sprint import Sprint


class Snapshot(ApiModel):
    """
    Model representing one cached copy of the mirrored Jira data.

    ``issue_by_key`` and ``sprints_by_name`` are derived indices. They are
    rebuilt by ``set_issues`` and ``set_sprints`` and never edited in place.
    """

    timestamp: int = 0
    issues: list[Issue] = Field(default_factory=list)
    issue_by_key: dict[str, Issue] = Field(default_factory=dict)
    epics: list[Issue] = Field(default_factory=list)
    initiatives: list[Issue] = Field(default_factory=list)
    sprint_issues: list[Issue] = Field(default_factory=list)
    board_id: int = 0
    sprints: list[Sprint] = Field(default_factory=list)
    sprints_by_name: dict[str, Sprint] = Field(default_factory=dict)
    last_issue_created: str = ""

    def set_issues(self, issues: list[Issue]) -> None:
        self.issues = issues
        self.issue_by_key = {issue.key: issue for issue in issues}

    def set_sprints(self, sprints: list[Sprint]) -> None:
        self.sprints = sprints
        self.sprints_by_name = {sprint.name: sprint for sprint in sprints}

    def to_simplified_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "issues": len(self.issues),
            "epics": len(self.epics),
            "initiatives": len(self.initiatives),
            "sprint_issues": len(self.sprint_issues),
            "board_id": self.board_id,
            "sprints": [sprint.name for sprint in self.sprints],
        }
