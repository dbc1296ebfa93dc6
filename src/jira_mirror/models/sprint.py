"""
Jira sprint models.
"""

import logging
from datetime import datetime
from typing import Any

import dateutil.parser

from .base import ApiModel

logger = logging.getLogger("jira-mirror.models")

SPRINT_STATE_ACTIVE = "active"
SPRINT_STATE_FUTURE = "future"
SPRINT_STATE_CLOSED = "closed"


class Sprint(ApiModel):
    """
    Model representing a Jira sprint.
    """

    id: int = 0
    name: str = ""
    state: str = SPRINT_STATE_FUTURE
    end_date: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Sprint":
        """
        Create a Sprint from a Jira agile API response.
        """
        if not data:
            return cls()

        end_date = None
        raw_end_date = data.get("endDate")
        if raw_end_date:
            try:
                end_date = dateutil.parser.isoparse(raw_end_date)
            except (ValueError, TypeError) as e:
                logger.debug(f"Could not parse sprint end date '{raw_end_date}': {e}")

        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            state=data.get("state") or SPRINT_STATE_FUTURE,
            end_date=end_date,
        )

    @property
    def is_active(self) -> bool:
        return self.state == SPRINT_STATE_ACTIVE


def warn_if_multiple_active(sprints: list[Sprint]) -> bool:
    """
    Log a warning when more than one sprint is marked active.

    Boards with parallel sprints enabled report several active sprints;
    all of them are kept.

    Returns:
        True if more than one sprint is active
    """
    active = [sprint.name for sprint in sprints if sprint.is_active]
    if len(active) > 1:
        logger.warning(f"More than one active sprint: {', '.join(active)}")
        return True
    return False
