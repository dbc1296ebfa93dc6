"""Module for Jira boards and sprints operations."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any

from ..exceptions import RefreshCancelledError, RemoteError
from ..models import Sprint, warn_if_multiple_active
from ..utils.decorators import handle_remote_errors
from .client import JiraClient
from .constants import SPRINT_STATES

logger = logging.getLogger("jira-mirror.jira")


class SprintsMixin(JiraClient):
    """Mixin for Jira boards and sprints operations."""

    @handle_remote_errors("Jira agile API")
    def get_board_id(self, project: str) -> int:
        """
        Resolve the board of a project.

        Args:
            project: Project key

        Returns:
            Id of the first board associated with the project

        Raises:
            RemoteError: If the project has no board
        """
        response = self.jira.get_all_agile_boards(project_key=project)
        boards = response.get("values", []) if isinstance(response, dict) else []
        if not boards:
            raise RemoteError(f"No board found for project {project}")
        return int(boards[0]["id"])

    @handle_remote_errors("Jira agile API")
    def _get_sprints_for_board(
        self, board_id: int, cancel: threading.Event | None = None
    ) -> list[dict[str, Any]]:
        sprints: list[dict[str, Any]] = []
        start = 0
        while True:
            if cancel is not None and cancel.is_set():
                raise RefreshCancelledError(f"sprint listing cancelled: {board_id}")
            response = self.jira.get_all_sprints_from_board(
                board_id=board_id, state=SPRINT_STATES, start=start, limit=50
            )
            if not isinstance(response, dict):
                msg = (
                    "Unexpected return value type from "
                    f"`jira.get_all_sprints_from_board`: {type(response)}"
                )
                logger.error(msg)
                raise RemoteError(msg)

            values = response.get("values", [])
            sprints.extend(values)
            start += len(values)
            if not values or response.get("isLast", True):
                return sprints

    def list_sprints(
        self,
        board_id: int,
        keyword: str | None = None,
        cancel: threading.Event | None = None,
    ) -> list[Sprint]:
        """
        List the active and future sprints of a board.

        Args:
            board_id: Board ID
            keyword: Case-sensitive substring a sprint name must contain.
                None uses the configured sprint keyword, "" keeps all sprints.
            cancel: Optional event checked before every page

        Returns:
            Matching sprints in board order

        Raises:
            RemoteError: If the board cannot be read
            RefreshCancelledError: If ``cancel`` is set
        """
        if keyword is None:
            keyword = self.config.sprint_keyword

        sprints = [
            Sprint.from_api_response(raw)
            for raw in self._get_sprints_for_board(board_id, cancel)
            if keyword in (raw.get("name") or "")
        ]
        warn_if_multiple_active(sprints)
        return sprints

    @handle_remote_errors("Jira agile API")
    def create_sprint(self, name: str, month: int, day: int, board_id: int) -> Sprint:
        """
        Create a sprint named ``"<name> <month>/<day>"``.

        The sprint starts at local midnight of the given day in the current
        year and ends after the configured sprint duration.

        Raises:
            ValueError: If month and day do not form a valid date
        """
        now = datetime.now().astimezone()
        start_date = datetime(now.year, month, day).astimezone()
        end_date = start_date + timedelta(days=self.config.sprint_duration + 1)

        sprint = self.jira.create_sprint(
            name=f"{name} {month}/{day}",
            board_id=board_id,
            start_date=start_date.isoformat(timespec="milliseconds"),
            end_date=end_date.isoformat(timespec="milliseconds"),
        )
        logger.info(f"Sprint created: {sprint}")
        return Sprint.from_api_response(sprint if isinstance(sprint, dict) else {})
