"""Base client module for Jira API interactions."""

import logging
import threading
from typing import Any

from atlassian import Jira

from .config import JiraConfig
from .constants import DEFAULT_PAGE_SIZE
from .utils import is_atlassian_cloud_url

logger = logging.getLogger("jira-mirror.jira")


class JiraClient:
    """Base client for Jira API interactions."""

    def __init__(self, config: JiraConfig, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        """Initialize the Jira client with a given configuration.

        Args:
            config: Jira configuration object.
            page_size: Number of issues requested per search page.
        """
        self.config = config
        self.page_size = page_size

        self.jira = Jira(
            url=self.config.url,
            username=self.config.username,
            password=self.config.api_token,
            cloud=self.is_cloud,
            verify_ssl=self.config.ssl_verify,
        )

        # Cache for the authenticated user, resolved on first use
        self._current_user: dict[str, Any] | None = None
        self._user_lock = threading.Lock()

    @property
    def is_cloud(self) -> bool:
        """Check if this is a cloud instance."""
        return is_atlassian_cloud_url(self.config.url)

    def current_user(self) -> dict[str, Any]:
        """Return the authenticated user, fetched once per client."""
        with self._user_lock:
            if self._current_user is None:
                user = self.jira.myself()
                if not isinstance(user, dict):
                    msg = (
                        "Unexpected return value type from `jira.myself`: "
                        f"{type(user)}"
                    )
                    logger.error(msg)
                    raise TypeError(msg)
                self._current_user = user
            return self._current_user

    def user_reference(self) -> dict[str, str]:
        """Reference to the current user as accepted in issue payloads.

        Cloud identifies users by accountId, Server/DC by name.
        """
        user = self.current_user()
        if self.is_cloud:
            return {"accountId": user.get("accountId", "")}
        return {"name": user.get("name", "")}
