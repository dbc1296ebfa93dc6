"""Configuration module for Jira API interactions."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values, set_key

from ..exceptions import ConfigMissingError
from ..utils.env import getenv, is_env_ssl_verify, split_list

CONFIG_PATH_ENV = "JIRA_MIRROR_CONFIG"
DEFAULT_SPRINT_DURATION = 14
# One row per issue, filled with str.format
DEFAULT_STANDUP_TEMPLATE = "- {key} {summary} ({status})"


def default_config_path() -> Path:
    """Location of the config file, ``~/.config/jira-mirror`` by default."""
    override = os.getenv(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "jira-mirror"


@dataclass
class CustomFieldsConfig:
    """Project specific custom field ids (e.g. ``customfield_10014``)."""

    epics_field: str  # Epic link
    sprints_field: str  # Sprint membership
    story_points_field: str  # Story point estimate
    epic_name_field: str | None = None  # Epic name, needed when creating epics
    parent_link_field: str | None = None  # Initiative link of an epic


@dataclass
class JiraConfig:
    """Jira API configuration.

    Authentication uses basic auth (username plus API token or password).
    """

    url: str  # Base URL for Jira
    username: str
    api_token: str
    project: str  # Key of the mirrored project
    issue_type: str  # Issue type used for new issues, e.g. "Story"
    custom_fields: CustomFieldsConfig
    labels: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    sprint_keyword: str = ""  # Only sprints containing this substring are mirrored
    sprint_duration: int = DEFAULT_SPRINT_DURATION  # Days
    ssl_verify: bool = True
    sprint_standup_template: str = DEFAULT_STANDUP_TEMPLATE
    epic_standup_template: str = DEFAULT_STANDUP_TEMPLATE
    copy_command: str = ""  # Receives the standup message on stdin

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "JiraConfig":
        """Load the configuration from its dotenv file.

        Environment variables of the same name override file values.

        Args:
            path: Config file location, defaults to ``default_config_path()``.

        Returns:
            The loaded configuration.

        Raises:
            ConfigMissingError: If the config file does not exist
            ValueError: If required values are missing or invalid
        """
        config_path = Path(path) if path else default_config_path()
        if not config_path.exists():
            raise ConfigMissingError(str(config_path))
        return cls.from_values(dotenv_values(config_path))

    @classmethod
    def from_values(cls, env: dict[str, str | None]) -> "JiraConfig":
        """Build and validate a configuration from raw key-value pairs."""
        required = {
            "JIRA_URL": getenv(env, "JIRA_URL"),
            "JIRA_USERNAME": getenv(env, "JIRA_USERNAME"),
            "JIRA_API_TOKEN": getenv(env, "JIRA_API_TOKEN"),
            "JIRA_PROJECT": getenv(env, "JIRA_PROJECT"),
            "JIRA_ISSUE_TYPE": getenv(env, "JIRA_ISSUE_TYPE"),
            "JIRA_EPICS_FIELD": getenv(env, "JIRA_EPICS_FIELD"),
            "JIRA_SPRINTS_FIELD": getenv(env, "JIRA_SPRINTS_FIELD"),
            "JIRA_STORY_POINTS_FIELD": getenv(env, "JIRA_STORY_POINTS_FIELD"),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            error_msg = f"Missing required configuration: {', '.join(missing)}"
            raise ValueError(error_msg)

        raw_duration = getenv(env, "JIRA_SPRINT_DURATION", str(DEFAULT_SPRINT_DURATION))
        try:
            sprint_duration = int(raw_duration or DEFAULT_SPRINT_DURATION)
        except ValueError as e:
            msg = f"JIRA_SPRINT_DURATION must be a number of days, got {raw_duration!r}"
            raise ValueError(msg) from e

        return cls(
            url=required["JIRA_URL"] or "",
            username=required["JIRA_USERNAME"] or "",
            api_token=required["JIRA_API_TOKEN"] or "",
            project=required["JIRA_PROJECT"] or "",
            issue_type=required["JIRA_ISSUE_TYPE"] or "",
            custom_fields=CustomFieldsConfig(
                epics_field=required["JIRA_EPICS_FIELD"] or "",
                sprints_field=required["JIRA_SPRINTS_FIELD"] or "",
                story_points_field=required["JIRA_STORY_POINTS_FIELD"] or "",
                epic_name_field=getenv(env, "JIRA_EPIC_NAME_FIELD"),
                parent_link_field=getenv(env, "JIRA_PARENT_LINK_FIELD"),
            ),
            labels=split_list(getenv(env, "JIRA_LABELS")),
            components=split_list(getenv(env, "JIRA_COMPONENTS")),
            sprint_keyword=getenv(env, "JIRA_SPRINT_KEYWORD", "") or "",
            sprint_duration=sprint_duration,
            ssl_verify=is_env_ssl_verify(env, "JIRA_SSL_VERIFY"),
            sprint_standup_template=getenv(env, "JIRA_SPRINT_STANDUP_TEMPLATE")
            or DEFAULT_STANDUP_TEMPLATE,
            epic_standup_template=getenv(env, "JIRA_EPIC_STANDUP_TEMPLATE")
            or DEFAULT_STANDUP_TEMPLATE,
            copy_command=getenv(env, "JIRA_COPY_COMMAND", "") or "",
        )

    def to_values(self) -> dict[str, str]:
        """Key-value form of the configuration, as written to the file."""
        values = {
            "JIRA_URL": self.url,
            "JIRA_USERNAME": self.username,
            "JIRA_API_TOKEN": self.api_token,
            "JIRA_PROJECT": self.project,
            "JIRA_ISSUE_TYPE": self.issue_type,
            "JIRA_LABELS": ",".join(self.labels),
            "JIRA_COMPONENTS": ",".join(self.components),
            "JIRA_SPRINT_KEYWORD": self.sprint_keyword,
            "JIRA_SPRINT_DURATION": str(self.sprint_duration),
            "JIRA_EPICS_FIELD": self.custom_fields.epics_field,
            "JIRA_SPRINTS_FIELD": self.custom_fields.sprints_field,
            "JIRA_STORY_POINTS_FIELD": self.custom_fields.story_points_field,
            "JIRA_SSL_VERIFY": str(self.ssl_verify).lower(),
            "JIRA_SPRINT_STANDUP_TEMPLATE": self.sprint_standup_template,
            "JIRA_EPIC_STANDUP_TEMPLATE": self.epic_standup_template,
        }
        if self.custom_fields.epic_name_field:
            values["JIRA_EPIC_NAME_FIELD"] = self.custom_fields.epic_name_field
        if self.custom_fields.parent_link_field:
            values["JIRA_PARENT_LINK_FIELD"] = self.custom_fields.parent_link_field
        if self.copy_command:
            values["JIRA_COPY_COMMAND"] = self.copy_command
        return values

    def write(self, path: Path | str | None = None) -> Path:
        """Persist the configuration, creating the config directory if needed."""
        config_path = Path(path) if path else default_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.touch(mode=0o600, exist_ok=True)
        for key, value in self.to_values().items():
            set_key(config_path, key, value)
        return config_path
