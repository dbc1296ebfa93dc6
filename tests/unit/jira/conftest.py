"""
Test fixtures for Jira unit tests.

The ``atlassian.Jira`` instance of every client is replaced by a MagicMock
so each mixin can be exercised without network access.
"""

from unittest.mock import MagicMock, patch

import pytest

from jira_mirror.jira import CustomFieldsConfig, JiraConfig, JiraFetcher
from tests.utils.factories import SPRINTS_FIELD

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def jira_config_factory():
    """
    Factory for creating JiraConfig instances with customizable options.

    Example:
        def test_config(jira_config_factory):
            config = jira_config_factory(url="https://jira.example.com")
            assert not JiraFetcher(config).is_cloud
    """

    def _create_config(**overrides):
        defaults = {
            "url": "https://test.atlassian.net",
            "username": "test@example.com",
            "api_token": "test-api-token",
            "project": "KONG",
            "issue_type": "Story",
            "custom_fields": CustomFieldsConfig(
                epics_field="customfield_10014",
                sprints_field=SPRINTS_FIELD,
                story_points_field="customfield_10016",
                epic_name_field="customfield_10011",
                parent_link_field="customfield_10018",
            ),
            "labels": ["team-kong"],
            "components": ["cli"],
            "sprint_keyword": "Kong",
        }
        return JiraConfig(**{**defaults, **overrides})

    return _create_config


@pytest.fixture
def mock_config(jira_config_factory):
    """Standard JiraConfig for tests that need no customization."""
    return jira_config_factory()


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def mock_atlassian_jira():
    """Mock of the Atlassian Jira client with the current user preset."""
    mock_jira = MagicMock()
    mock_jira.myself.return_value = {
        "accountId": "abc-123",
        "name": "tester",
        "displayName": "Test User",
    }
    return mock_jira


@pytest.fixture
def jira_fetcher_factory(mock_atlassian_jira, jira_config_factory):
    """Factory creating JiraFetcher instances bound to the shared mock."""

    def _create(page_size=None, **config_overrides):
        config = jira_config_factory(**config_overrides)
        with patch("jira_mirror.jira.client.Jira", return_value=mock_atlassian_jira):
            if page_size is None:
                return JiraFetcher(config=config)
            return JiraFetcher(config=config, page_size=page_size)

    return _create


@pytest.fixture
def jira_fetcher(jira_fetcher_factory):
    """JiraFetcher with the default configuration and page size."""
    return jira_fetcher_factory()
