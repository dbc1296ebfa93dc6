"""Tests for the configuration value helpers."""

import os
from unittest.mock import patch

import pytest

from jira_mirror.utils.env import getenv, is_env_ssl_verify, split_list


class TestGetenv:
    def test_file_value(self):
        with patch.dict(os.environ, {}, clear=True):
            assert getenv({"JIRA_PROJECT": "KONG"}, "JIRA_PROJECT") == "KONG"

    def test_process_environment_wins(self):
        with patch.dict(os.environ, {"JIRA_PROJECT": "GORILLA"}, clear=True):
            assert getenv({"JIRA_PROJECT": "KONG"}, "JIRA_PROJECT") == "GORILLA"

    @pytest.mark.parametrize("value", [None, ""])
    def test_default_for_missing_or_empty(self, value):
        with patch.dict(os.environ, {}, clear=True):
            assert getenv({"JIRA_LABELS": value}, "JIRA_LABELS", "none") == "none"


class TestSslVerify:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, True),
            ("true", True),
            ("False", False),
            ("0", False),
            ("no", False),
            ("anything", True),
        ],
    )
    def test_is_env_ssl_verify(self, value, expected):
        with patch.dict(os.environ, {}, clear=True):
            result = is_env_ssl_verify({"JIRA_SSL_VERIFY": value}, "JIRA_SSL_VERIFY")

        assert result is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, []),
        ("", []),
        ("team-kong", ["team-kong"]),
        (" team-kong , cli,, ", ["team-kong", "cli"]),
    ],
)
def test_split_list(value, expected):
    assert split_list(value) == expected
