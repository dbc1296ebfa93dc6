"""
Utility functions for jira-mirror.
"""

from .decorators import handle_remote_errors
from .env import getenv, is_env_ssl_verify, split_list

__all__ = [
    "getenv",
    "handle_remote_errors",
    "is_env_ssl_verify",
    "split_list",
]
