"""Utility functions for Jira operations."""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TypeVar
from urllib.parse import urlparse

from .constants import MAX_BATCH_WORKERS

logger = logging.getLogger("jira-mirror.jira")

T = TypeVar("T")
R = TypeVar("R")


def escape_jql_string(value: str) -> str:
    """
    Escapes characters reserved within JQL string literals ('\\', '"')
    and encloses the result in double quotes.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def jql_list(values: Sequence[str]) -> str:
    """Render values as a quoted JQL list, e.g. ``("a", "b")``."""
    return "(" + ", ".join(escape_jql_string(value) for value in values) + ")"


def is_atlassian_cloud_url(url: str) -> bool:
    """Check whether a URL points at an Atlassian Cloud site."""
    if not url:
        return False
    hostname = (urlparse(url).hostname or "").lower()
    return hostname.endswith(".atlassian.net") or hostname.endswith(".jira.com")


def run_batch(items: Sequence[T], func: Callable[[T], R]) -> list[R]:
    """
    Run ``func`` for every item concurrently and wait for all of them.

    Siblings are never cancelled when one task fails. After every task has
    finished, the first failure in input order is raised; otherwise the
    results are returned in input order.

    Args:
        items: Work items, one task each
        func: Callable applied to each item

    Returns:
        Results in the order of ``items``
    """
    if not items:
        return []

    workers = min(len(items), MAX_BATCH_WORKERS)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(func, item) for item in items]
        wait(futures)

    for future in futures:
        error = future.exception()
        if error is not None:
            raise error
    return [future.result() for future in futures]
