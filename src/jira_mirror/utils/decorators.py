import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import requests
from requests.exceptions import HTTPError

from jira_mirror.exceptions import AuthenticationError, RemoteError

logger = logging.getLogger("jira-mirror.jira")

F = TypeVar("F", bound=Callable[..., Any])


def _response_body(response: requests.Response | None) -> str | None:
    if response is None:
        return None
    try:
        return response.text
    except (AttributeError, ValueError):
        return None


def handle_remote_errors(service_name: str = "Jira API") -> Callable[[F], F]:
    """
    Decorator translating HTTP failures of the Jira client into RemoteError.

    The raw response body is carried on the raised error so callers can
    surface it verbatim. Nothing is retried here.

    Args:
        service_name: Name of the service for error logging.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            operation_name = getattr(func, "__name__", "API operation")
            try:
                return func(self, *args, **kwargs)
            except HTTPError as http_err:
                response = http_err.response
                body = _response_body(response)
                if response is not None and response.status_code in [401, 403]:
                    error_msg = (
                        f"Authentication failed for {service_name} "
                        f"({response.status_code}). "
                        "Token may be expired or invalid. Please verify credentials."
                    )
                    logger.error(error_msg)
                    raise AuthenticationError(error_msg, body) from http_err
                logger.error(
                    f"HTTP error during {operation_name}: {http_err}", exc_info=False
                )
                raise RemoteError(str(http_err), body) from http_err
            except requests.RequestException as e:
                logger.error(f"Network error during {operation_name}: {str(e)}")
                raise RemoteError(f"{service_name} unreachable: {str(e)}") from e

        return wrapper  # type: ignore[return-value]

    return decorator
