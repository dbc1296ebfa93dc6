"""Environment variable utility functions for jira-mirror."""

import os


def getenv(
    env: dict[str, str | None], env_var_name: str, default: str | None = None
) -> str | None:
    """Retrieve a configuration value.

    The process environment wins over the values read from the config file,
    so a single invocation can be pointed elsewhere without editing the file.

    Args:
        env: Values loaded from the config file.
        env_var_name: The name of the variable to retrieve.
        default: Value returned when neither source defines the variable.

    Returns:
        The value if found, otherwise ``default``.
    """
    value = os.getenv(env_var_name)
    if value is not None:
        return value
    value = env.get(env_var_name)
    if value is None or value == "":
        return default
    return value


def is_env_ssl_verify(
    env: dict[str, str | None], env_var_name: str, default: str = "true"
) -> bool:
    """Check SSL verification setting with secure defaults.

    Defaults to true unless explicitly set to false values.
    """
    value = getenv(env, env_var_name, default) or default
    return value.lower() not in ("false", "0", "no")


def split_list(value: str | None) -> list[str]:
    """Split a comma-separated value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
