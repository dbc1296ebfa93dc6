class JiraMirrorError(Exception):
    """Base exception for jira-mirror errors."""

    pass


class ConfigMissingError(JiraMirrorError):
    """Raised when the configuration file does not exist yet."""

    def __init__(self, path: str) -> None:
        super().__init__(f"configuration missing: {path}")
        self.path = path


class RemoteError(JiraMirrorError):
    """Raised when Jira answers with a non-success status.

    The raw response body is kept so it can be shown to the user verbatim.
    """

    def __init__(self, message: str, body: str | None = None) -> None:
        super().__init__(body or message)
        self.message = message
        self.body = body


class AuthenticationError(RemoteError):
    """Raised when Jira API authentication fails (401/403)."""

    pass


class SnapshotCorruptError(JiraMirrorError):
    """Raised when the snapshot file cannot be deserialized."""

    pass


class DomainMismatchError(JiraMirrorError):
    """Raised when user input references data the snapshot does not contain."""

    pass


class RefreshCancelledError(JiraMirrorError):
    """Raised when a refresh is abandoned before it completed."""

    pass
