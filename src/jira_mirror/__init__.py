__version__ = "0.3.0"

# Imported first so every module logger is a ContextualLogger
from .logging_config import log_operation, setup_logger  # noqa: E402
from .cli import cli, main  # noqa: E402

__all__ = ["cli", "main", "__version__", "setup_logger", "log_operation"]
