"""Contextual logging configuration for jira-mirror."""

import logging
import os
import sys
import threading
import time
import types
import uuid
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, cast

# Default logger configuration
DEFAULT_LOGGER_NAME = "jira-mirror"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_DIRECTORY = str(Path.home() / ".cache" / "jira-mirror")
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

# Operation context of the current thread, shared by all contextual loggers
_context_data = threading.local()


def get_context() -> dict[str, Any]:
    """Return a copy of the operation context of the current thread."""
    return dict(getattr(_context_data, "data", {}))


class ContextualLogger(logging.Logger):
    """Logger that maintains context between related operations."""

    def _get_context_str(self) -> str:
        """Get the current context string."""
        context_data = getattr(_context_data, "data", {})
        if not context_data:
            return "no-context"

        # Format context as: operation=X,trace_id=Y,...
        return ",".join(f"{k}={v}" for k, v in context_data.items())

    def _log(
        self,
        level: int,
        msg: object,
        args: tuple[object, ...] | Mapping[str, object],
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
    ) -> None:
        """Overrides _log method to include context."""
        if extra is None:
            extra = {}

        if "context" not in extra:
            extra = dict(extra)
            extra["context"] = self._get_context_str()

        super()._log(level, msg, args, exc_info, extra, stack_info, stacklevel + 1)

    def set_context(self, **kwargs: Any) -> None:
        """
        Sets context values for the logger.

        Args:
            **kwargs: Key-value pairs to add to the context
        """
        if not hasattr(_context_data, "data"):
            _context_data.data = {}
        _context_data.data.update(kwargs)

    def clear_context(self) -> None:
        """Removes all context data from the logger."""
        _context_data.data = {}


class ContextFilter(logging.Filter):
    """Fills in the context field for records of plain loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = "no-context"
        return True


class LoggingContextManager:
    """Context manager for logging with tracking."""

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        """
        Initializes the logging context manager.

        Args:
            logger: Logger, contextual or plain
            operation: Name of the operation being executed
            **context: Additional context data
        """
        self.logger = logger
        self.operation = operation
        self.context = context.copy()
        self.start_time = time.time()
        self.trace_id = context.get("trace_id", str(uuid.uuid4())[:8])
        self.old_context: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContextManager":
        """Starts the logging context."""
        if isinstance(self.logger, ContextualLogger):
            self.old_context = get_context()
            self.context["operation"] = self.operation
            self.context["trace_id"] = self.trace_id
            self.logger.set_context(**self.context)

        self.logger.debug(f"Operation started: {self.operation}")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Finalizes the logging context."""
        duration = time.time() - self.start_time

        if exc_type:
            self.logger.error(
                f"Operation failed: {self.operation} after {duration:.3f}s - {exc_val}"
            )
        else:
            self.logger.info(
                f"Operation completed: {self.operation} in {duration:.3f}s"
            )

        if isinstance(self.logger, ContextualLogger):
            _context_data.data = self.old_context


# Module loggers are created at import time, so the class is set up front
logging.setLoggerClass(ContextualLogger)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    log_to_file: bool = False,
    log_dir: str | None = None,
    log_format: str | None = None,
) -> ContextualLogger:
    """
    Configures and returns a contextual logger.

    Calling it again for the same name replaces the handlers instead of
    stacking new ones.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, etc.)
        log_to_file: If True, logs to a rotating file as well
        log_dir: Directory to store log files
        log_format: Log format

    Returns:
        Configured contextual logger
    """
    logger = logging.getLogger(name)

    log_level = level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    logger.setLevel(getattr(logging, log_level.upper()))

    formatter = logging.Formatter(log_format or os.getenv("LOG_FORMAT", DEFAULT_FORMAT))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console output goes to stderr, stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(ContextFilter())
    logger.addHandler(console_handler)

    if log_to_file:
        log_directory = log_dir or os.getenv("LOG_DIR", DEFAULT_LOG_DIRECTORY)
        Path(log_directory).mkdir(parents=True, exist_ok=True)

        log_file = Path(log_directory) / f"{name}.log"
        file_handler = RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_SIZE, backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(ContextFilter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return cast(ContextualLogger, logger)


def log_operation(
    logger: logging.Logger, operation: str, **context: Any
) -> LoggingContextManager:
    """
    Creates a context manager for operation logging.

    Args:
        logger: Logger to report on
        operation: Name of the operation
        **context: Additional context data

    Returns:
        Context manager configured for operation logging
    """
    return LoggingContextManager(logger, operation, **context)
