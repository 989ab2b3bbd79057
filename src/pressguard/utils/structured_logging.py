r"""Structured logging utilities for machine-readable log output.

This module provides a JSON log formatter and a context-local correlation
ID. The retry executor binds the correlation ID of its policy for the
duration of a run, so every log record emitted while retrying one logical
operation can be grouped together.

The structured output is opt-in and enabled by configuring Python's
logging system to use the provided formatter.

Example:
    Enable structured logging for pressguard:

    ```python
    import logging
    from pressguard.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("pressguard")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "bind_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextlib
import contextvars
import json
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "pressguard_correlation_id", default=None
)

# Attributes present on every ``logging.LogRecord``
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "msecs",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "sinfo",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


def get_correlation_id() -> str | None:
    """Get the correlation ID of the current context.

    Returns:
        The current correlation ID, or None if not set.
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context.

    The ID is stored in a context variable, so concurrent asyncio tasks
    each see their own value.

    Args:
        correlation_id: The correlation ID to set.

    Example:
        ```pycon
        >>> from pressguard.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("load-blogs")
        >>> get_correlation_id()
        'load-blogs'
        >>> clear_correlation_id()

        ```
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID for the current context."""
    _correlation_id.set(None)


@contextlib.contextmanager
def bind_correlation_id(correlation_id: str) -> Iterator[None]:
    """Bind a correlation ID for the duration of a ``with`` block.

    The previous value is restored on exit, including when the block
    raises.

    Args:
        correlation_id: The correlation ID to bind.

    Example:
        ```pycon
        >>> from pressguard.utils.structured_logging import (
        ...     bind_correlation_id,
        ...     get_correlation_id,
        ... )
        >>> with bind_correlation_id("network-retry"):
        ...     get_correlation_id()
        ...
        'network-retry'
        >>> get_correlation_id()  # Restored

        ```
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output: ``timestamp`` (ISO 8601),
    ``level``, ``logger``, ``message``, ``module``, ``function``,
    ``line``, plus ``correlation_id`` when one is bound and
    ``exception`` when the record carries exception info. Fields passed
    through ``extra`` are copied as-is.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format timestamp as ISO 8601 with millisecond precision.

        Args:
            record: The log record.
            datefmt: Ignored.

        Returns:
            ISO 8601 formatted timestamp.
        """
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
    """
    logger.log(level, message, extra=extra)
