r"""Notification sinks surfacing retry progress to a human observer.

A notification sink is a side channel (toast, snackbar, log line) used
for observability only. The retry executor calls ``show_progress`` while
it is retrying and ``dismiss`` once when the run ends; the fault reporter
calls ``show_error`` for terminal failures.

Example:
    ```pycon
    >>> from pressguard.notifications import ToastRegistry
    >>> toasts = ToastRegistry()
    >>> toasts.show_progress("Retrying... (2/4)", "network-retry")
    >>> toasts.show_progress("Retrying... (3/4)", "network-retry")
    >>> toasts.active
    {'network-retry': 'Retrying... (3/4)'}
    >>> toasts.dismiss("network-retry")
    >>> toasts.active
    {}

    ```
"""

from __future__ import annotations

__all__ = ["LoggingNotificationSink", "NotificationSink", "ToastRegistry"]

import logging
from typing import Protocol, runtime_checkable

logger: logging.Logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Interface of the notification side channel."""

    def show_progress(self, message: str, correlation_id: str) -> None:
        """Show or replace the progress indicator keyed by
        ``correlation_id``."""

    def dismiss(self, correlation_id: str) -> None:
        """Remove the progress indicator keyed by ``correlation_id``."""

    def show_error(self, message: str) -> None:
        """Show a terminal error message."""


class ToastRegistry:
    """In-memory notification sink keyed by correlation id.

    Repeated ``show_progress`` calls with the same id replace the visible
    indicator instead of stacking a new one.

    Attributes:
        active: Visible progress indicators, by correlation id.
        errors: Error messages shown so far, oldest first.
    """

    def __init__(self) -> None:
        self.active: dict[str, str] = {}
        self.errors: list[str] = []

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(active={self.active}, errors={len(self.errors)})"

    def show_progress(self, message: str, correlation_id: str) -> None:
        self.active[correlation_id] = message

    def dismiss(self, correlation_id: str) -> None:
        self.active.pop(correlation_id, None)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


class LoggingNotificationSink:
    """Notification sink writing every notification to a logger.

    Args:
        target: The logger to write to. Defaults to this module's logger.
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target if target is not None else logger

    def show_progress(self, message: str, correlation_id: str) -> None:
        self._logger.info(f"[{correlation_id}] {message}")

    def dismiss(self, correlation_id: str) -> None:
        self._logger.debug(f"[{correlation_id}] dismissed")

    def show_error(self, message: str) -> None:
        self._logger.error(message)
