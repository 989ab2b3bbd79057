r"""Notification manager for one run of the retry executor.

This module provides the NotificationManager class that decides when
the progress indicator is shown and makes sure it is dismissed exactly
once, and only if something was shown.
"""

from __future__ import annotations

__all__ = ["NotificationManager"]

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pressguard.core.config import RetryPolicy
    from pressguard.notifications import NotificationSink

logger: logging.Logger = logging.getLogger(__name__)


class NotificationManager:
    """Tracks the progress indicator of a single retry run.

    A new manager is created for every run, so concurrent runs never share
    state except through the sink, where indicators are keyed by
    correlation id.

    Args:
        sink: The notification sink, or None to disable notifications.
        policy: The retry policy of the run.

    Attributes:
        shown: Whether a progress notification was emitted during the run.
    """

    def __init__(self, sink: NotificationSink | None, policy: RetryPolicy) -> None:
        self.sink = sink
        self.policy = policy
        self.shown = False

    @property
    def enabled(self) -> bool:
        """Whether this run may emit notifications."""
        return self.sink is not None and not self.policy.silent

    def on_retry(self, attempt: int) -> None:
        """Report that the operation is about to be retried.

        Nothing is shown after the very first failure, or in silent mode.

        Args:
            attempt: Index of the attempt that just failed (0-indexed).
        """
        if attempt == 0 or not self.enabled:
            return
        message = f"Network error. Retrying... ({attempt + 1}/{self.policy.total_attempts})"
        self.sink.show_progress(message, self.policy.correlation_id)
        self.shown = True

    def finish(self) -> None:
        """Dismiss the progress indicator if this run showed one."""
        if not self.shown:
            return
        self.sink.dismiss(self.policy.correlation_id)
        self.shown = False
