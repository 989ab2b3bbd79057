r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy maps the index of a failed attempt to the time to
    wait before the next one.
    """

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Calculate the delay that follows a failed attempt.

        Args:
            attempt: Index of the attempt that just failed (0-indexed).
                The delay returned precedes attempt ``attempt + 1``.

        Returns:
            The delay in seconds.
        """
