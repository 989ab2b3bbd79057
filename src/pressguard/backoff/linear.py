r"""Linear backoff strategy."""

from __future__ import annotations

__all__ = ["LinearBackoff"]

from pressguard.backoff.base import BaseBackoffStrategy


class LinearBackoff(BaseBackoffStrategy):
    """Linear backoff strategy.

    The delay after failed attempt ``attempt`` (0-indexed) is
    ``base_delay * (attempt + 1)``, so the waits before the 2nd, 3rd and
    4th invocations are 1x, 2x and 3x ``base_delay``.

    Args:
        base_delay: The base delay in seconds. Must be >= 0.
        max_delay: Optional cap on a single delay in seconds.

    Example:
        ```pycon
        >>> from pressguard.backoff import LinearBackoff
        >>> backoff = LinearBackoff(base_delay=0.1)
        >>> backoff.calculate(0)
        0.1
        >>> backoff.calculate(1)
        0.2
        >>> LinearBackoff(base_delay=2.0, max_delay=5.0).calculate(5)
        5.0

        ```
    """

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_delay={self.base_delay}, max_delay={self.max_delay})"

    def calculate(self, attempt: int) -> float:
        delay = self.base_delay * (attempt + 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
