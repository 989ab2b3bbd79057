r"""Backoff strategies for retry delays."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "LinearBackoff"]

from pressguard.backoff.base import BaseBackoffStrategy
from pressguard.backoff.linear import LinearBackoff
