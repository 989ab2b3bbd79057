from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

from pressguard.notifications import ToastRegistry

if TYPE_CHECKING:
    from collections.abc import Generator


class VirtualClock:
    """Awaitable sleep replacement that advances virtual time instantly.

    Attributes:
        now: Virtual seconds elapsed so far.
        delays: Every requested delay, in order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.delays: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        self.now += delay


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def clock() -> VirtualClock:
    """Create a virtual clock whose ``sleep`` never blocks."""
    return VirtualClock()


@pytest.fixture
def toasts() -> ToastRegistry:
    """Create an in-memory notification sink."""
    return ToastRegistry()


@pytest.fixture
def mock_sink() -> Mock:
    """Create a mock notification sink recording every call."""
    return Mock(spec=ToastRegistry)
