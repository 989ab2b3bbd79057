r"""Unit tests for asynchronous retry executor."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock, call

import httpx
import pytest

from pressguard.core.config import RetryPolicy
from pressguard.exceptions import Fault, FaultKind
from pressguard.notifications import LoggingNotificationSink, ToastRegistry
from pressguard.retry import AsyncRetryExecutor, with_retry
from pressguard.utils.structured_logging import get_correlation_id

if TYPE_CHECKING:
    from tests.conftest import VirtualClock


def server_fault(status_code: int = 503) -> Fault:
    return Fault(
        f"GET request to /blogs failed with status {status_code}",
        kind=FaultKind.SERVER_ERROR,
        status_code=status_code,
    )


def client_fault(status_code: int = 400) -> Fault:
    return Fault(
        f"GET request to /blogs failed with status {status_code}",
        kind=FaultKind.CLIENT_ERROR,
        status_code=status_code,
    )


########################################
#     Tests for AsyncRetryExecutor     #
########################################


def test_async_retry_executor_creation() -> None:
    """Test AsyncRetryExecutor default initialization."""
    executor = AsyncRetryExecutor()

    assert executor.policy == RetryPolicy()
    assert isinstance(executor.sink, LoggingNotificationSink)


def test_async_retry_executor_with_policy_and_sink(toasts: ToastRegistry) -> None:
    """Test AsyncRetryExecutor with custom policy and sink."""
    policy = RetryPolicy(max_retries=5, base_delay=0.5)
    executor = AsyncRetryExecutor(policy, sink=toasts)

    assert executor.policy is policy
    assert executor.sink is toasts


@pytest.mark.asyncio
async def test_async_retry_executor_successful_operation(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test the fast path: no delay and no notification."""
    operation = AsyncMock(return_value={"status": "success"})
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    result = await executor.run(operation)

    assert result == {"status": "success"}
    operation.assert_awaited_once_with()
    assert clock.delays == []
    mock_sink.show_progress.assert_not_called()
    mock_sink.dismiss.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 1, 2, 5])
async def test_async_retry_executor_exhausts_retries(
    clock: VirtualClock, mock_sink: Mock, max_retries: int
) -> None:
    """Test an always failing operation is invoked max_retries + 1 times
    and the last fault is raised."""
    faults = [server_fault() for _ in range(max_retries + 1)]
    operation = AsyncMock(side_effect=faults)
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault) as exc_info:
        await executor.run(operation, max_retries=max_retries, base_delay=0.1)

    assert exc_info.value is faults[-1]
    assert operation.await_count == max_retries + 1
    assert len(clock.delays) == max_retries


@pytest.mark.asyncio
@pytest.mark.parametrize("succeed_on", [1, 2, 3, 4])
async def test_async_retry_executor_succeeds_on_attempt_k(
    clock: VirtualClock, mock_sink: Mock, succeed_on: int
) -> None:
    """Test an operation succeeding on invocation k is invoked exactly k
    times."""
    result = object()
    operation = AsyncMock(side_effect=[server_fault()] * (succeed_on - 1) + [result])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    assert await executor.run(operation, max_retries=3, base_delay=0.1) is result
    assert operation.await_count == succeed_on


@pytest.mark.asyncio
async def test_async_retry_executor_non_retryable_fault(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test a non-retryable fault is raised after one invocation and no
    delay."""
    fault = client_fault(404)
    operation = AsyncMock(side_effect=fault)
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault) as exc_info:
        await executor.run(operation)

    assert exc_info.value is fault
    operation.assert_awaited_once()
    assert clock.delays == []


@pytest.mark.asyncio
async def test_async_retry_executor_rate_limit_not_retried(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test 429 is a client error and surfaces immediately."""
    operation = AsyncMock(side_effect=client_fault(429))
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault, match=r"status 429"):
        await executor.run(operation)

    operation.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_retry_executor_silent(clock: VirtualClock, mock_sink: Mock) -> None:
    """Test silent mode never notifies, not even a dismiss."""
    operation = AsyncMock(side_effect=[server_fault()] * 4 + ["ok"])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    assert await executor.run(operation, max_retries=5, base_delay=0.1, silent=True) == "ok"
    assert mock_sink.mock_calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(("max_retries", "base_delay"), [(1, 0.5), (3, 1.0), (4, 0.25)])
async def test_async_retry_executor_linear_backoff(
    clock: VirtualClock, mock_sink: Mock, max_retries: int, base_delay: float
) -> None:
    """Test the delay before attempt i is base_delay * i."""
    operation = AsyncMock(side_effect=server_fault())
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault):
        await executor.run(operation, max_retries=max_retries, base_delay=base_delay)

    assert clock.delays == [base_delay * i for i in range(1, max_retries + 1)]
    assert clock.now == pytest.approx(base_delay * max_retries * (max_retries + 1) / 2)


@pytest.mark.asyncio
async def test_async_retry_executor_recovers_after_two_server_errors(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test two 503 faults then success: delays of 100ms and 200ms, one
    progress notification and one dismiss."""
    operation = AsyncMock(side_effect=[server_fault(503), server_fault(503), "posts"])
    executor = AsyncRetryExecutor(
        RetryPolicy(max_retries=2, base_delay=0.1), sink=mock_sink, sleep=clock.sleep
    )

    assert await executor.run(operation) == "posts"
    assert operation.await_count == 3
    assert clock.delays == [0.1, 0.2]
    mock_sink.show_progress.assert_called_once_with(
        "Network error. Retrying... (2/3)", "network-retry"
    )
    mock_sink.dismiss.assert_called_once_with("network-retry")
    assert mock_sink.mock_calls == [
        call.show_progress("Network error. Retrying... (2/3)", "network-retry"),
        call.dismiss("network-retry"),
    ]


@pytest.mark.asyncio
async def test_async_retry_executor_client_error_short_circuits(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test an always failing 400 raises after one invocation with no
    delay and no notification."""
    fault = client_fault(400)
    operation = AsyncMock(side_effect=fault)
    executor = AsyncRetryExecutor(
        RetryPolicy(max_retries=2, base_delay=0.1), sink=mock_sink, sleep=clock.sleep
    )

    with pytest.raises(Fault) as exc_info:
        await executor.run(operation)

    assert exc_info.value is fault
    operation.assert_awaited_once()
    assert clock.delays == []
    assert mock_sink.mock_calls == []


@pytest.mark.asyncio
async def test_async_retry_executor_dismisses_once_on_exhaustion(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test the indicator is replaced on each retry and dismissed once when
    retries are exhausted."""
    operation = AsyncMock(side_effect=server_fault())
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault):
        await executor.run(operation, max_retries=3, base_delay=0.1)

    assert mock_sink.show_progress.call_args_list == [
        call("Network error. Retrying... (2/4)", "network-retry"),
        call("Network error. Retrying... (3/4)", "network-retry"),
    ]
    mock_sink.dismiss.assert_called_once_with("network-retry")


@pytest.mark.asyncio
async def test_async_retry_executor_dismisses_on_late_terminal_fault(
    clock: VirtualClock, toasts: ToastRegistry
) -> None:
    """Test the indicator is removed when a terminal fault follows a
    retry."""
    operation = AsyncMock(side_effect=[server_fault(), server_fault(), client_fault(403)])
    executor = AsyncRetryExecutor(sink=toasts, sleep=clock.sleep)

    with pytest.raises(Fault, match=r"status 403"):
        await executor.run(operation, max_retries=3, base_delay=0.1)

    assert toasts.active == {}


@pytest.mark.asyncio
async def test_async_retry_executor_no_dismiss_without_progress(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test nothing is dismissed when only the first attempt failed."""
    operation = AsyncMock(side_effect=[server_fault(), "ok"])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    assert await executor.run(operation, base_delay=0.1) == "ok"
    assert clock.delays == [0.1]
    assert mock_sink.mock_calls == []


@pytest.mark.asyncio
async def test_async_retry_executor_correlation_id_override(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test the progress indicator is keyed by the caller's correlation
    id."""
    operation = AsyncMock(side_effect=[server_fault(), server_fault(), "ok"])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    await executor.run(operation, base_delay=0.1, correlation_id="load-comments")

    mock_sink.show_progress.assert_called_once_with(
        "Network error. Retrying... (2/4)", "load-comments"
    )
    mock_sink.dismiss.assert_called_once_with("load-comments")


@pytest.mark.asyncio
async def test_async_retry_executor_concurrent_runs_keep_separate_indicators(
    toasts: ToastRegistry,
) -> None:
    """Test concurrent runs with distinct correlation ids do not clobber
    each other."""
    seen: list[dict[str, str]] = []

    async def sleep(delay: float) -> None:
        seen.append(dict(toasts.active))
        await asyncio.sleep(0)

    executor = AsyncRetryExecutor(sink=toasts, sleep=sleep)
    blogs = AsyncMock(side_effect=[server_fault(), server_fault(), "blogs"])
    comments = AsyncMock(side_effect=[server_fault(), server_fault(), "comments"])

    results = await asyncio.gather(
        executor.run(blogs, base_delay=0.1, correlation_id="blogs"),
        executor.run(comments, base_delay=0.1, correlation_id="comments"),
    )

    assert results == ["blogs", "comments"]
    assert {"blogs", "comments"} <= set(seen[-1])
    assert toasts.active == {}


@pytest.mark.asyncio
async def test_async_retry_executor_overrides_do_not_mutate_policy(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test per-call overrides leave the executor policy unchanged."""
    policy = RetryPolicy(max_retries=1, base_delay=0.5)
    executor = AsyncRetryExecutor(policy, sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(Fault):
        await executor.run(AsyncMock(side_effect=server_fault()), max_retries=3)

    assert executor.policy is policy
    assert policy.max_retries == 1
    assert clock.delays == [0.5, 1.0, 1.5]


@pytest.mark.asyncio
async def test_async_retry_executor_custom_retry_if(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test a custom predicate replaces the default classification."""
    operation = AsyncMock(side_effect=[client_fault(409), client_fault(409), "saved"])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    result = await executor.run(
        operation, base_delay=0.1, retry_if=lambda exc: getattr(exc, "status_code", None) == 409
    )

    assert result == "saved"
    assert operation.await_count == 3


@pytest.mark.asyncio
async def test_async_retry_executor_retries_raw_transport_errors(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test unconverted httpx transport errors are classified as
    retryable."""
    operation = AsyncMock(side_effect=[httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), 1])
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    assert await executor.run(operation, base_delay=0.1) == 1
    assert operation.await_count == 3


@pytest.mark.asyncio
async def test_async_retry_executor_does_not_retry_unclassified_errors(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test exceptions outside the transport are raised unchanged."""
    error = ValueError("invalid JSON")
    operation = AsyncMock(side_effect=error)
    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)

    with pytest.raises(ValueError, match=r"invalid JSON") as exc_info:
        await executor.run(operation)

    assert exc_info.value is error
    operation.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_retry_executor_invalid_override(mock_sink: Mock) -> None:
    """Test invalid overrides are rejected before invoking the
    operation."""
    operation = AsyncMock(return_value=1)
    executor = AsyncRetryExecutor(sink=mock_sink)

    with pytest.raises(ValueError, match=r"max_retries must be >= 0"):
        await executor.run(operation, max_retries=-1)

    operation.assert_not_awaited()


@pytest.mark.asyncio
async def test_async_retry_executor_default_sleep(mock_asleep: Mock, mock_sink: Mock) -> None:
    """Test asyncio.sleep is used by default with the default base
    delay."""
    operation = AsyncMock(side_effect=[server_fault(), server_fault(), "ok"])
    executor = AsyncRetryExecutor(sink=mock_sink)

    assert await executor.run(operation) == "ok"
    assert mock_asleep.call_args_list == [call(1.0), call(2.0)]


@pytest.mark.asyncio
async def test_async_retry_executor_binds_correlation_id(
    clock: VirtualClock, mock_sink: Mock
) -> None:
    """Test the correlation id is bound to the logging context during the
    run only."""
    seen: list[str | None] = []

    async def operation() -> str:
        seen.append(get_correlation_id())
        return "ok"

    executor = AsyncRetryExecutor(sink=mock_sink, sleep=clock.sleep)
    await executor.run(operation, correlation_id="publish-blog")

    assert seen == ["publish-blog"]
    assert get_correlation_id() is None


################################
#     Tests for with_retry     #
################################


@pytest.mark.asyncio
async def test_with_retry(clock: VirtualClock, mock_sink: Mock) -> None:
    """Test with_retry applies overrides to the default policy."""
    operation = AsyncMock(side_effect=server_fault())

    with pytest.raises(Fault):
        await with_retry(
            operation, sink=mock_sink, sleep=clock.sleep, max_retries=2, base_delay=0.25
        )

    assert operation.await_count == 3
    assert clock.delays == [0.25, 0.5]


@pytest.mark.asyncio
async def test_with_retry_success(mock_asleep: Mock) -> None:
    """Test with_retry returns the operation result."""
    operation = AsyncMock(return_value=[1, 2, 3])

    assert await with_retry(operation) == [1, 2, 3]
    mock_asleep.assert_not_called()
