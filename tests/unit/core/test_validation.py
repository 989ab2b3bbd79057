r"""Unit tests for parameter validation."""

from __future__ import annotations

import httpx
import pytest

from pressguard.core import validate_retry_params, validate_timeout

######################################
#     Tests for validate_timeout     #
######################################


@pytest.mark.parametrize("timeout", [0.1, 15.0, 30, httpx.Timeout(5.0)])
def test_validate_timeout_valid(timeout: float | httpx.Timeout) -> None:
    validate_timeout(timeout)


@pytest.mark.parametrize("timeout", [0, -1, -0.5])
def test_validate_timeout_invalid(timeout: float) -> None:
    with pytest.raises(ValueError, match=r"timeout must be > 0"):
        validate_timeout(timeout)


###########################################
#     Tests for validate_retry_params     #
###########################################


@pytest.mark.parametrize("max_retries", [0, 1, 3, 100])
def test_validate_retry_params_valid(max_retries: int) -> None:
    validate_retry_params(
        max_retries=max_retries, base_delay=0.0, max_delay=1.0, correlation_id="network-retry"
    )


def test_validate_retry_params_negative_max_retries() -> None:
    with pytest.raises(ValueError, match=r"max_retries must be >= 0"):
        validate_retry_params(max_retries=-1, correlation_id="blogs")


def test_validate_retry_params_negative_base_delay() -> None:
    with pytest.raises(ValueError, match=r"base_delay must be >= 0"):
        validate_retry_params(max_retries=1, base_delay=-0.1, correlation_id="blogs")


@pytest.mark.parametrize("max_delay", [0, -2.0])
def test_validate_retry_params_invalid_max_delay(max_delay: float) -> None:
    with pytest.raises(ValueError, match=r"max_delay must be > 0"):
        validate_retry_params(max_retries=1, max_delay=max_delay, correlation_id="blogs")


def test_validate_retry_params_empty_correlation_id() -> None:
    with pytest.raises(ValueError, match=r"correlation_id"):
        validate_retry_params(max_retries=1, correlation_id="")


def test_validate_retry_params_requires_correlation_id() -> None:
    with pytest.raises(TypeError, match=r"correlation_id"):
        validate_retry_params(max_retries=1)  # type: ignore[call-arg]
