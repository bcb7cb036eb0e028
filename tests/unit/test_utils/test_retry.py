"""Tests for the async retry decorator."""

from __future__ import annotations

import pytest

from reminder_service.utils.retry import RetryError, RetryStrategy, retry


class Flaky:
    def __init__(self, failures: int, error: type[Exception] = ConnectionError) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return "ok"


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures() -> None:
    flaky = Flaky(failures=2)
    wrapped = retry(max_attempts=3, initial_delay=0.001, jitter=False)(flaky)

    assert await wrapped() == "ok"
    assert flaky.calls == 3


@pytest.mark.asyncio
async def test_exhaustion_raises_retry_error() -> None:
    flaky = Flaky(failures=5)
    wrapped = retry(max_attempts=2, initial_delay=0.001, jitter=False)(flaky)

    with pytest.raises(RetryError) as exc_info:
        await wrapped()

    assert exc_info.value.attempts == 2
    assert isinstance(exc_info.value.last_exception, ConnectionError)
    assert exc_info.value.__cause__ is exc_info.value.last_exception


@pytest.mark.asyncio
async def test_single_attempt_still_wraps_in_retry_error() -> None:
    flaky = Flaky(failures=1)
    wrapped = retry(max_attempts=1)(flaky)

    with pytest.raises(RetryError):
        await wrapped()
    assert flaky.calls == 1


@pytest.mark.asyncio
async def test_non_matching_exception_propagates() -> None:
    flaky = Flaky(failures=1, error=KeyError)
    wrapped = retry(max_attempts=3, initial_delay=0.001, exceptions=(ConnectionError,))(flaky)

    with pytest.raises(KeyError):
        await wrapped()
    assert flaky.calls == 1


@pytest.mark.asyncio
async def test_retry_if_and_on_retry() -> None:
    seen: list[int] = []
    flaky = Flaky(failures=1, error=ValueError)
    wrapped = retry(
        max_attempts=3,
        initial_delay=0.001,
        retry_if=lambda exc: "failure" in str(exc),
        on_retry=lambda exc, attempt: seen.append(attempt),
    )(flaky)

    assert await wrapped() == "ok"
    assert seen == [1]


@pytest.mark.asyncio
async def test_stop_after_delay_ends_early() -> None:
    flaky = Flaky(failures=10)
    wrapped = retry(max_attempts=10, initial_delay=0.02, jitter=False, stop_after_delay=0.0)(flaky)

    with pytest.raises(RetryError) as exc_info:
        await wrapped()

    assert exc_info.value.attempts == 1


def test_delay_is_exponential_and_capped() -> None:
    strategy = RetryStrategy(initial_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False)

    assert [strategy.calculate_delay(n) for n in range(4)] == [1.0, 2.0, 4.0, 5.0]


def test_jitter_stays_in_range() -> None:
    strategy = RetryStrategy(initial_delay=1.0, jitter=True, jitter_range=(0.5, 1.5))

    for _ in range(20):
        assert 0.5 <= strategy.calculate_delay(0) <= 1.5
