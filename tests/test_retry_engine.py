"""Tests for the retry engine and its standalone entry points."""

from __future__ import annotations

import logging

import pytest

from weakly_atomic.primitives.exceptions import RetriesExhaustedError
from weakly_atomic.unreliable import engine
from weakly_atomic.unreliable.engine import (
    keep_trying,
    retry,
    retry_on,
    retrying,
    tenaciously,
)
from weakly_atomic.unreliable.policy import RetryPolicy


class UnreliableService:
    """Fails with ``error`` until the ``succeed_on``-th call."""

    def __init__(self, succeed_on: int = 2, error: Exception | None = None) -> None:
        self.succeed_on = succeed_on
        self.error = error or RuntimeError("Service unavailable")
        self.tries = 0
        self.success = False

    def do_something(self) -> None:
        self.tries += 1
        if self.tries < self.succeed_on:
            raise self.error
        self.success = True

    def get_something(self) -> str:
        self.do_something()
        return "Success!"


def test_returns_value_after_failures() -> None:
    service = UnreliableService(succeed_on=5)

    result = retry(service.get_something, RetryPolicy.times(5))

    assert result == "Success!"
    assert service.tries == 5


def test_exhaustion_reports_attempts_and_last_error() -> None:
    error = RuntimeError("boom")
    service = UnreliableService(succeed_on=100, error=error)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        retry(service.get_something, RetryPolicy.times(2))

    assert exc_info.value.attempts == 2
    assert exc_info.value.last_error is error
    assert exc_info.value.__cause__ is error
    assert service.tries == 2


def test_effect_only_operation_returns_none() -> None:
    service = UnreliableService(succeed_on=2)

    assert tenaciously(service.do_something) is None
    assert service.success
    assert service.tries == 2


def test_tenaciously_defaults_to_three_attempts() -> None:
    service = UnreliableService(succeed_on=4)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        tenaciously(service.do_something)

    assert exc_info.value.attempts == 3
    assert service.tries == 3


def test_keep_trying_until_success() -> None:
    service = UnreliableService(succeed_on=100)

    assert keep_trying(service.get_something) == "Success!"
    assert service.tries == 100


def test_retry_on_specific_kind() -> None:
    service = UnreliableService(succeed_on=3, error=FileNotFoundError())

    assert retry_on(OSError, service.get_something) == "Success!"
    assert service.tries == 3


def test_retry_on_specific_kind_and_fail() -> None:
    service = UnreliableService(succeed_on=4, error=FileNotFoundError())

    with pytest.raises(RetriesExhaustedError) as exc_info:
        retry_on(OSError, service.do_something)

    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
    assert service.tries == 3


def test_other_kind_propagates_immediately() -> None:
    service = UnreliableService(succeed_on=4, error=PermissionError("denied"))

    with pytest.raises(PermissionError, match="denied"):
        retry(service.do_something, RetryPolicy.on(TimeoutError, times=10))

    assert service.tries == 1


def test_retry_on_one_of_several_kinds() -> None:
    service = UnreliableService(succeed_on=10, error=FileNotFoundError())

    retry_on([KeyError, OSError], service.do_something, 10)

    assert service.success
    assert service.tries == 10


def test_interval_between_attempts_only(sleeps: list[float]) -> None:
    service = UnreliableService(succeed_on=3)

    tenaciously(service.do_something, 5, interval=0.25)

    assert sleeps == [0.25, 0.25]


def test_no_sleep_after_last_attempt(sleeps: list[float]) -> None:
    service = UnreliableService(succeed_on=100)

    with pytest.raises(RetriesExhaustedError):
        tenaciously(service.do_something, 2, interval=1.0)

    assert sleeps == [1.0]


def test_no_sleep_without_interval(sleeps: list[float]) -> None:
    service = UnreliableService(succeed_on=3)

    tenaciously(service.do_something)

    assert sleeps == []


def test_sleep_uses_time_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[float] = []
    monkeypatch.setattr(engine.time, "sleep", calls.append)

    engine._sleep(0.01)

    assert calls == [0.01]


def test_retrying_decorator() -> None:
    service = UnreliableService(succeed_on=2)

    @retrying(RetryPolicy.times(2))
    def fetch(prefix: str) -> str:
        return prefix + service.get_something()

    assert fetch("> ") == "> Success!"
    assert fetch.__name__ == "fetch"
    assert service.tries == 2


def test_base_exceptions_are_not_retried() -> None:
    calls = 0

    def interrupted() -> None:
        nonlocal calls
        calls += 1
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        keep_trying(interrupted)

    assert calls == 1


def test_exhaustion_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    service = UnreliableService(succeed_on=100)

    with caplog.at_level(logging.DEBUG, logger="weakly_atomic.unreliable"):
        with pytest.raises(RetriesExhaustedError):
            tenaciously(service.do_something, 2)

    messages = [record.getMessage() for record in caplog.records]
    assert any("Attempt 1 failed" in m for m in messages)
    assert any("Giving up after 2 attempt(s)" in m for m in messages)
