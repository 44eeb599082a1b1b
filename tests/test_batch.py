"""Tests for batch composition of independent steps."""

from __future__ import annotations

from typing import NoReturn

import pytest

from weakly_atomic.primitives.exceptions import (
    CompositionFailedError,
    VerificationFailedError,
)
from weakly_atomic.transactions import atomically_batch, evaluate, perform


def _boom() -> NoReturn:
    raise RuntimeError("Boom")


def test_empty_batch_succeeds() -> None:
    assert atomically_batch() == []


def test_all_steps_commit_in_order() -> None:
    log: list[str] = []

    results = atomically_batch(
        evaluate(lambda: 1).with_commit(lambda v: log.append(f"commit {v}")),
        evaluate(lambda: 2).with_commit(lambda v: log.append(f"commit {v}")),
        perform(lambda: None).with_commit(lambda: log.append("commit effect")),
    )

    assert results == [1, 2, None]
    assert log == ["commit 1", "commit 2", "commit effect"]


def test_verification_failure_rolls_back_only_prepared_steps() -> None:
    log: list[str] = []

    def third() -> int:
        log.append("body 3")
        return 3

    with pytest.raises(CompositionFailedError) as exc_info:
        atomically_batch(
            evaluate(lambda: 1)
            .with_rollback(lambda v: log.append(f"rollback 1:{v}"))
            .with_commit(lambda _v: log.append("commit 1")),
            evaluate(lambda: 2)
            .with_verification(lambda _v: False)
            .with_rollback(lambda v: log.append(f"rollback 2:{v}"))
            .retry(1),
            evaluate(third).with_rollback(lambda: log.append("rollback 3")),
        )

    assert log == ["rollback 2:2", "rollback 1:1"]
    assert exc_info.value.failed_index == 1
    assert exc_info.value.rolled_back == 1
    assert isinstance(exc_info.value.root_cause, VerificationFailedError)


def test_rollback_order_is_forward() -> None:
    log: list[str] = []

    with pytest.raises(CompositionFailedError):
        atomically_batch(
            evaluate(lambda: "a").with_rollback(lambda v: log.append(v)),
            evaluate(lambda: "b").with_rollback(lambda v: log.append(v)),
            evaluate(lambda: "c").with_rollback(lambda v: log.append(v)),
            evaluate(_boom).retry(1),
        )

    assert log == ["a", "b", "c"]


def test_first_step_failure_rolls_back_nothing_else() -> None:
    commits: list[int] = []
    second_calls = [0]

    def second() -> int:
        second_calls[0] += 1
        return 2

    with pytest.raises(CompositionFailedError) as exc_info:
        atomically_batch(
            evaluate(_boom).with_commit(commits.append),
            evaluate(second).with_commit(commits.append),
        )

    assert exc_info.value.rolled_back == 0
    assert exc_info.value.attempts == 3
    assert commits == []
    assert second_calls[0] == 0


def test_batch_members_may_be_chains() -> None:
    log: list[str] = []
    chain = (
        evaluate(lambda: "room")
        .with_rollback(lambda v: log.append(f"cancel {v}"))
        .then(lambda room: f"flight after {room}")
        .with_rollback(lambda v: log.append(f"cancel {v}"))
    )

    with pytest.raises(CompositionFailedError):
        atomically_batch(chain, evaluate(_boom).retry(1))

    assert log == ["cancel room", "cancel flight after room"]
