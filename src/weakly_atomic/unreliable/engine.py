"""Retry engine — drive a fallible operation to success or exhaustion."""

from __future__ import annotations

import functools
import logging
import time
from typing import TYPE_CHECKING, Any, TypeVar

from ..primitives.exceptions import RetriesExhaustedError
from .policy import DEFAULT_ATTEMPTS, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger("weakly_atomic.unreliable")

T = TypeVar("T")


def retry(operation: Callable[[], T], policy: RetryPolicy | None = None) -> T:
    """Invoke ``operation`` until it returns, as allowed by ``policy``.

    A failure whose kind the policy does not retry is re-raised unchanged.
    When a bounded policy runs out of attempts a
    :class:`~weakly_atomic.primitives.exceptions.RetriesExhaustedError`
    chained to the last failure is raised. Unbounded policies only return.

    Effect-only operations simply return ``None``.
    """
    if policy is None:
        policy = RetryPolicy()
    attempts = 0
    while True:
        attempts += 1
        try:
            return operation()
        except Exception as exc:
            if not policy.should_retry_on(exc):
                raise
            if policy.is_exhausted(attempts):
                logger.warning(
                    "Giving up after %d attempt(s): %s",
                    attempts,
                    exc,
                    extra={"attempts": attempts, "error_type": type(exc).__name__},
                )
                raise RetriesExhaustedError(attempts, exc) from exc
            logger.debug(
                "Attempt %d failed with %s: %s",
                attempts,
                type(exc).__name__,
                exc,
            )
        if policy.interval > 0:
            _sleep(policy.interval)


def _sleep(seconds: float) -> None:
    """Blocking sleep (overridable for tests)."""
    time.sleep(seconds)


# ── Standalone entry points ─────────────────────────────────────────


def keep_trying(operation: Callable[[], T], *, interval: float = 0.0) -> T:
    """Invoke ``operation`` until no exception is raised."""
    return retry(operation, RetryPolicy.forever().with_interval(interval))


def tenaciously(
    operation: Callable[[], T],
    times: int = DEFAULT_ATTEMPTS,
    *,
    interval: float = 0.0,
) -> T:
    """Invoke ``operation`` up to ``times`` times until no exception is raised."""
    return retry(operation, RetryPolicy.times(times).with_interval(interval))


def retry_on(
    kinds: type[Exception] | Iterable[type[Exception]],
    operation: Callable[[], T],
    times: int = DEFAULT_ATTEMPTS,
    *,
    interval: float = 0.0,
) -> T:
    """Invoke ``operation`` up to ``times`` times while it fails with ``kinds``.

    Any other failure propagates on the attempt that raised it.
    """
    kinds = (kinds,) if isinstance(kinds, type) else tuple(kinds)
    policy = RetryPolicy.on(*kinds, times=times).with_interval(interval)
    return retry(operation, policy)


def retrying(
    policy: RetryPolicy | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator applying :func:`retry` to every call of the wrapped function."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return retry(lambda: func(*args, **kwargs), policy)

        return wrapper

    return decorator
