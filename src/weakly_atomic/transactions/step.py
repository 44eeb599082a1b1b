"""Step — a fallible body paired with rollback, commit and verification hooks."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from ..primitives.exceptions import (
    StepConfigurationError,
    TransactionStateError,
    VerificationFailedError,
)
from ..unreliable.engine import retry
from ..unreliable.policy import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("weakly_atomic.transactions")

T = TypeVar("T")
R = TypeVar("R")


class Pair(NamedTuple):
    """Result of :meth:`Step.and_`: the predecessor's value and the new one."""

    first: Any
    second: Any


# ── Hook adaptation ─────────────────────────────────────────────────


def _accepts_value(func: Callable[..., Any]) -> bool:
    """Return True if ``func`` can be called with one positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    for param in signature.parameters.values():
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        ):
            return True
    return False


def _value_hook(func: Callable[..., R], role: str) -> Callable[[Any], R]:
    """Normalize a hook to a one-argument callable.

    Hooks may take the step's produced value or no argument at all.
    """
    if not callable(func):
        raise StepConfigurationError(f"{role} must be callable, got {func!r}")
    if _accepts_value(func):
        return func

    def _ignore_value(_value: Any) -> R:
        return func()

    return _ignore_value


def _noop(_value: Any) -> None:
    return None


def _always(_value: Any) -> bool:
    return True


# ── Step ────────────────────────────────────────────────────────────


class Step(Generic[T]):
    """A unit of fallible work that can be prepared, committed or rolled back.

    The body runs under the step's :class:`RetryPolicy`. Every failed attempt
    (the body raised, or verification rejected its value) is followed by the
    rollback hook, so rollbacks must be idempotent. Commit runs once, only
    after the surrounding composition settles successfully. Neither rollback
    nor commit may raise.

    A step created by :meth:`then` holds a reference to its predecessor and
    receives the predecessor's result as the single argument of its body.

    Example:
        ```python
        room = atomically(
            evaluate(lambda: hotel.book_room(dates))
            .with_verification(lambda r: r.price < max_price)
            .with_rollback(lambda r: hotel.cancel(r))
            .retry(5)
        )
        ```
    """

    def __init__(
        self,
        body: Callable[..., T],
        *,
        previous: Step[Any] | None = None,
    ) -> None:
        if not callable(body):
            raise StepConfigurationError(f"body must be callable, got {body!r}")
        self._body = body
        self.previous = previous
        self._rollback: Callable[[Any], Any] = _noop
        self._commit: Callable[[Any], Any] = _noop
        self._verification: Callable[[Any], bool] = _always
        self.retry_policy = RetryPolicy()
        self.last_result: T | None = None
        self.prepared = False
        self._has_successor = False

    def __repr__(self) -> str:
        name = getattr(self._body, "__qualname__", type(self._body).__name__)
        return f"Step(body={name}, prepared={self.prepared})"

    # ── Configuration ───────────────────────────────────────────────

    def with_rollback(self, rollback: Callable[..., Any]) -> Step[T]:
        """Set the rollback, run after every failed attempt and on settlement.

        It receives the last produced value, ``None`` if the body raised
        before producing one, or it may take no argument.
        """
        self._rollback = _value_hook(rollback, "rollback")
        return self

    def with_reset(self, rollback: Callable[..., Any]) -> Step[T]:
        """Alias for :meth:`with_rollback`."""
        return self.with_rollback(rollback)

    def with_commit(self, commit: Callable[..., Any]) -> Step[T]:
        """Set the commit, run once after the composition succeeds."""
        self._commit = _value_hook(commit, "commit")
        return self

    def with_verification(self, verification: Callable[..., bool]) -> Step[T]:
        """Set the predicate deciding whether an attempt succeeded."""
        self._verification = _value_hook(verification, "verification")
        return self

    def with_retry_policy(self, policy: RetryPolicy) -> Step[T]:
        self.retry_policy = policy
        return self

    def retry(self, times: int) -> Step[T]:
        """Give up after ``times`` attempts."""
        self.retry_policy = self.retry_policy.with_attempts(times)
        return self

    def retry_on(self, *kinds: type[Exception]) -> Step[T]:
        """Retry only on failures of ``kinds``; others propagate at once."""
        self.retry_policy = self.retry_policy.with_kinds(*kinds)
        return self

    def keep_trying(self) -> Step[T]:
        """Retry until the body succeeds and verifies."""
        self.retry_policy = self.retry_policy.with_attempts(None)
        return self

    def with_interval(self, seconds: float) -> Step[T]:
        """Sleep ``seconds`` between attempts."""
        self.retry_policy = self.retry_policy.with_interval(seconds)
        return self

    # ── Chaining ────────────────────────────────────────────────────

    def then(self, function: Callable[[T], R]) -> Step[R]:
        """Create a step consuming this step's result and chain it to this one."""
        if self._has_successor:
            raise StepConfigurationError(
                f"{self!r} is already the predecessor of another step"
            )
        self._has_successor = True
        return Step(function, previous=self)

    def and_(self, function: Callable[[T], R]) -> Step[Pair]:
        """Like :meth:`then`, but keep this step's result next to the new one."""

        def _paired(value: T) -> Pair:
            return Pair(value, function(value))

        return self.then(_paired)

    # ── Evaluation ──────────────────────────────────────────────────

    def prepare(self, upstream: Any = None) -> T:
        """Run the body until it succeeds and verifies, rolling back between.

        ``upstream`` is the predecessor's result; it is ignored for a step
        without predecessor.

        Raises:
            RetriesExhaustedError: if the policy ran out of attempts.
            Exception: a failure of a kind the policy does not retry.
        """
        self.prepared = False

        def _attempt() -> T:
            self.last_result = None
            try:
                if self.previous is None:
                    value = self._body()
                else:
                    value = self._body(upstream)
                self.last_result = value
                if not self._verification(value):
                    raise VerificationFailedError(value)
            except Exception:
                self._rollback(self.last_result)
                raise
            return value

        result = retry(_attempt, self._effective_policy())
        self.prepared = True
        return result

    def _effective_policy(self) -> RetryPolicy:
        policy = self.retry_policy
        kinds = policy.retryable_kinds
        if kinds and not issubclass(VerificationFailedError, kinds):
            # A rejected value always costs an attempt, whatever the filter.
            policy = policy.with_kinds(*kinds, VerificationFailedError)
        return policy

    def perform_commit(self) -> None:
        """Invoke the commit hook with the last produced value.

        Raises:
            TransactionStateError: if the step is not prepared, either because
                it never ran or because it has been rolled back since.
        """
        if not self.prepared:
            raise TransactionStateError(f"Cannot commit {self!r}: not prepared")
        logger.debug("Committing %r", self)
        self._commit(self.last_result)

    def perform_rollback(self) -> None:
        """Invoke the rollback hook with the last produced value.

        Safe on a step that was never prepared: the hook receives ``None``.
        Afterwards the step is no longer prepared.
        """
        logger.debug("Rolling back %r", self)
        self._rollback(self.last_result)
        self.prepared = False


def evaluate(function: Callable[[], T]) -> Step[T]:
    """Build a :class:`Step` from a value-producing body."""
    return Step(function)


def perform(operation: Callable[[], Any]) -> Step[None]:
    """Build a :class:`Step` from an effect-only body."""
    return Step(operation)
