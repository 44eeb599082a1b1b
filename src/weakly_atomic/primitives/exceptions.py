"""Failure taxonomy for weakly-atomic."""

from __future__ import annotations

from typing import Any


class WeaklyAtomicError(Exception):
    """Root exception for the entire weakly-atomic toolkit."""


class StepConfigurationError(WeaklyAtomicError, ValueError):
    """Raised when a step is wired incorrectly.

    E.g. a non-callable hook, or a step used as the predecessor of two
    different successors.
    """


# ── Attempt failures ────────────────────────────────────────────────


class OperationFailedError(WeaklyAtomicError):
    """Base class for failures produced by the engine for a single attempt.

    Exceptions raised by caller bodies are never wrapped in this class so
    their type stays usable as the retry *kind*.
    """


class VerificationFailedError(OperationFailedError):
    """Raised when a step's verification rejects the value its body produced."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Verification failed for value {value!r}")


class RetriesExhaustedError(WeaklyAtomicError):
    """Raised when a bounded retry policy runs out of attempts.

    Carries the number of attempts made and the last observed failure, which
    is also set as ``__cause__``.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Tried {attempts} times, but failed: {last_error}")


# ── Composition failures ────────────────────────────────────────────


class CompositionFailedError(WeaklyAtomicError):
    """Raised by chain or batch settlement after compensations have run.

    Usage: callers of ``atomically`` / ``atomically_batch`` catch this to learn
    the root cause and how many attempts the failing step consumed.
    """

    def __init__(
        self,
        cause: BaseException,
        *,
        failed_index: int = 0,
        rolled_back: int = 0,
    ) -> None:
        self.cause = cause
        self.failed_index = failed_index
        self.rolled_back = rolled_back
        super().__init__(
            f"Step {failed_index} failed, rolled back {rolled_back} "
            f"prepared step(s): {cause}"
        )

    @property
    def attempts(self) -> int | None:
        """Attempts consumed by the failing step, if its retries ran out."""
        if isinstance(self.cause, RetriesExhaustedError):
            return self.cause.attempts
        return None

    @property
    def root_cause(self) -> BaseException:
        """The innermost failure, unwrapping retry exhaustion."""
        if isinstance(self.cause, RetriesExhaustedError):
            return self.cause.last_error
        return self.cause


# ── Long transaction state ──────────────────────────────────────────


class TransactionStateError(WeaklyAtomicError):
    """Raised on transaction lifecycle misuse, e.g. committing an unprepared step."""


class NoActiveTransactionError(TransactionStateError):
    """Raised when a transactional operation needs a bound long transaction."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "You need to perform this within a transaction. "
            "Use long_transaction() or begin_transaction()"
        )


class TransactionAlreadyActiveError(TransactionStateError):
    """Raised when begin is called while a long transaction is already bound."""

    def __init__(self) -> None:
        super().__init__(
            "Cannot begin a new transaction: a transaction is already active."
        )
