"""RetryPolicy — immutable configuration of the retry engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt

#: Attempts made when nothing else is configured.
DEFAULT_ATTEMPTS = 3


class RetryPolicy(BaseModel):
    """Immutable description of how a fallible operation is retried.

    ``max_attempts=None`` means *unbounded*: the operation is retried until it
    succeeds. A non-empty ``retryable_kinds`` restricts retries to failures
    that are instances of one of the listed exception classes; any other
    failure propagates immediately, even on the first attempt.

    Example:
        ```python
        policy = RetryPolicy.on(TimeoutError, ConnectionError, times=5)
        policy = RetryPolicy.times(2).with_interval(0.5)
        ```
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: PositiveInt | None = DEFAULT_ATTEMPTS
    interval: NonNegativeFloat = 0.0
    retryable_kinds: tuple[type[Exception], ...] = Field(default=())

    # ── Factories ───────────────────────────────────────────────────

    @classmethod
    def times(cls, attempts: int) -> RetryPolicy:
        """Retry on any failure, giving up after ``attempts`` attempts."""
        return cls(max_attempts=attempts)

    @classmethod
    def forever(cls) -> RetryPolicy:
        """Retry on any failure until the operation succeeds."""
        return cls(max_attempts=None)

    @classmethod
    def on(
        cls, *kinds: type[Exception], times: int | None = DEFAULT_ATTEMPTS
    ) -> RetryPolicy:
        """Retry only while the failure is one of ``kinds``."""
        return cls(max_attempts=times, retryable_kinds=kinds)

    # ── Derived copies ──────────────────────────────────────────────

    def with_interval(self, seconds: float) -> RetryPolicy:
        """Return a copy sleeping ``seconds`` between attempts."""
        return self._replace(interval=seconds)

    def with_attempts(self, attempts: int | None) -> RetryPolicy:
        """Return a copy with a different attempt limit (``None`` = unbounded)."""
        return self._replace(max_attempts=attempts)

    def with_kinds(self, *kinds: type[Exception]) -> RetryPolicy:
        """Return a copy retrying only on ``kinds`` (no kinds = any failure)."""
        return self._replace(retryable_kinds=kinds)

    def _replace(self, **changes: Any) -> RetryPolicy:
        # model_copy skips validation; rebuild so constraints still apply.
        fields = {name: getattr(self, name) for name in type(self).model_fields}
        return type(self)(**{**fields, **changes})

    # ── Queries ─────────────────────────────────────────────────────

    @property
    def unbounded(self) -> bool:
        return self.max_attempts is None

    def should_retry_on(self, error: BaseException) -> bool:
        """Return True if ``error`` is of a retryable kind."""
        if not self.retryable_kinds:
            return True
        return isinstance(error, self.retryable_kinds)

    def is_exhausted(self, attempts: int) -> bool:
        """Return True if no attempt is left after ``attempts`` failures."""
        return self.max_attempts is not None and attempts >= self.max_attempts
