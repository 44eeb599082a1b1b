"""LongTransaction — steps prepared now, committed or rolled back later."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from ..primitives.exceptions import NoActiveTransactionError
from ..transactions.chain import commit_chain, prepare_chain, rollback_chain

if TYPE_CHECKING:
    from ..transactions.step import Step

logger = logging.getLogger("weakly_atomic.long_running")

T = TypeVar("T")


class TransactionStatus(str, Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


#: ContextVar tracking the long transaction bound to the current logical flow
#: (thread or asyncio task). ``None`` means no transaction was begun.
_current_transaction: ContextVar[LongTransaction | None] = ContextVar(
    "current_long_transaction", default=None
)


class LongTransaction:
    """A transaction composed of steps interleaved with arbitrary code.

    :meth:`transactionally` prepares a step immediately (body and
    verification run now, so the caller can branch on the value) and keeps it
    pending. :meth:`commit` / :meth:`rollback` settle every pending step in
    the order they were added.

    Used as a context manager the transaction is committed when the block
    exits normally, unless it was already settled. An exception leaving the
    block does **not** roll it back: the transaction stays active and the
    caller must call :meth:`rollback`. Pass ``auto_rollback=True`` to roll
    back on an escaping exception instead.

    Example:
        ```python
        with begin_transaction() as tx:
            room = tx.transactionally(evaluate(book_room).with_rollback(cancel))
            if room.has_sea_view:
                tx.transactionally(evaluate(book_flight))
        ```
    """

    def __init__(self, *, auto_rollback: bool = False) -> None:
        self._steps: list[Step[Any]] = []
        self.status = TransactionStatus.ACTIVE
        self.auto_rollback = auto_rollback

    def __repr__(self) -> str:
        return (
            f"LongTransaction(status={self.status.value}, "
            f"pending_steps={len(self._steps)})"
        )

    @property
    def steps(self) -> tuple[Step[Any], ...]:
        """Steps prepared so far and awaiting settlement."""
        return tuple(self._steps)

    @property
    def is_active(self) -> bool:
        return self.status is TransactionStatus.ACTIVE

    def transactionally(self, step: Step[T]) -> T:
        """Prepare ``step`` (or the chain ending at it) and keep it pending.

        If preparation fails the step is not added, the failure propagates
        and previously added steps remain pending.

        Raises:
            NoActiveTransactionError: if the transaction was already settled.
        """
        self._ensure_active()
        result = prepare_chain(step)
        self._steps.append(step)
        return result

    add_step = transactionally

    def commit(self) -> None:
        """Commit every pending step, oldest first, and unbind."""
        self._ensure_active()
        for step in self._steps:
            commit_chain(step)
        self._settle(TransactionStatus.COMMITTED)

    def rollback(self) -> None:
        """Roll back every pending step, oldest first, and unbind."""
        self._ensure_active()
        for step in self._steps:
            rollback_chain(step)
        self._settle(TransactionStatus.ROLLED_BACK)

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise NoActiveTransactionError(
                f"The transaction has already been {self.status.value}."
            )

    def _settle(self, status: TransactionStatus) -> None:
        settled = len(self._steps)
        self._steps.clear()
        self.status = status
        if _current_transaction.get() is self:
            _current_transaction.set(None)
        logger.debug("Long transaction %s (%d step(s))", status.value, settled)

    def __enter__(self) -> LongTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if not self.is_active:
            return
        if exc_type is None:
            self.commit()
        elif self.auto_rollback:
            self.rollback()
        else:
            logger.warning(
                "Long transaction left pending with %d step(s) after %s; "
                "call rollback() to compensate",
                len(self._steps),
                exc_type.__name__,
            )
