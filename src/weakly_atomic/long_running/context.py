"""Binding of the active long transaction to the current logical flow.

Each thread (and each asyncio task context) has its own binding. The handle
returned by :func:`begin_transaction` is the explicit alternative: it can be
passed around and used directly, including from code running elsewhere.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from ..primitives.exceptions import (
    NoActiveTransactionError,
    TransactionAlreadyActiveError,
)
from .transaction import LongTransaction, _current_transaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..transactions.step import Step

logger = logging.getLogger("weakly_atomic.long_running")

T = TypeVar("T")


def current_transaction() -> LongTransaction:
    """Return the active long transaction of the current flow."""
    tx = _current_transaction.get()
    if tx is None or not tx.is_active:
        raise NoActiveTransactionError()
    return tx


def begin_transaction(*, auto_rollback: bool = False) -> LongTransaction:
    """Begin a long transaction and bind it to the current flow.

    Raises:
        TransactionAlreadyActiveError: if one is already bound.
    """
    existing = _current_transaction.get()
    if existing is not None and existing.is_active:
        raise TransactionAlreadyActiveError()
    tx = LongTransaction(auto_rollback=auto_rollback)
    _current_transaction.set(tx)
    logger.debug("Long transaction begun")
    return tx


def transactionally(step: Step[T]) -> T:
    """Prepare ``step`` within the bound long transaction."""
    return current_transaction().transactionally(step)


def commit_transaction() -> None:
    current_transaction().commit()


def rollback_transaction() -> None:
    current_transaction().rollback()


def long_transaction(body: Callable[[], T]) -> T:
    """Run ``body`` inside a long transaction.

    The transaction is committed when ``body`` returns and rolled back when
    it raises anything, including ``KeyboardInterrupt`` or task
    cancellation; the error is then re-raised. Settling it explicitly inside
    ``body`` is allowed.
    """
    tx = begin_transaction()
    try:
        result = body()
    except BaseException:
        if tx.is_active:
            tx.rollback()
        raise
    if tx.is_active:
        tx.commit()
    return result
