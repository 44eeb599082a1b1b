"""Long transactions: steps interleaved with non-transactional code."""

from __future__ import annotations

from .context import (
    begin_transaction,
    commit_transaction,
    current_transaction,
    long_transaction,
    rollback_transaction,
    transactionally,
)
from .transaction import LongTransaction, TransactionStatus

__all__ = [
    "LongTransaction",
    "TransactionStatus",
    "begin_transaction",
    "commit_transaction",
    "current_transaction",
    "long_transaction",
    "rollback_transaction",
    "transactionally",
]
