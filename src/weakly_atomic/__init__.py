"""weakly-atomic — weak atomicity for unreliable, side-effecting operations.

Either all operations of a composition are committed or all are rolled back,
as long as the process does not crash. Consistency, isolation and durability
remain the caller's responsibility. Rollbacks and commits are supplied by the
caller and must not raise.
"""

from __future__ import annotations

# ── Long transactions ───────────────────────────────────────────────
from .long_running import (
    LongTransaction,
    TransactionStatus,
    begin_transaction,
    commit_transaction,
    current_transaction,
    long_transaction,
    rollback_transaction,
    transactionally,
)

# ── Primitives ──────────────────────────────────────────────────────
from .primitives import (
    CompositionFailedError,
    NoActiveTransactionError,
    OperationFailedError,
    RetriesExhaustedError,
    StepConfigurationError,
    TransactionAlreadyActiveError,
    TransactionStateError,
    VerificationFailedError,
    WeaklyAtomicError,
)

# ── Retry ───────────────────────────────────────────────────────────
from .unreliable import (
    DEFAULT_ATTEMPTS,
    RetryPolicy,
    keep_trying,
    retry,
    retry_on,
    retrying,
    tenaciously,
)

# ── Transactions ────────────────────────────────────────────────────
from .transactions import (
    Pair,
    Step,
    atomically,
    atomically_batch,
    commit_chain,
    evaluate,
    perform,
    prepare_chain,
    rollback_chain,
    settle_chain,
)

__all__: list[str] = [
    # Retry
    "DEFAULT_ATTEMPTS",
    "RetryPolicy",
    "keep_trying",
    "retry",
    "retry_on",
    "retrying",
    "tenaciously",
    # Transactions
    "Pair",
    "Step",
    "atomically",
    "atomically_batch",
    "commit_chain",
    "evaluate",
    "perform",
    "prepare_chain",
    "rollback_chain",
    "settle_chain",
    # Long transactions
    "LongTransaction",
    "TransactionStatus",
    "begin_transaction",
    "commit_transaction",
    "current_transaction",
    "long_transaction",
    "rollback_transaction",
    "transactionally",
    # Primitives
    "CompositionFailedError",
    "NoActiveTransactionError",
    "OperationFailedError",
    "RetriesExhaustedError",
    "StepConfigurationError",
    "TransactionAlreadyActiveError",
    "TransactionStateError",
    "VerificationFailedError",
    "WeaklyAtomicError",
]
