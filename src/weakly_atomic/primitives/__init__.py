"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
