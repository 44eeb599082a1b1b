"""Retry: policy value object and the retry engine."""

from __future__ import annotations

from .engine import keep_trying, retry, retry_on, retrying, tenaciously
from .policy import DEFAULT_ATTEMPTS, RetryPolicy

__all__ = [
    "DEFAULT_ATTEMPTS",
    "RetryPolicy",
    "keep_trying",
    "retry",
    "retry_on",
    "retrying",
    "tenaciously",
]
