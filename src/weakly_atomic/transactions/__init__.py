"""Transactions: steps and their chain / batch composition."""

from __future__ import annotations

from .batch import atomically_batch
from .chain import (
    atomically,
    commit_chain,
    links,
    prepare_chain,
    rollback_chain,
    settle_chain,
)
from .step import Pair, Step, evaluate, perform

__all__ = [
    "Pair",
    "Step",
    "atomically",
    "atomically_batch",
    "commit_chain",
    "evaluate",
    "links",
    "perform",
    "prepare_chain",
    "rollback_chain",
    "settle_chain",
]
