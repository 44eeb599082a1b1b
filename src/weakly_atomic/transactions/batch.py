"""Batch composer — settle independent steps as one all-or-nothing group."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import CompositionFailedError
from .chain import commit_chain, prepare_chain, rollback_chain

if TYPE_CHECKING:
    from .step import Step

logger = logging.getLogger("weakly_atomic.transactions")


def atomically_batch(*steps: Step[Any]) -> list[Any]:
    """Prepare every step in order, then commit them all.

    Steps are prepared sequentially; a step may be the tail of a chain. On
    the first failure every step prepared before it is rolled back in the
    same forward order and later steps are never run.

    Returns:
        The values produced by the steps, in order. Empty for an empty batch.

    Raises:
        CompositionFailedError: wrapping the failure, after compensations ran.
    """
    results: list[Any] = []
    for index, step in enumerate(steps):
        try:
            results.append(prepare_chain(step))
        except Exception as exc:
            logger.info(
                "Batch step %d of %d failed, rolling back %d prepared step(s): %s",
                index + 1,
                len(steps),
                index,
                exc,
            )
            for prepared in steps[:index]:
                rollback_chain(prepared)
            raise CompositionFailedError(
                exc, failed_index=index, rolled_back=index
            ) from exc

    for step in steps:
        commit_chain(step)
    return results
