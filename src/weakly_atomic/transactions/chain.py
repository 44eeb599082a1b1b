"""Chain composer — prepare, commit or roll back a chain of dependent steps.

A chain is built with :meth:`Step.then` / :meth:`Step.and_`; the tail step
references its predecessors. Preparation, commit and rollback all walk the
chain oldest first. Compensation follows the order in which the
operations were attempted, not the reverse.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar, cast

from ..primitives.exceptions import CompositionFailedError

if TYPE_CHECKING:
    from .step import Step

logger = logging.getLogger("weakly_atomic.transactions")

T = TypeVar("T")


def links(step: Step[Any]) -> list[Step[Any]]:
    """Return the chain ending at ``step``, oldest first."""
    chain: list[Step[Any]] = []
    current: Step[Any] | None = step
    while current is not None:
        chain.append(current)
        current = current.previous
    chain.reverse()
    return chain


def _prepare_links(chain: list[Step[Any]]) -> tuple[Any, int, Exception | None]:
    """Prepare ``chain`` in order, compensating the prepared links on failure.

    Returns the tail's value, the index of the failing link (``len(chain)``
    when none failed) and the failure itself.
    """
    result: Any = None
    for index, link in enumerate(chain):
        try:
            result = link.prepare(result)
        except Exception as exc:
            logger.info(
                "Chain link %d of %d failed, rolling back %d prepared link(s): %s",
                index + 1,
                len(chain),
                index,
                exc,
            )
            for prepared in chain[:index]:
                prepared.perform_rollback()
            return None, index, exc
    return result, len(chain), None


def prepare_chain(step: Step[T]) -> T:
    """Prepare every link of the chain, feeding each result to the next link.

    If a link fails after exhausting its own retries, all links prepared
    before it are rolled back (oldest first) and the failure propagates. The
    failing link has already rolled itself back after each of its attempts.
    """
    result, _index, error = _prepare_links(links(step))
    if error is not None:
        raise error
    return cast("T", result)


def commit_chain(step: Step[Any]) -> None:
    """Commit every link of the chain, oldest first."""
    for link in links(step):
        link.perform_commit()


def rollback_chain(step: Step[Any]) -> None:
    """Roll back every link of the chain, oldest first."""
    for link in links(step):
        link.perform_rollback()


def settle_chain(step: Step[T]) -> T:
    """Prepare the chain and commit it, or fail with everything rolled back.

    Returns:
        The value produced by the tail step.

    Raises:
        CompositionFailedError: wrapping the failure, after compensations ran.
    """
    result, failed_index, error = _prepare_links(links(step))
    if error is not None:
        raise CompositionFailedError(
            error, failed_index=failed_index, rolled_back=failed_index
        ) from error
    commit_chain(step)
    return cast("T", result)


def atomically(step: Step[T]) -> T:
    """Run a step (or the chain ending at it) with weak atomicity."""
    return settle_chain(step)
