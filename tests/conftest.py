from __future__ import annotations

from collections.abc import Iterator

import pytest

from weakly_atomic.long_running.transaction import _current_transaction
from weakly_atomic.unreliable import engine


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record retry intervals instead of sleeping."""
    recorded: list[float] = []
    monkeypatch.setattr(engine, "_sleep", recorded.append)
    return recorded


@pytest.fixture(autouse=True)
def _isolated_transaction_binding() -> Iterator[None]:
    token = _current_transaction.set(None)
    yield
    _current_transaction.reset(token)
