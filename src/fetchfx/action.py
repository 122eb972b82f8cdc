"""Transactions: batched observable mutations.

Mutations inside ``with transaction()`` defer reaction runs until the
outermost scope exits, so observers never see a half-applied update (for
example a settled state whose operation is still listed as pending).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fetchfx._tracking import begin_batch, end_batch


@contextmanager
def transaction() -> Iterator[None]:
    """Context manager for batching mutations.

    Usage:
        with transaction():
            state.set(settled)
            pending.remove(operation)
            # reactions fire here, once
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()
