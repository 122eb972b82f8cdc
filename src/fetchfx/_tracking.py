"""Dependency tracking and batching for the reactive core.

While a reaction evaluates, every Observable it reads registers itself as a
dependency via the ``current_derivation`` context variable.

Batching: mutations made inside ``transaction()`` collect the reactions they
invalidate and run each of them once when the outermost scope exits. The
orchestrator settles operations inside a transaction so an observer reading
both the state and the pending list never sees one updated without the other.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fetchfx.reaction import Reaction, _DataReaction

    Derivation = Reaction | _DataReaction

current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "fetchfx_current_derivation", default=None
)

_batch_depth: int = 0

# Insertion-ordered so deferred reactions run in the order they were invalidated.
_pending: dict[Derivation, None] = {}


def begin_batch() -> None:
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Leave a batching scope; the outermost exit flushes deferred reactions."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Run a derivation now, or defer it while a batch is open."""
    if _batch_depth > 0:
        _pending[derivation] = None
    else:
        derivation._run()


def _flush_pending() -> None:
    while _pending:
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of reactions waiting for the current batch to close."""
    return len(_pending)
