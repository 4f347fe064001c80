"""Dependency tracking engine.

Uses contextvars to track which cells are read during a computed/reaction
evaluation, building the dependency graph automatically.

Batching: every invalidation is queued and flushed once the outermost batch
exits. A derivation queued several times inside one batch runs once, and
derivations queued while flushing join the same flush, so dependents only
ever observe the settled post-state of a mutation.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from facadex.computed import Computed
    from facadex.reaction import Reaction

    Derivation = Computed | Reaction

T = TypeVar("T")

# The currently-evaluating derivation (computed or reaction).
# When set, any cell read registers itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, invalidations are deferred.
_batch_depth: int = 0

# Derivations that were invalidated during a batch, awaiting flush.
_pending: dict[Derivation, None] = {}


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending derivations."""
    global _batch_depth
    if _batch_depth > 1:
        _batch_depth -= 1
        return
    # Flush with the depth still held so that derivations scheduled by the
    # flush itself are queued instead of run re-entrantly.
    try:
        _flush_pending()
    finally:
        _batch_depth = 0


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation for re-evaluation.

    If inside a batch, defers. Otherwise, opens a batch of its own.
    """
    _pending[derivation] = None
    if _batch_depth == 0:
        begin_batch()
        end_batch()


def _flush_pending() -> None:
    """Run all pending derivations. Handles derivations scheduled during flush."""
    while _pending:
        # Snapshot and clear; derivations may schedule new ones during run.
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of derivations waiting to run. Useful for testing."""
    return len(_pending)


def currently_tracking() -> bool:
    """Whether some derivation is collecting dependencies right now."""
    return current_derivation.get() is not None


def untracked(fn: Callable[[], T]) -> T:
    """Run fn without registering any dependency on the current derivation."""
    token = current_derivation.set(None)
    try:
        return fn()
    finally:
        current_derivation.reset(token)
