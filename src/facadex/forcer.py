"""Forcer — a value-less cell that readers track and writers notify.

The store of a facade keeps one Forcer per observed key. Each track()
registers a cleanup on the running derivation; when the last of those runs,
the Forcer is evicted from its store, so a store only holds the keys that
are being observed right now.
"""

from __future__ import annotations

import functools

from facadex._tracking import currently_tracking
from facadex.observable import Observable
from facadex.owner import on_cleanup
from facadex.reflect import MISSING


class Forcer:
    """Reactive cell without a value, carrying a count of active trackers."""

    __slots__ = ("count", "_cell")

    def __init__(self) -> None:
        self.count = 0
        self._cell: Observable[None] = Observable(None, equals=False)

    def track(self) -> None:
        self._cell.get()

    def notify(self) -> None:
        self._cell.set(None)

    def dispose(self) -> None:
        self._cell.dispose()

    def __repr__(self) -> str:
        return f"Forcer(count={self.count})"


def track(store: dict, key) -> None:
    """Track key in the running derivation, creating its Forcer on demand.

    Does nothing when no derivation is running or the key is excluded
    (stored as None).
    """
    if not currently_tracking():
        return
    forcer = store.get(key, MISSING)
    if forcer is None:
        return
    if forcer is MISSING:
        forcer = store[key] = Forcer()
    forcer.track()
    forcer.count += 1
    on_cleanup(functools.partial(_release, store, key, forcer))


def update(store: dict, key) -> bool:
    """Notify the readers of key. Returns whether anyone was listening."""
    forcer = store.get(key)
    if forcer is None:
        return False
    forcer.notify()
    return True


def _release(store: dict, key, forcer: Forcer) -> None:
    forcer.count -= 1
    if forcer.count:
        return
    if store.get(key) is forcer:
        del store[key]
    forcer.dispose()
