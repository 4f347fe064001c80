"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it tracks which observables
the function reads and caches the result. When any dependency changes,
the cached value is invalidated.

Computed values are lazy while nobody observes them. Once a derivation
depends on one, a dependency change re-evaluates it on the spot and only
wakes the observers if equals() says the value really changed.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import TypeVar, Generic, Callable
from facadex._tracking import current_derivation, schedule
from facadex.observable import Equals, default_equals
from facadex.owner import adopt, disown, run_cleanups
from facadex import _anchor

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_id",)

    def __init__(self, fn: Callable[[], T], equals: Equals = None) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.cached_values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = set()
        _anchor.comparators[self._id] = default_equals if equals is None else equals
        _anchor.cleanups[self._id] = []
        adopt(self)

    @property
    def _fn(self) -> Callable[[], T]:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @_dependencies.setter
    def _dependencies(self, value: set) -> None:
        _anchor.dependencies[self._id] = value

    def get(self) -> T:
        """Read the computed value. Recomputes if dirty."""
        derivation = current_derivation.get()
        if derivation is not None and derivation is not self:
            _anchor.observers[self._id].add(derivation)
            derivation._dependencies.add(self)

        if _anchor.dirty_flags[self._id]:
            self._recompute()

        return _anchor.cached_values[self._id]

    def _detach(self) -> None:
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()
        run_cleanups(self._id)

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        self._detach()

        token = current_derivation.set(self)
        try:
            _anchor.cached_values[self._id] = self._fn()
        finally:
            current_derivation.reset(token)

        _anchor.dirty_flags[self._id] = False

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        Unobserved computeds are only marked dirty; the next .get()
        recomputes. Observed ones recompute now so equal results stop here.
        """
        observers = _anchor.observers[self._id]
        if not observers:
            _anchor.dirty_flags[self._id] = True
            return
        if not _anchor.dirty_flags[self._id]:
            old = _anchor.cached_values[self._id]
            try:
                self._recompute()
            except Exception:
                # Left dirty: the observer's own read re-raises it.
                _anchor.dirty_flags[self._id] = True
            else:
                equals = _anchor.comparators[self._id]
                if equals is not False and equals(old, _anchor.cached_values[self._id]):
                    return
        for observer in list(observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        observers = _anchor.observers.get(self._id)
        if observers is not None:
            observers.discard(observer)

    def dispose(self) -> None:
        """Disconnect from all dependencies. The computed becomes inert."""
        self._detach()
        _anchor.observers[self._id].clear()
        _anchor.dirty_flags[self._id] = True
        _anchor.cached_values[self._id] = _UNSET
        disown(self)

    def __repr__(self) -> str:
        dirty = _anchor.dirty_flags[self._id]
        val = _anchor.cached_values[self._id]
        state = "dirty" if dirty else f"cached={val!r}"
        name = getattr(self._fn, "__name__", type(self._fn).__name__)
        return f"Computed({name}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        counter = Observable(0)

        @computed
        def doubled():
            return counter.get() * 2

        doubled.get()  # 0
        counter.set(5)
        doubled.get()  # 10
    """
    return Computed(fn)


def create_derived(fn: Callable[[], T], equals: Equals = None) -> Callable[[], T]:
    """Create a Computed and return its reader."""
    return Computed(fn, equals).get
