"""Reactions — side effects triggered by observable state changes.

Unlike Computed (which is lazy and only evaluates on read), a Reaction
eagerly re-runs its side effect whenever its tracked dependencies change.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when any observable it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new value
  only when data_fn's result changes.

Before every re-run, and on dispose, the cleanups registered during the
previous run (see facadex.owner.on_cleanup) are executed.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import TypeVar, Callable
from facadex._tracking import current_derivation
from facadex.observable import Equals, default_equals
from facadex.owner import adopt, disown, run_cleanups
from facadex import _anchor

T = TypeVar("T")


class Reaction:
    """A reactive side effect that re-runs when its dependencies change.

    Reactions run eagerly (unlike Computed which is lazy).
    """

    __slots__ = ("_id",)

    def __init__(self, fn: Callable[[], None]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        _anchor.cleanups[self._id] = []
        adopt(self)

    @property
    def _fn(self) -> Callable[[], None]:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @_dependencies.setter
    def _dependencies(self, value: set) -> None:
        _anchor.dependencies[self._id] = value

    def _detach(self) -> None:
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()
        run_cleanups(self._id)

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if _anchor.disposed.get(self._id, True):
            return

        self._detach()

        token = current_derivation.set(self)
        try:
            self._fn()
        finally:
            current_derivation.reset(token)

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies."""
        if _anchor.disposed.get(self._id, True):
            return
        _anchor.disposed[self._id] = True
        self._detach()
        disown(self)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"Reaction({self._fn.__name__}, {state})"


class _DataReaction(Reaction):
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn's dependencies. When they change, re-runs data_fn.
    If the result differs from last time, calls effect_fn with the new value.
    """

    __slots__ = ("_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable, effect_fn: Callable, equals: Equals = None) -> None:
        super().__init__(data_fn)
        _anchor.comparators[self._id] = default_equals if equals is None else equals
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    def _evaluate(self):
        self._detach()
        token = current_derivation.set(self)
        try:
            return self._fn()
        finally:
            current_derivation.reset(token)

    def _run(self) -> None:
        if _anchor.disposed.get(self._id, True):
            return

        new_value = self._evaluate()

        equals = _anchor.comparators[self._id]
        if not self._initialized or equals is False or not equals(self._last_value, new_value):
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"_DataReaction({self._fn.__name__}, {state})"


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then re-run whenever any observable it reads changes.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = Observable(0)
        log = []

        dispose = autorun(lambda: log.append(counter.get()))
        # log == [0], ran immediately

        counter.set(1)
        # log == [0, 1]

        dispose.dispose()
        counter.set(2)
        # log == [0, 1], stopped
    """
    r = Reaction(fn)
    r._run()  # Initial run to establish dependencies
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
    equals: Equals = None,
) -> _DataReaction:
    """Track data_fn's observables; call effect_fn when the result changes.

    Unlike autorun, effect_fn only fires when data_fn's *return value* changes,
    not on every dependency notification. Pass equals=False to fire on every
    notification.

    Usage:
        first = Observable("Alice")
        last = Observable("Smith")

        effects = []
        r = reaction(
            lambda: f"{first.get()} {last.get()}",
            lambda name: effects.append(name),
        )
        # effects == [], the effect waits for a change

        first.set("Bob")
        # effects == ["Bob Smith"]

        r.dispose()
    """
    r = _DataReaction(data_fn, effect_fn, equals)
    if fire_immediately:
        r._run()
    else:
        # Run data_fn to establish deps, but suppress the initial effect
        r._last_value = r._evaluate()
        r._initialized = True
    return r
