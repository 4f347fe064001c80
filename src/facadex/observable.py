"""Observable values — state that tracks its readers.

When an Observable is read inside a Computed or Reaction evaluation,
the dependency is automatically registered. When the Observable changes,
all dependents are scheduled for re-evaluation.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable, Generic, Literal, TypeVar, Union
from facadex._tracking import begin_batch, current_derivation, end_batch, schedule
from facadex import _anchor

T = TypeVar("T")

Equals = Union[Callable[[object, object], bool], Literal[False], None]


def default_equals(old: object, new: object) -> bool:
    """Identity first, then ==."""
    return old is new or old == new


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking.

    equals decides whether a write is a change; pass False to notify on
    every write.
    """

    __slots__ = ("_id",)

    def __init__(self, value: T, equals: Equals = None) -> None:
        self._id = _anchor.new_id()
        _anchor.values[self._id] = value
        _anchor.observers[self._id] = set()
        _anchor.comparators[self._id] = default_equals if equals is None else equals

    def get(self) -> T:
        """Read the value. If inside a derivation, registers the dependency."""
        derivation = current_derivation.get()
        if derivation is not None:
            _anchor.observers[self._id].add(derivation)
            derivation._dependencies.add(self)
        return _anchor.values[self._id]

    def set(self, value: T) -> None:
        """Write a new value and notify if it differs."""
        old = _anchor.values[self._id]
        equals = _anchor.comparators[self._id]
        if equals is not False and equals(old, value):
            return
        _anchor.values[self._id] = value
        self._notify()

    def _notify(self) -> None:
        """Schedule all observers for re-evaluation, in one batch."""
        begin_batch()
        try:
            for observer in list(_anchor.observers[self._id]):
                schedule(observer)
        finally:
            end_batch()

    def _remove_observer(self, observer) -> None:
        """Remove an observer. Called during dependency cleanup."""
        observers = _anchor.observers.get(self._id)
        if observers is not None:
            observers.discard(observer)

    def dispose(self) -> None:
        """Forget this cell. Only safe once nothing depends on it."""
        _anchor.release(self._id)

    def __repr__(self) -> str:
        return f"Observable({_anchor.values.get(self._id)!r})"


def create_cell(initial: T | None = None, equals: Equals = None) -> tuple[Callable[[], T], Callable[[T], None]]:
    """Create an Observable and return its (read, write) pair."""
    cell = Observable(initial, equals)
    return cell.get, cell.set
