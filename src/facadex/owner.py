"""Ownership scopes — lifecycle boundaries that own cleanups and derivations.

A Scope collects cleanup callbacks and the derivations created while it is
current. Tearing the scope down disposes its children and runs its cleanups,
synchronously and exactly once.

Usage:
    scope, teardown = create_scope()

    def setup():
        on_cleanup(lambda: print("bye"))
        return Computed(lambda: counter.get() * 2)

    doubled = run_in_scope(scope, setup)
    teardown()  # disposes doubled, prints "bye"
"""

from __future__ import annotations

import contextvars
import logging
from typing import Callable, TypeVar

from facadex._tracking import current_derivation
from facadex import _anchor

T = TypeVar("T")

logger = logging.getLogger("facadex.owner")

current_scope: contextvars.ContextVar[Scope | None] = contextvars.ContextVar(
    "current_scope", default=None
)


class Scope:
    """Disposable owner of cleanups and child derivations/scopes."""

    __slots__ = ("name", "_cleanups", "_children", "_disposed")

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._cleanups: list[Callable[[], object]] = []
        self._children: dict[object, None] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def adopt(self, child) -> None:
        """Take ownership of something with a dispose() method."""
        self._children[child] = None

    def release(self, child) -> None:
        """Forget a child that was disposed on its own."""
        self._children.pop(child, None)

    def add_cleanup(self, fn: Callable[[], object]) -> None:
        self._cleanups.append(fn)

    def dispose(self) -> None:
        """Dispose children, then run cleanups in reverse registration order.

        Repeated calls are no-ops.
        """
        if self._disposed:
            return
        self._disposed = True
        children = list(self._children)
        self._children.clear()
        for child in reversed(children):
            child.dispose()
        cleanups = self._cleanups
        self._cleanups = []
        for fn in reversed(cleanups):
            fn()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Scope({self.name!r}, {state})"


def create_scope(name: str | None = None, *, detached: bool = False) -> tuple[Scope, Callable[[], None]]:
    """Create a scope and return it with its teardown handle.

    A scope created while another one is current is adopted by it, unless
    detached is set.
    """
    scope = Scope(name)
    parent = current_scope.get()
    if parent is not None and not detached:
        parent.adopt(scope)
    return scope, scope.dispose


def get_scope() -> Scope | None:
    return current_scope.get()


def run_in_scope(scope: Scope, fn: Callable[[], T]) -> T:
    """Run fn with scope as the current owner and no tracking derivation."""
    scope_token = current_scope.set(scope)
    derivation_token = current_derivation.set(None)
    try:
        return fn()
    finally:
        current_derivation.reset(derivation_token)
        current_scope.reset(scope_token)


def on_cleanup(fn: Callable[[], object]) -> Callable[[], object]:
    """Register fn on the running derivation, or else on the current scope."""
    derivation = current_derivation.get()
    if derivation is not None:
        _anchor.cleanups[derivation._id].append(fn)
        return fn
    scope = current_scope.get()
    if scope is not None:
        scope.add_cleanup(fn)
    else:
        logger.debug("Cleanup %r registered outside any owner will never run", fn)
    return fn


def run_cleanups(ident: int) -> None:
    """Run and forget the cleanups registered on a derivation."""
    fns = _anchor.cleanups.get(ident)
    if not fns:
        return
    _anchor.cleanups[ident] = []
    for fn in reversed(fns):
        fn()


def adopt(derivation) -> None:
    """Attach a freshly created derivation to the current scope, if any."""
    scope = current_scope.get()
    if scope is not None:
        scope.adopt(derivation)
        _anchor.parents[derivation._id] = scope


def disown(derivation) -> None:
    scope = _anchor.parents.pop(derivation._id, None)
    if scope is not None:
        scope.release(derivation)
