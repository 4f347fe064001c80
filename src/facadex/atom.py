"""Atoms — engine-agnostic (read, write) pairs.

An Atom bundles a reader and a writer so that generic code can read,
write and derive values without knowing where they live: an Observable,
an attribute of a facade, or another atom.

ReadOnlyAtom.try_set refuses every write; Atom.try_set always writes. This
lets code attempt a write without checking the kind of atom first.

Usage:
    point = wrap(Point(1, 2))
    x = Atom.prop(lambda: point, lambda p: p.x)
    x.value          # 1
    x.value = 5      # point.x == 5
    x.update(lambda v: v * 2)
"""

from __future__ import annotations

import functools
from typing import Callable, Generic, TypeVar

from facadex._tracking import untracked
from facadex.computed import Computed
from facadex.observable import Observable, create_cell

T = TypeVar("T")
R = TypeVar("R")


def identity(x: T) -> T:
    return x


class _NamesOf:
    """Answers every attribute or item access with the key itself."""

    __slots__ = ()

    def __getattr__(self, key: str) -> str:
        return key

    def __getitem__(self, key):
        return key


_NAMES = _NamesOf()


def name_of(selector: Callable[[object], R]) -> R:
    """The key selector reads: name_of(lambda p: p.x) == "x"."""
    return selector(_NAMES)


class ReadOnlyAtom(Generic[T]):
    """Read-only value: reading calls get, writing is refused."""

    __slots__ = ("get",)

    def __init__(self, get: Callable[[], T]) -> None:
        self.get = get

    @property
    def value(self) -> T:
        return self.get()

    def try_set(self, value: T) -> bool:
        """Attempt a write. Read-only atoms never accept one."""
        return False

    def update(self, f: Callable[[T], T] = identity) -> T:
        """Compute a new value from the current one and try to store it.

        The current value is read untracked, so calling update() from a
        derivation does not make it depend on this atom. Without f the
        current value is written back, which notifies when the underlying
        cell always notifies.
        """
        out = f(untracked(self.get))
        self.try_set(out)
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get!r})"


class Atom(ReadOnlyAtom[T]):
    """Readable and writable value."""

    __slots__ = ("set",)

    def __init__(self, get: Callable[[], T], set: Callable[[T], object]) -> None:
        super().__init__(get)
        self.set = set

    @property
    def value(self) -> T:
        return self.get()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    def try_set(self, value: T) -> bool:
        self.set(value)
        return True

    def convert(self, to: Callable[[T], R], from_: Callable[[R], T]) -> Atom[R]:
        """A new atom over to(value); writes go back through from_."""
        return Atom(lambda: to(self.value), lambda v: self.set(from_(v)))

    @classmethod
    def unwrap(cls, f: Callable[[], Atom[T]]) -> Atom[T]:
        """Forward to whatever atom f currently returns."""

        def write(value):
            f().value = value

        return cls(lambda: f().value, write)

    @classmethod
    def from_cell(cls, cell) -> Atom:
        """Wrap an Observable or a (read, write) pair."""
        if isinstance(cell, Observable):
            return cls(cell.get, cell.set)
        get, set = cell
        return cls(get, set)

    @classmethod
    def prop(cls, obj: Callable[[], object], selector: Callable[[object], object]) -> Atom:
        """Bind to one attribute of the object obj() returns.

        selector is resolved with name_of once, on first use; obj() is called
        on every access. String keys use attribute access, anything else
        item access (for lists and mappings).
        """
        key = functools.cache(lambda: name_of(selector))

        def read():
            name = key()
            target = obj()
            return getattr(target, name) if isinstance(name, str) else target[name]

        def write(value):
            name = key()
            target = obj()
            if isinstance(name, str):
                setattr(target, name, value)
            else:
                target[name] = value

        return cls(read, write)

    @classmethod
    def source(cls, bind: Callable[[], Atom[T] | None], factory: Callable[[], object] = create_cell) -> Atom[T]:
        """A bindable value with a local fallback.

        Forwards to the atom bind() returns. While bind() returns None, the
        value lives in a cell made by factory(); a fresh one every time the
        binding is cleared again.
        """

        def select():
            bound = bind()
            if bound is not None:
                return bound
            return untracked(lambda: Atom.from_cell(factory()))

        return cls.unwrap(Computed(select, equals=lambda a, b: a is b).get)
