"""Collection policy — reactive facades over lists.

Next to the per-attribute store, a list facade tracks:
- every integer index that was read (normalised to a non-negative index)
- Internal.LENGTH, read by len(), bool() and negative indexing
- Internal.TRACK, the aggregate key: "the list changed in any way". It is
  read by slicing, iteration, membership and every other non-mutating list
  method, and notified together with any index or length notification.

Mutating methods run untracked inside one transaction. The list is
snapshotted before the call and compared afterwards, so a multi-step
mutation (sort, reverse, slice assignment, splice) wakes each dependent
once, after the whole operation.

Usage:
    items = ReactiveList([1, 2, 3, 4])
    autorun(lambda: print(items[0], len(items)))
    items.splice(0, 2, "a", "b", "c")   # prints once: a 5
"""

from __future__ import annotations

import functools
import operator

from facadex._tracking import untracked
from facadex.action import transaction
from facadex.api import notify, wrap
from facadex.base import SPECIAL_KEYS
from facadex.memo import MemoPolicy
from facadex.reflect import MISSING, Internal, lookup
from facadex.tracking import get_store

MUTATORS = frozenset({
    "append",
    "extend",
    "insert",
    "pop",
    "remove",
    "clear",
    "reverse",
    "sort",
    "splice",
    "__setitem__",
    "__delitem__",
    "__iadd__",
    "__imul__",
})

# Always notify LENGTH, whether or not the length ends up different.
RESIZERS = frozenset({"append", "extend", "insert", "pop", "remove", "clear", "__delitem__", "__iadd__", "__imul__"})


class CollectionPolicy(MemoPolicy):
    """Memo policy for list objects, with index, length and aggregate tracking."""

    def create(self, raw):
        if not isinstance(raw, list):
            raise TypeError(f"{type(self).__name__} wraps lists, not {type(raw).__name__!r} objects")
        return super().create(raw)

    def get(self, raw, key, receiver):
        if key == "__getitem__":
            return functools.partial(self.read_item, raw)
        if key == "__len__":
            return functools.partial(self.read_len, raw)
        attr = lookup(type(raw), key)
        if attr is MISSING:
            return super().get(raw, key, receiver)
        if key in MUTATORS:
            return self.mutator(raw, key, getattr(raw, key))
        if key not in SPECIAL_KEYS and lookup(list, key) is attr and callable(attr):
            self.track(raw, Internal.TRACK)
            return getattr(raw, key)
        return super().get(raw, key, receiver)

    def read_item(self, raw, index):
        if isinstance(index, slice):
            self.track(raw, Internal.TRACK)
            return raw[index]
        try:
            position = operator.index(index)
        except TypeError:
            return raw[index]
        if position < 0:
            self.track(raw, Internal.LENGTH)
            position += len(raw)
        if position >= 0:
            self.track(raw, position)
        return raw[index]

    def read_len(self, raw) -> int:
        self.track(raw, Internal.LENGTH)
        return len(raw)

    def mutator(self, raw, name, method):
        """Batch a mutating method and notify what it changed."""
        resizes = name in RESIZERS

        @functools.wraps(method)
        def mutate(*args, **kwargs):
            before = list(raw)
            with transaction():
                try:
                    return untracked(lambda: method(*args, **kwargs))
                finally:
                    self.sync(raw, before, resizes)

        return mutate

    def sync(self, raw, before: list, resized: bool = False) -> None:
        """Notify the keys whose value differs between before and raw."""
        store = get_store(raw)
        for key in [k for k in store if type(k) is int]:
            old = before[key] if key < len(before) else MISSING
            new = raw[key] if key < len(raw) else MISSING
            if old is MISSING or new is MISSING:
                if old is not new:
                    self.update(raw, key)
            elif not self.compare(raw, key, old, new):
                self.update(raw, key)
        if resized or len(before) != len(raw):
            self.update(raw, Internal.LENGTH)
        elif any(a is not b for a, b in zip(before, raw)):
            self.update(raw, Internal.TRACK)

    def update(self, raw, key) -> bool:
        if key is not Internal.LENGTH and type(key) is not int:
            return super().update(raw, key)
        with transaction():
            notified = super().update(raw, key)
            aggregate = super().update(raw, Internal.TRACK)
        return notified or aggregate


class ReactiveList(list):
    """A list whose constructor hands back its reactive facade.

    The items are loaded before wrapping, so construction notifies nobody.
    Slicing and the non-mutating list methods return plain lists.
    """

    def __new__(cls, iterable=(), policy=CollectionPolicy):
        raw = list.__new__(cls)
        list.extend(raw, iterable)
        return wrap(raw, policy)

    def splice(self, start: int, delete_count: int | None = None, *items):
        """Replace delete_count items from start with items; return the removed ones.

        Negative start counts from the end; start and delete_count are clamped
        to the bounds of the list.
        """
        length = len(self)
        start = max(length + start, 0) if start < 0 else min(start, length)
        if delete_count is None:
            delete_count = length - start
        end = start + min(max(delete_count, 0), length - start)
        removed = list(self[start:end])
        if removed or items:
            self[start:end] = items
        return removed

    def update(self) -> None:
        """Notify every reader of the list, as if its length had changed."""
        notify(self, Internal.LENGTH)
