"""Tracking policy — per-attribute dependency store for a facade.

Reads register the running derivation on a Forcer for the attribute (or for
a structural key: class, extensibility, shape); writes notify the Forcer of
what they changed. Results always come from the raw object, so changes made
to it directly stay visible even though they are not notified.

Accessor attributes (properties) are excluded from the store: their
reactivity comes from the attributes their getter reads, and MemoPolicy
caches them. Reading one tracks the class instead, since the getter itself
comes from there.
"""

from __future__ import annotations

from typing import Callable

from facadex.action import transaction
from facadex.base import SPECIAL_KEYS, BasePolicy, state_id
from facadex.reflect import MISSING, Internal
from facadex import _anchor, forcer, reflect

_VALUE_TYPES = (int, float, complex, str, bytes)


def same_value_zero(a: object, b: object) -> bool:
    """Identity for objects, equality for plain values, NaN equals NaN."""
    if a is b:
        return True
    if type(a) is bool or type(b) is bool:
        return False
    if isinstance(a, _VALUE_TYPES) and isinstance(b, _VALUE_TYPES):
        if a != a and b != b:
            return True
        return a == b
    return False


def get_store(obj: object) -> dict:
    """The dependency store of a facade (or of a wrapped raw object)."""
    return _anchor.stores[state_id(obj)]


class TrackingPolicy(BasePolicy):
    """Tracks reads per attribute and notifies on writes.

    equals decides whether a write is an observable change; it defaults to
    same_value_zero.
    """

    def __init__(self, equals: Callable[[object, object], bool] | None = None) -> None:
        self.equals = equals or same_value_zero

    def setup(self, fid: int) -> None:
        super().setup(fid)
        _anchor.stores[fid] = {}

    def teardown(self, fid: int) -> None:
        store = _anchor.stores.pop(fid, {})
        for cell in store.values():
            if cell is not None:
                cell.dispose()
        store.clear()
        super().teardown(fid)

    # --- Reads ---

    def get(self, raw, key, receiver):
        if key in SPECIAL_KEYS:
            return super().get(raw, key, receiver)
        store = get_store(raw)
        cell = store.get(key, MISSING)
        if cell is MISSING and reflect.is_accessor(raw, key):
            store[key] = cell = None
        self.track(raw, Internal.PROTO if cell is None else key)
        return super().get(raw, key, receiver)

    def has(self, raw, key) -> bool:
        self.track(raw, Internal.SHAPE)
        return super().has(raw, key)

    def own_keys(self, raw) -> list[str]:
        self.track(raw, Internal.SHAPE)
        return super().own_keys(raw)

    def get_class(self, raw) -> type:
        self.track(raw, Internal.PROTO)
        return super().get_class(raw)

    def is_extensible(self, raw) -> bool:
        self.track(raw, Internal.EXTENSIBLE)
        return super().is_extensible(raw)

    # --- Writes ---

    def set(self, raw, key, value, receiver) -> bool:
        if key in SPECIAL_KEYS or reflect.is_accessor(raw, key):
            return super().set(raw, key, value, receiver)
        old = reflect.own_value(raw, key)
        with transaction():
            super().set(raw, key, value, receiver)
            self.changed(raw, key, old)
        return True

    def define(self, raw, key, value) -> bool:
        old = reflect.own_value(raw, key)
        with transaction():
            super().define(raw, key, value)
            self.changed(raw, key, old)
        return True

    def delete(self, raw, key, receiver=None) -> bool:
        own = reflect.has_own(raw, key)
        with transaction():
            if not super().delete(raw, key, receiver):
                return False
            if own:
                self.update(raw, key)
                self.update(raw, Internal.SHAPE)
        return True

    def set_class(self, raw, cls: type) -> bool:
        if cls is reflect.default_get_class(raw):
            return True
        store = get_store(raw)
        accessors = {key: reflect.is_accessor(raw, key) for key in store if isinstance(key, str)}
        with transaction():
            super().set_class(raw, cls)
            self.update(raw, Internal.PROTO)
            self.update(raw, Internal.SHAPE)
            for key, was_accessor in accessors.items():
                # A property of either class hides the own value.
                if reflect.has_own(raw, key) and not was_accessor and not reflect.is_accessor(raw, key):
                    continue
                if store[key] is None:
                    del store[key]
                else:
                    self.update(raw, key)
        return True

    def prevent_extensions(self, raw) -> bool:
        if not super().is_extensible(raw):
            return True
        with transaction():
            super().prevent_extensions(raw)
            self.update(raw, Internal.EXTENSIBLE)
        return True

    # --- Store access ---

    def track(self, raw, key) -> None:
        forcer.track(get_store(raw), key)

    def update(self, raw, key) -> bool:
        """Notify the readers of key; False when nobody was listening."""
        return forcer.update(get_store(raw), key)

    def changed(self, raw, key, old) -> None:
        """Notify key (and shape, for a new attribute) after a write."""
        new = reflect.own_value(raw, key)
        if old is MISSING or new is MISSING:
            if old is new:
                return
            self.update(raw, key)
            self.update(raw, Internal.SHAPE)
        elif not self.compare(raw, key, old, new):
            self.update(raw, key)

    def compare(self, raw, key, a, b) -> bool:
        """Whether a and b are the same value for key; equal values are not notified."""
        return self.equals(a, b)
