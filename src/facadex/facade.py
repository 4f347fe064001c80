"""Facade — the proxy handed to consumers in place of the raw object.

Attribute access, assignment, deletion and dir() are routed to the facade's
policy. Python looks special methods up on the type, never on the instance,
so the common protocol methods are forwarded here explicitly, through the
policy's get, which binds Python-level methods to the facade and builtin
ones to the raw object.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from facadex.errors import NotAttachedError
from facadex.reflect import MISSING, lookup
from facadex import _anchor


class Facade:
    """Transparent, policy-driven proxy over a backing object."""

    __slots__ = ("_id", "__weakref__")

    def __getattribute__(self, key: str):
        raw, policy = _resolve(self)
        return policy.get(raw, key, self)

    def __setattr__(self, key: str, value) -> None:
        raw, policy = _resolve(self)
        policy.set(raw, key, value, self)

    def __delattr__(self, key: str) -> None:
        raw, policy = _resolve(self)
        if not policy.delete(raw, key, self):
            raise AttributeError(f"{type(raw).__name__!r} object has no attribute {key!r}")

    def __dir__(self):
        raw, policy = _resolve(self)
        return sorted(set(dir(type(raw))) | set(policy.own_keys(raw)))

    def __repr__(self) -> str:
        if not is_live(self):
            return f"<disposed facade #{object.__getattribute__(self, '_id')}>"
        return _call(self, "__repr__")

    def __str__(self) -> str:
        return _call(self, "__str__")

    def __format__(self, spec: str) -> str:
        return _call(self, "__format__", spec)

    def __bool__(self) -> bool:
        raw, _ = _resolve(self)
        kind = type(raw)
        if lookup(kind, "__bool__") is not MISSING:
            return bool(_call(self, "__bool__"))
        if lookup(kind, "__len__") is not MISSING:
            return _call(self, "__len__") != 0
        return True

    def __len__(self) -> int:
        return _call(self, "__len__")

    def __iter__(self):
        if not _supports(self, "__iter__"):
            if not _supports(self, "__getitem__"):
                raise TypeError(f"{_kind(self)!r} object is not iterable")
            return _sequence_iter(self)
        return _call(self, "__iter__")

    def __reversed__(self):
        if not _supports(self, "__reversed__"):
            return (self[i] for i in range(len(self) - 1, -1, -1))
        return _call(self, "__reversed__")

    def __contains__(self, item) -> bool:
        if not _supports(self, "__contains__"):
            return any(value is item or value == item for value in self)
        return _call(self, "__contains__", item)

    def __getitem__(self, key):
        return _call(self, "__getitem__", key)

    def __setitem__(self, key, value) -> None:
        _call(self, "__setitem__", key, value)

    def __delitem__(self, key) -> None:
        _call(self, "__delitem__", key)

    def __iadd__(self, other):
        if not _supports(self, "__iadd__"):
            return NotImplemented
        return _call(self, "__iadd__", other)

    def __imul__(self, other):
        if not _supports(self, "__imul__"):
            return NotImplemented
        return _call(self, "__imul__", other)

    def __call__(self, *args, **kwargs):
        return _call(self, "__call__", *args, **kwargs)

    def __eq__(self, other):
        return _call(self, "__eq__", _unwrap(other))

    def __ne__(self, other):
        return _call(self, "__ne__", _unwrap(other))

    def __lt__(self, other):
        return _binary(self, "__lt__", other)

    def __le__(self, other):
        return _binary(self, "__le__", other)

    def __gt__(self, other):
        return _binary(self, "__gt__", other)

    def __ge__(self, other):
        return _binary(self, "__ge__", other)

    def __add__(self, other):
        return _binary(self, "__add__", other)

    def __radd__(self, other):
        return _binary(self, "__radd__", other)

    def __mul__(self, other):
        return _binary(self, "__mul__", other)

    def __rmul__(self, other):
        return _binary(self, "__rmul__", other)

    def __hash__(self) -> int:
        raw, _ = _resolve(self)
        return hash(raw)


def _resolve(facade: Facade):
    fid = object.__getattribute__(facade, "_id")
    try:
        return _anchor.raws[fid], _anchor.policies[fid]
    except KeyError:
        raise NotAttachedError(f"facade #{fid} has been disposed") from None


def _call(facade: Facade, name: str, *args, **kwargs):
    raw, policy = _resolve(facade)
    if lookup(type(raw), name) is MISSING:
        raise TypeError(f"{type(raw).__name__!r} object does not support {name}")
    result = policy.get(raw, name, facade)(*args, **kwargs)
    # In-place operators hand back the raw object; keep callers on the facade.
    return facade if result is raw else result


def _supports(facade: Facade, name: str) -> bool:
    raw, _ = _resolve(facade)
    return lookup(type(raw), name) is not MISSING


def _kind(facade: Facade) -> str:
    raw, _ = _resolve(facade)
    return type(raw).__name__


def _sequence_iter(facade: Facade):
    index = 0
    while True:
        try:
            value = facade[index]
        except IndexError:
            return
        yield value
        index += 1


def _binary(facade: Facade, name: str, other):
    raw, policy = _resolve(facade)
    if lookup(type(raw), name) is MISSING:
        return NotImplemented
    return policy.get(raw, name, facade)(_unwrap(other))


def _unwrap(obj):
    if type(obj) is Facade and is_live(obj):
        return _anchor.raws[facade_id(obj)]
    return obj


def new_facade(fid: int) -> Facade:
    facade = object.__new__(Facade)
    object.__setattr__(facade, "_id", fid)
    return facade


def facade_id(facade: Facade) -> int:
    return object.__getattribute__(facade, "_id")


def is_facade(obj: object) -> bool:
    return type(obj) is Facade


def is_live(facade: Facade) -> bool:
    return facade_id(facade) in _anchor.raws
