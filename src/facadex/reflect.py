"""Default attribute semantics — what a plain object does without a facade.

Policies compute every result through these helpers, then add tracking and
notification around them, so a facade never answers something the raw
object would not.

Vocabulary:
- own attribute: an entry of the instance __dict__, or a filled __slots__ member
- accessor: a property found on the class MRO
- receiver: the object accessors and Python methods are bound to; a policy
  passes its facade so that getter/setter/method bodies go through it
"""

from __future__ import annotations

import enum
import types
from typing import Any


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Internal(enum.Enum):
    """Tracking keys for the parts of an object that are not attributes."""

    PROTO = "[[Prototype]]"
    EXTENSIBLE = "[[IsExtensible]]"
    SHAPE = "[[Shape]]"
    LENGTH = "[[Length]]"
    TRACK = "[[Track]]"

    def __repr__(self) -> str:
        return self.value


def lookup(cls: type, key: object) -> Any:
    """Find key on the class MRO without invoking descriptors."""
    for base in cls.__mro__:
        namespace = base.__dict__
        if key in namespace:
            return namespace[key]
    return MISSING


def _namespace(obj: object) -> dict | None:
    try:
        return object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return None


def _is_data_descriptor(attr: object) -> bool:
    kind = type(attr)
    return hasattr(kind, "__set__") or hasattr(kind, "__delete__")


def own_value(obj: object, key: str) -> Any:
    """Value of an own attribute, or MISSING."""
    attr = lookup(type(obj), key)
    if type(attr) is types.MemberDescriptorType:
        try:
            return attr.__get__(obj, type(obj))
        except AttributeError:
            return MISSING
    namespace = _namespace(obj)
    if namespace is not None and key in namespace:
        return namespace[key]
    return MISSING


def has_own(obj: object, key: str) -> bool:
    return own_value(obj, key) is not MISSING


def is_accessor(obj: object, key: str) -> bool:
    return isinstance(lookup(type(obj), key), property)


def find_getter(obj: object, key: str):
    """The getter of key across the class MRO, if it is a readable property."""
    attr = lookup(type(obj), key)
    return attr.fget if isinstance(attr, property) else None


def default_get(obj: object, key: str, receiver: object = None) -> Any:
    receiver = obj if receiver is None else receiver
    attr = lookup(type(obj), key)
    if isinstance(attr, property):
        if attr.fget is None:
            raise AttributeError(f"property {key!r} of {type(obj).__name__!r} object has no getter")
        return attr.fget(receiver)
    if not _is_data_descriptor(attr):
        namespace = _namespace(obj)
        if namespace is not None and key in namespace:
            return namespace[key]
    if receiver is not obj and isinstance(attr, types.FunctionType):
        return types.MethodType(attr, receiver)
    return getattr(obj, key)


def default_set(obj: object, key: str, value: object, receiver: object = None) -> None:
    attr = lookup(type(obj), key)
    if isinstance(attr, property):
        if attr.fset is None:
            raise AttributeError(f"property {key!r} of {type(obj).__name__!r} object has no setter")
        attr.fset(obj if receiver is None else receiver, value)
        return
    setattr(obj, key, value)


def default_define(obj: object, key: str, value: object) -> None:
    """Write an own attribute directly, bypassing __setattr__ and properties."""
    attr = lookup(type(obj), key)
    if type(attr) is types.MemberDescriptorType:
        attr.__set__(obj, value)
        return
    namespace = _namespace(obj)
    if namespace is None:
        raise AttributeError(f"{type(obj).__name__!r} object has no attribute {key!r}")
    namespace[key] = value


def default_delete(obj: object, key: str, receiver: object = None) -> bool:
    """Delete key; False when there was nothing deletable."""
    attr = lookup(type(obj), key)
    if isinstance(attr, property):
        if attr.fdel is None:
            return False
        attr.fdel(obj if receiver is None else receiver)
        return True
    if not has_own(obj, key):
        return False
    delattr(obj, key)
    return True


def default_has(obj: object, key: str) -> bool:
    return has_own(obj, key) or lookup(type(obj), key) is not MISSING


def default_own_keys(obj: object) -> list[str]:
    namespace = _namespace(obj)
    keys = list(namespace) if namespace is not None else []
    for base in type(obj).__mro__:
        for name, attr in vars(base).items():
            if type(attr) is types.MemberDescriptorType and name not in keys and has_own(obj, name):
                keys.append(name)
    return keys


def default_get_class(obj: object) -> type:
    return obj.__class__


def default_set_class(obj: object, cls: type) -> None:
    obj.__class__ = cls


def default_is_extensible(obj: object) -> bool:
    return _namespace(obj) is not None
