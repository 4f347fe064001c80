"""Identity layer — raw object <-> facade attachment, and the base policy.

The attachment lives out-of-band in _anchor (keyed by the raw object's id,
which stays valid because the facade state holds the raw object), so it
never shows up in vars(), equality or pickling of the raw object.

Attachments hold their facade weakly. A facade nobody references any more
is torn down by a finalizer, exactly as if dispose() had been called on it,
and the next wrap() of its raw object builds a new one.

BasePolicy is the leaf of the policy hierarchy: it creates and attaches
facades, and answers every intercepted operation with plain object
semantics (facadex.reflect). Subclasses layer their concern on top by
overriding an operation and calling super().
"""

from __future__ import annotations

import logging
import types
import weakref

from facadex.errors import NotAttachedError
from facadex.facade import Facade, facade_id, is_facade, is_live, new_facade
from facadex import _anchor, reflect

logger = logging.getLogger("facadex.base")

SPECIAL_KEYS = frozenset({"__class__", "__dict__"})


def attach(raw: object, facade: Facade | None) -> None:
    """Associate raw with facade, replacing any previous facade.

    attach(raw, None) detaches, so the next wrap(raw) builds a new facade.
    """
    if facade is None:
        _anchor.attachments.pop(id(raw), None)
    else:
        _anchor.attachments[id(raw)] = weakref.ref(facade)


def is_attached(raw: object) -> Facade | None:
    """The facade attached to raw, or None."""
    ref = _anchor.attachments.get(id(raw))
    return None if ref is None else ref()


def get_facade(obj: object) -> Facade:
    """The facade of obj, which may itself be a live facade."""
    if is_facade(obj):
        if not is_live(obj):
            raise NotAttachedError(f"facade #{facade_id(obj)} has been disposed")
        return obj
    facade = is_attached(obj)
    if facade is None:
        raise NotAttachedError(f"{type(obj).__name__!r} object is not wrapped")
    return facade


def get_raw(obj: object) -> object:
    """The backing object of a facade. A wrapped raw object maps to itself."""
    if is_facade(obj):
        try:
            return _anchor.raws[facade_id(obj)]
        except KeyError:
            raise NotAttachedError(f"facade #{facade_id(obj)} has been disposed") from None
    get_facade(obj)
    return obj


def get_policy(obj: object):
    return _anchor.policies[facade_id(get_facade(obj))]


def state_id(obj: object) -> int:
    """Key of the per-facade state tables for a raw object or its facade."""
    return facade_id(get_facade(obj))


def _collect(policy: BasePolicy, fid: int) -> None:
    logger.debug("Facade #%d was garbage collected", fid)
    policy.teardown(fid)


class BasePolicy:
    """Interception policy with plain object semantics.

    Operations receive the raw object first; receiver is whatever the
    access was performed on (normally the facade).
    """

    def create(self, raw: object) -> Facade:
        """Build, attach and initialise a facade for raw."""
        fid = _anchor.new_id()
        facade = new_facade(fid)
        _anchor.raws[fid] = raw
        _anchor.policies[fid] = self
        attach(raw, facade)
        finalizer = weakref.finalize(facade, _collect, self, fid)
        finalizer.atexit = False
        _anchor.finalizers[fid] = finalizer
        self.setup(fid)
        logger.debug("Wrapped %s with %s as facade #%d", type(raw).__name__, type(self).__name__, fid)
        return facade

    def setup(self, fid: int) -> None:
        """Create the per-facade state this policy needs."""

    def teardown(self, fid: int) -> None:
        """Release the per-facade state.

        Runs once, from dispose() or when the facade is garbage collected.
        """
        finalizer = _anchor.finalizers.pop(fid, None)
        if finalizer is not None:
            finalizer.detach()
        raw = _anchor.raws.pop(fid, None)
        _anchor.policies.pop(fid, None)
        _anchor.sealed.discard(fid)
        ref = _anchor.attachments.get(id(raw))
        if ref is not None:
            current = ref()
            if current is None or facade_id(current) == fid:
                attach(raw, None)

    # --- Intercepted operations ---

    def get(self, raw, key, receiver):
        if key == "__class__":
            return self.get_class(raw)
        if key == "__dict__":
            self.own_keys(raw)
            return types.MappingProxyType(reflect.default_get(raw, key))
        return reflect.default_get(raw, key, receiver)

    def set(self, raw, key, value, receiver) -> bool:
        if key == "__class__":
            return self.set_class(raw, value)
        if not reflect.is_accessor(raw, key):
            self.check_extensible(raw, key)
        reflect.default_set(raw, key, value, receiver)
        return True

    def delete(self, raw, key, receiver=None) -> bool:
        return reflect.default_delete(raw, key, receiver)

    def define(self, raw, key, value) -> bool:
        self.check_extensible(raw, key)
        reflect.default_define(raw, key, value)
        return True

    def has(self, raw, key) -> bool:
        return reflect.default_has(raw, key)

    def own_keys(self, raw) -> list[str]:
        return reflect.default_own_keys(raw)

    def get_class(self, raw) -> type:
        return reflect.default_get_class(raw)

    def set_class(self, raw, cls: type) -> bool:
        reflect.default_set_class(raw, cls)
        return True

    def is_extensible(self, raw) -> bool:
        return reflect.default_is_extensible(raw) and state_id(raw) not in _anchor.sealed

    def prevent_extensions(self, raw) -> bool:
        _anchor.sealed.add(state_id(raw))
        return True

    # --- Helpers ---

    def check_extensible(self, raw, key) -> None:
        """Refuse to create a new own attribute on a sealed facade."""
        if state_id(raw) in _anchor.sealed and not reflect.has_own(raw, key):
            raise AttributeError(
                f"cannot add attribute {key!r}: {type(raw).__name__!r} object is not extensible"
            )

    def tag(self, raw, key) -> str:
        """Human readable name of a property, used in errors and logs."""
        name = key.value if isinstance(key, reflect.Internal) else key
        return f"{type(raw).__name__}.{name}"


