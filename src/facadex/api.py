"""Public entry points — wrapping, disposal and reflect-style routing.

wrap() is idempotent: a raw object has at most one live facade, and asking
again returns it. dispose() tears the facade down (its scope included) and
detaches it, so the next wrap() builds a fresh one. A facade that is no
longer referenced anywhere is torn down the same way when it is collected,
so keep the facade itself, not just its raw object, while it is in use.

The reflect-style functions (get_attr, set_attr, delete_attr, ...) route
through the facade's policy when given a facade, and fall back to plain
object semantics for anything else.
"""

from __future__ import annotations

import logging

from facadex.base import BasePolicy, get_facade, get_policy, get_raw, is_attached
from facadex.facade import facade_id, is_facade, is_live
from facadex.tracking import TrackingPolicy
from facadex import _anchor, reflect

logger = logging.getLogger("facadex.api")

_default_policy: type[BasePolicy] | BasePolicy = TrackingPolicy


def set_default_policy(policy: type[BasePolicy] | BasePolicy) -> None:
    """Choose the policy wrap() uses when none is given.

    Accepts a policy class (instantiated on each wrap) or an instance.
    """
    global _default_policy
    _default_policy = policy


def get_default_policy() -> type[BasePolicy] | BasePolicy:
    return _default_policy


def wrap(raw, policy: type[BasePolicy] | BasePolicy | None = None):
    """Return the facade of raw, creating it on first use.

    A facade passed in is returned as is; so is the existing facade of an
    already wrapped object, whatever policy is asked for.
    """
    if is_facade(raw):
        return get_facade(raw)
    existing = is_attached(raw)
    if existing is not None:
        return existing
    if policy is None:
        policy = _default_policy
    if isinstance(policy, type):
        policy = policy()
    return policy.create(raw)


def is_wrapped(obj) -> bool:
    """Whether obj is a live facade, or a raw object that currently has one."""
    if is_facade(obj):
        return is_live(obj)
    return is_attached(obj) is not None


def dispose(obj) -> None:
    """Tear down the facade of obj. Calling it again does nothing."""
    if is_facade(obj):
        if not is_live(obj):
            return
        facade = obj
    else:
        facade = is_attached(obj)
        if facade is None:
            return
    fid = facade_id(facade)
    _anchor.policies[fid].teardown(fid)
    logger.debug("Disposed facade #%d", fid)


def notify(obj, key) -> bool:
    """Force the readers of key to re-run; False when nobody was listening."""
    return get_policy(obj).update(get_raw(obj), key)


def reset(obj, key) -> bool:
    """Drop the memoized value of a getter and notify its readers."""
    policy = get_policy(obj)
    if not hasattr(policy, "reset"):
        raise TypeError(f"{type(policy).__name__} does not memoize getters")
    return policy.reset(get_raw(obj), key)


def _route(obj):
    if is_facade(obj):
        return get_raw(obj), get_policy(obj)
    return obj, None


def get_attr(obj, key, receiver=None):
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_get(raw, key, receiver)
    return policy.get(raw, key, obj if receiver is None else receiver)


def set_attr(obj, key, value, receiver=None) -> bool:
    raw, policy = _route(obj)
    if policy is None:
        reflect.default_set(raw, key, value, receiver)
        return True
    return policy.set(raw, key, value, obj if receiver is None else receiver)


def delete_attr(obj, key) -> bool:
    """Delete an attribute; False (and no notification) when there was none."""
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_delete(raw, key)
    return policy.delete(raw, key, obj)


def define_attr(obj, key, value) -> bool:
    """Write an own attribute directly, bypassing properties and __setattr__."""
    raw, policy = _route(obj)
    if policy is None:
        reflect.default_define(raw, key, value)
        return True
    return policy.define(raw, key, value)


def has_attr(obj, key) -> bool:
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_has(raw, key)
    return policy.has(raw, key)


def own_keys(obj) -> list[str]:
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_own_keys(raw)
    return policy.own_keys(raw)


def get_class(obj) -> type:
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_get_class(raw)
    return policy.get_class(raw)


def set_class(obj, cls: type) -> bool:
    raw, policy = _route(obj)
    if policy is None:
        reflect.default_set_class(raw, cls)
        return True
    return policy.set_class(raw, cls)


def is_extensible(obj) -> bool:
    raw, policy = _route(obj)
    if policy is None:
        return reflect.default_is_extensible(raw)
    return policy.is_extensible(raw)


def prevent_extensions(obj) -> bool:
    """Refuse new attributes on a facade from now on."""
    raw, policy = _route(obj)
    if policy is None:
        raise TypeError(f"only facades can be sealed, not {type(raw).__name__!r} objects")
    return policy.prevent_extensions(raw)
