"""Memo policy — getters evaluated at most once per invalidation.

Reading a property through the facade turns its getter into a Computed
bound to the facade and owned by the facade's scope. Readers track the same
store key a data attribute would use, so deleting, redefining or re-classing
the attribute reaches them too; those structural changes evict the memo
before notifying, and the next read rebuilds it.

Memos are bound to one facade: when something else is the receiver (a
get_attr(facade, key, receiver=other) call), the raw getter runs fresh.

While a memo computes its first value, its cache slot holds a placeholder
that calls circular(), so a getter that reads itself fails with
CircularGetterError instead of recursing. Override circular() to return a
fallback value instead.
"""

from __future__ import annotations

import functools
import logging
import weakref

from facadex.action import transaction
from facadex.atom import ReadOnlyAtom
from facadex.base import SPECIAL_KEYS, get_facade, state_id
from facadex.computed import Computed
from facadex.disposable import DisposablePolicy, get_owner
from facadex.errors import CircularGetterError
from facadex.owner import on_cleanup, run_in_scope
from facadex import _anchor, reflect

logger = logging.getLogger("facadex.memo")


def get_cache(obj: object) -> dict:
    """The memo cache of a facade: getter name -> Computed.

    Only getters that were read through the facade have an entry; plain
    attributes are classified on every read and never cached.
    """
    return _anchor.caches[state_id(obj)]


def _forget(cache: dict, key, memo: Computed) -> None:
    if cache.get(key) is memo:
        del cache[key]


class MemoPolicy(DisposablePolicy):
    """Disposable policy that caches property getters."""

    def setup(self, fid: int) -> None:
        super().setup(fid)
        _anchor.caches[fid] = {}

    def teardown(self, fid: int) -> None:
        super().teardown(fid)
        _anchor.caches.pop(fid, {}).clear()

    def get(self, raw, key, receiver):
        if key in SPECIAL_KEYS:
            return super().get(raw, key, receiver)
        if receiver is not get_facade(raw):
            if reflect.find_getter(raw, key) is not None:
                return reflect.default_get(raw, key, receiver)
            return super().get(raw, key, receiver)

        memo = get_cache(raw).get(key)
        if memo is None:
            getter = reflect.find_getter(raw, key)
            if getter is None:
                return super().get(raw, key, receiver)
            return self.memoize(raw, key, getter)

        self.track(raw, key)
        return memo.get()

    def delete(self, raw, key, receiver=None) -> bool:
        own = reflect.has_own(raw, key)
        with transaction():
            if not super().delete(raw, key, receiver):
                return False
            if own:
                self.evict(raw, key)
        return True

    def define(self, raw, key, value) -> bool:
        with transaction():
            super().define(raw, key, value)
            self.evict(raw, key)
        return True

    def set_class(self, raw, cls: type) -> bool:
        if cls is reflect.default_get_class(raw):
            return True
        with transaction():
            super().set_class(raw, cls)
            # Getters come from the class, so none of them survives the swap.
            for key in list(get_cache(raw)):
                self.evict(raw, key)
        return True

    def memoize(self, raw, key, getter):
        """Build the memo of a getter, evaluate it, and cache it.

        Nothing stays cached when the first evaluation raises.
        """
        facade = weakref.ref(get_facade(raw))
        owner = get_owner(raw)
        cache = get_cache(raw)
        placeholder = ReadOnlyAtom(functools.partial(self.circular, raw, key, getter))
        cache[key] = placeholder
        memo = run_in_scope(
            owner,
            lambda: Computed(lambda: getter(facade()), functools.partial(self.compare, raw, key)),
        )
        try:
            value = memo.get()
        except BaseException:
            if cache.get(key) is placeholder:
                del cache[key]
            memo.dispose()
            raise
        cache[key] = memo
        run_in_scope(owner, lambda: on_cleanup(functools.partial(_forget, cache, key, memo)))
        self.track(raw, key)
        logger.debug("Memoized %s", self.tag(raw, key))
        return value

    def evict(self, raw, key) -> None:
        """Drop the memo of key, so the next read re-evaluates the getter."""
        memo = get_cache(raw).pop(key, None)
        if isinstance(memo, Computed):
            memo.dispose()
            logger.debug("Evicted memo of %s", self.tag(raw, key))

    def reset(self, raw, key) -> bool:
        """Evict the memo of key and notify its readers."""
        with transaction():
            self.evict(raw, key)
            return self.update(raw, key)

    def circular(self, raw, key, getter):
        """Fallback for a getter that reads itself while being memoized."""
        logger.debug("Circular read of %s while memoizing", self.tag(raw, key))
        raise CircularGetterError(self.tag(raw, key))
