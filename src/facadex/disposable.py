"""Disposable policy — gives every facade an ownership scope of its own.

The scope is created once, with the facade, and torn down when the facade
is disposed. Other policies register their derivations and cleanups on it.
"""

from __future__ import annotations

from facadex.base import state_id
from facadex.owner import Scope, create_scope
from facadex.tracking import TrackingPolicy
from facadex import _anchor


def get_owner(obj: object) -> Scope:
    """The ownership scope of a facade (or of a wrapped raw object)."""
    return _anchor.owners[state_id(obj)]


class DisposablePolicy(TrackingPolicy):
    """Tracking policy plus a per-facade Scope."""

    def setup(self, fid: int) -> None:
        super().setup(fid)
        raw = _anchor.raws[fid]
        scope, teardown = create_scope(f"{type(raw).__name__}#{fid}", detached=True)
        _anchor.owners[fid] = scope
        _anchor.teardowns[fid] = teardown

    def teardown(self, fid: int) -> None:
        teardown = _anchor.teardowns.pop(fid, None)
        if teardown is not None:
            teardown()
        _anchor.owners.pop(fid, None)
        super().teardown(fid)
