"""Data anchor — plain Python structures that hold all reactive state.

This module stores the raw data for all Observables, Computeds, Reactions
and facades. Handles (cells, derivations, facades) are thin objects holding
an _id; behavior modules look their state up here.
"""

import itertools

# Observable state
values: dict[int, object] = {}
observers: dict[int, set] = {}  # obs_id -> set of derivations
comparators: dict[int, object] = {}  # obs_id/deriv_id -> equals callable, or False

# Derivation state (Computed + Reaction)
dependencies: dict[int, set] = {}  # deriv_id -> set of observable-like handles
dirty_flags: dict[int, bool] = {}
cached_values: dict[int, object] = {}
derivation_fns: dict[int, object] = {}  # deriv_id -> callable
disposed: dict[int, bool] = {}
cleanups: dict[int, list] = {}  # deriv_id -> callables run before re-evaluation
parents: dict[int, object] = {}  # deriv_id -> owning Scope

# Facade state
raws: dict[int, object] = {}  # facade_id -> backing object
policies: dict[int, object] = {}  # facade_id -> interception policy
attachments: dict[int, object] = {}  # id(raw) -> weakref to facade
stores: dict[int, dict] = {}  # facade_id -> tracking key -> Forcer | None
caches: dict[int, dict] = {}  # facade_id -> getter name -> memo
owners: dict[int, object] = {}  # facade_id -> Scope
teardowns: dict[int, object] = {}  # facade_id -> scope teardown handle
finalizers: dict[int, object] = {}  # facade_id -> weakref.finalize tearing the facade down
sealed: set[int] = set()  # facade ids that refuse new attributes

# ID generation: itertools.count is atomic under the GIL
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def release(ident: int) -> None:
    """Drop every cell/derivation entry stored under ident."""
    for table in (
        values,
        observers,
        comparators,
        dependencies,
        dirty_flags,
        cached_values,
        derivation_fns,
        disposed,
        cleanups,
        parents,
    ):
        table.pop(ident, None)
