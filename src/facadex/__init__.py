"""facadex: transparent reactive facades over plain Python objects."""

from importlib.metadata import version as _version

__version__ = _version("facadex")

from facadex._tracking import currently_tracking, get_pending_count, untracked
from facadex.observable import Observable, create_cell
from facadex.computed import Computed, computed, create_derived
from facadex.reaction import Reaction, autorun, reaction
from facadex.action import action, batch, transaction
from facadex.owner import Scope, create_scope, get_scope, on_cleanup, run_in_scope
from facadex.errors import CircularGetterError, FacadexError, NotAttachedError
from facadex.reflect import Internal
from facadex.base import BasePolicy, attach, get_facade, get_raw, is_attached
from facadex.tracking import TrackingPolicy, get_store, same_value_zero
from facadex.disposable import DisposablePolicy, get_owner
from facadex.memo import MemoPolicy, get_cache
from facadex.api import (
    define_attr,
    delete_attr,
    dispose,
    get_attr,
    get_class,
    get_default_policy,
    has_attr,
    is_extensible,
    is_wrapped,
    notify,
    own_keys,
    prevent_extensions,
    reset,
    set_attr,
    set_class,
    set_default_policy,
    wrap,
)
from facadex.collection import CollectionPolicy, ReactiveList
from facadex.atom import Atom, ReadOnlyAtom, identity, name_of

__all__ = [
    "Observable",
    "create_cell",
    "Computed",
    "computed",
    "create_derived",
    "Reaction",
    "autorun",
    "reaction",
    "action",
    "transaction",
    "batch",
    "Scope",
    "create_scope",
    "get_scope",
    "on_cleanup",
    "run_in_scope",
    "currently_tracking",
    "untracked",
    "get_pending_count",
    "FacadexError",
    "NotAttachedError",
    "CircularGetterError",
    "Internal",
    "BasePolicy",
    "TrackingPolicy",
    "DisposablePolicy",
    "MemoPolicy",
    "CollectionPolicy",
    "ReactiveList",
    "same_value_zero",
    "wrap",
    "is_wrapped",
    "dispose",
    "notify",
    "reset",
    "attach",
    "is_attached",
    "get_facade",
    "get_raw",
    "get_store",
    "get_owner",
    "get_cache",
    "get_attr",
    "set_attr",
    "delete_attr",
    "define_attr",
    "has_attr",
    "own_keys",
    "get_class",
    "set_class",
    "is_extensible",
    "prevent_extensions",
    "set_default_policy",
    "get_default_policy",
    "Atom",
    "ReadOnlyAtom",
    "identity",
    "name_of",
]
