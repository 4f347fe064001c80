"""Batched mutations — actions, transactions and batch().

Every notification raised inside the outermost batch is delivered once the
batch exits, so a dependent wakes up once per batch and only sees the final
state. The policies use this around each intercepted mutation; callers can
group several mutations the same way.
"""

from __future__ import annotations

import functools
from typing import TypeVar, Callable, ParamSpec
from contextlib import contextmanager
from facadex._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all mutations performed inside fn.

    Usage:
        point = wrap(Point(0, 0))

        @action
        def move(dx, dy):
            point.x += dx
            point.y += dy
            # readers of x and y re-run once, after both writes
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager form of action.

    Usage:
        with transaction():
            point.x = 1
            point.y = 2
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def batch(fn: Callable[[], R]) -> R:
    """Run fn inside a transaction and return its result."""
    begin_batch()
    try:
        return fn()
    finally:
        end_batch()
