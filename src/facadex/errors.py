"""Exceptions raised by facadex itself.

Errors raised by user getters, setters or collection methods are never
wrapped; they reach the caller unchanged.
"""


class FacadexError(Exception):
    """Base class for facadex errors."""


class NotAttachedError(FacadexError, LookupError):
    """An object has no live facade, or a facade has been disposed."""


class CircularGetterError(FacadexError, RuntimeError):
    """A memoized getter read itself before its first value existed."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"The {tag!r} getter called itself while being memoized")
        self.tag = tag
