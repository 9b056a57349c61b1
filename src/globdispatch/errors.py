"""Exception types raised during option validation and pattern resolution."""

from __future__ import annotations


class GlobDispatchError(Exception):
    """Base class for all globdispatch errors."""


class PatternError(GlobDispatchError, ValueError):
    """
    A glob pattern could not be evaluated. Aborts resolution of that pattern only;
    sibling patterns still resolve.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern: str = pattern
        self.reason: str = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


class InvalidOptionError(GlobDispatchError, ValueError):
    """An option was given a value outside its allowed set. Always fatal."""

    def __init__(self, option: str, value: str) -> None:
        self.option: str = option
        self.value: str = value
        super().__init__(f'Invalid value provided for {option}: "{value}"')
