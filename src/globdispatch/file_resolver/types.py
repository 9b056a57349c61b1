"""Configuration and result types for file resolution."""

from __future__ import annotations

from dataclasses import dataclass, field

from globdispatch.errors import PatternError
from globdispatch.platforms import PlatformId, current_platform


@dataclass(frozen=True)
class ResolverConfig:
    """
    Immutable options threaded through resolution and matching for a single run.

    `all=True` disables the exact-match short-circuit so every pattern is
    expanded. `tool_name` determines the ignore file name (e.g.,
    `.globdispatchignore`). `ignore` holds extra gitignore-style patterns
    applied to glob expansions.
    """

    platform: PlatformId = field(default_factory=current_platform)
    all: bool = False
    dot: bool = False
    nocase: bool = False
    follow: bool = False
    mark: bool = False
    absolute: bool = False
    dot_relative: bool = False
    brace: bool = True
    extglob: bool = True
    globstar: bool = True
    match_base: bool = False
    windows_paths_no_escape: bool = False
    ignore: tuple[str, ...] = ()
    respect_ignore_file: bool = True
    tool_name: str = "globdispatch"


@dataclass(frozen=True)
class MatchSet:
    """Resolved paths for one input pattern. `exact` marks a literal-path hit."""

    pattern: str
    paths: tuple[str, ...]
    exact: bool = False


@dataclass
class ResolveResult:
    """Per-pattern match sets in input order, plus any per-pattern errors."""

    match_sets: list[MatchSet] = field(default_factory=list)
    errors: list[PatternError] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        """The ordered concatenation of all match sets. Duplicates are kept."""
        return [path for match_set in self.match_sets for path in match_set.paths]

    @property
    def no_matches(self) -> bool:
        return not any(match_set.paths for match_set in self.match_sets)
