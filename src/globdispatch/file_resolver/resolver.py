"""
FileResolver: main entry point for pattern resolution.

Resolves a list of literal paths and glob patterns into an ordered list of
concrete paths. A literal path that exists on disk takes priority over glob
interpretation of the same string unless `all` is set.
"""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Sequence
from pathlib import Path

import pathspec

from globdispatch.errors import PatternError
from globdispatch.file_resolver.ignore import build_ignore_spec
from globdispatch.file_resolver.matcher import PathMatcher, render_path, to_posix
from globdispatch.file_resolver.types import MatchSet, ResolveResult, ResolverConfig

logger = logging.getLogger(__name__)


class FileResolver:
    """
    Applies the resolution policy to each input pattern in order and merges the
    results without cross-pattern deduplication.
    """

    def __init__(self, config: ResolverConfig) -> None:
        self._config: ResolverConfig = config
        # Ignore specs depend on the working directory (ignore files are found
        # by walking up from it), so cache one per resolved directory.
        self._ignore_cache: dict[Path, pathspec.PathSpec | None] = {}

    def resolve(self, patterns: Sequence[str], cwd: str | Path = ".") -> ResolveResult:
        """
        Resolve input patterns into a `ResolveResult`.

        Each input is handled as:
        - Exists as a literal path (and `all` is off) → emitted alone, no expansion
        - Otherwise → expanded with `PathMatcher`
        - Invalid pattern → recorded in `errors`, remaining patterns still resolve
        """
        result = ResolveResult()
        matcher = PathMatcher(self._config, self._get_ignore_spec(Path(cwd)))

        for pattern in patterns:
            if not self._config.all and self._is_exact_match(pattern, cwd):
                logger.debug("Exact match for %r, skipping expansion", pattern)
                exact = render_path(self._literal_path(pattern, cwd), cwd, self._config)
                result.match_sets.append(MatchSet(pattern, (exact,), exact=True))
                continue
            try:
                paths = matcher.match(pattern, cwd)
            except PatternError as e:
                logger.debug("Pattern error: %s", e)
                result.errors.append(e)
                continue
            result.match_sets.append(MatchSet(pattern, tuple(paths)))

        return result

    def _literal_path(self, pattern: str, cwd: str | Path) -> str:
        """Normalized forward-slash form of a literal hit, marked like glob matches."""
        literal = posixpath.normpath(to_posix(pattern))
        if (
            self._config.mark
            and not literal.endswith("/")
            and os.path.isdir(os.path.join(cwd, pattern))
        ):
            literal += "/"
        return literal

    @staticmethod
    def _is_exact_match(pattern: str, cwd: str | Path) -> bool:
        """Literal existence test: no glob evaluation."""
        if not pattern:
            return False
        return os.path.exists(os.path.join(cwd, pattern))

    def _get_ignore_spec(self, cwd: Path) -> pathspec.PathSpec | None:
        """Lazily build the ignore spec, cached per resolved working directory."""
        resolved = cwd.resolve()
        if resolved not in self._ignore_cache:
            tool_name = self._config.tool_name if self._config.respect_ignore_file else None
            self._ignore_cache[resolved] = build_ignore_spec(
                self._config.ignore, tool_name, resolved
            )
        return self._ignore_cache[resolved]
