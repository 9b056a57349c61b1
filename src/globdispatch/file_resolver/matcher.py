"""
PathMatcher: thin adapter over the `wcmatch` glob engine.

Patterns always use forward slashes. Matches are rendered relative to the
working directory with the configured platform's separator.
"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path

import pathspec
from wcmatch import glob as wcglob

from globdispatch.errors import PatternError
from globdispatch.file_resolver.types import ResolverConfig

logger = logging.getLogger(__name__)


def to_posix(path: str) -> str:
    """Convert an OS-native path string to forward-slash form."""
    if os.sep != "/":
        return path.replace(os.sep, "/")
    return path


def render_path(posix_path: str, cwd: str | Path, config: ResolverConfig) -> str:
    """
    Render a forward-slash relative path for output, applying `absolute` or
    `dot_relative` and the platform's native separator.
    """
    if config.absolute and not posixpath.isabs(posix_path):
        base = Path(cwd).resolve().as_posix()
        posix_path = posixpath.join(base, posix_path)
    elif config.dot_relative and not posixpath.isabs(posix_path):
        if not (posix_path == "." or posix_path.startswith(("./", "../"))):
            posix_path = "./" + posix_path
    sep = config.platform.sep
    if sep != "/":
        return posix_path.replace("/", sep)
    return posix_path


def _glob_flags(config: ResolverConfig) -> int:
    flags = 0
    if config.globstar:
        flags |= wcglob.GLOBSTAR
    if config.brace:
        flags |= wcglob.BRACE
    if config.extglob:
        flags |= wcglob.EXTGLOB
    if config.dot:
        flags |= wcglob.DOTGLOB
    if config.nocase or config.platform.case_insensitive:
        flags |= wcglob.IGNORECASE
    if config.follow:
        flags |= wcglob.FOLLOW
    if config.mark:
        flags |= wcglob.MARK
    if config.match_base:
        flags |= wcglob.MATCHBASE
    return flags


class PathMatcher:
    """
    Expands one glob pattern at a time against a working directory.

    Results are deduplicated and sorted so output is stable for a fixed
    filesystem state. Matches whose relative path is covered by `ignore_spec`
    are dropped.
    """

    def __init__(self, config: ResolverConfig, ignore_spec: pathspec.PathSpec | None = None) -> None:
        self._config: ResolverConfig = config
        self._flags: int = _glob_flags(config)
        self._ignore_spec: pathspec.PathSpec | None = ignore_spec

    def match(self, pattern: str, cwd: str | Path) -> list[str]:
        """
        Return the rendered paths under `cwd` matching `pattern`.
        Raises `PatternError` if the pattern can't be evaluated.
        """
        if not pattern:
            raise PatternError(pattern, "pattern is empty")
        if "\0" in pattern:
            raise PatternError(pattern, "pattern contains a NUL character")
        if self._config.windows_paths_no_escape:
            pattern = pattern.replace("\\", "/")

        try:
            found = wcglob.glob(pattern, flags=self._flags, root_dir=os.fspath(cwd))
        except ValueError as e:
            raise PatternError(pattern, str(e)) from e

        results: list[str] = []
        for raw in sorted(set(found)):
            rel = to_posix(raw)
            if self._ignore_spec is not None and self._ignore_spec.match_file(rel):
                continue
            results.append(render_path(rel, cwd, self._config))
        logger.debug("Pattern %r matched %d path(s)", pattern, len(results))
        return results
