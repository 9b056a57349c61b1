"""Tool-specific ignore file handling using pathspec."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)


def _read_ignore_file(path: Path) -> list[str] | None:
    """
    Read non-blank, non-comment lines from an ignore file. Returns `None` if the
    file is missing, unreadable, or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return [line for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]


def find_tool_ignore(tool_name: str, start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for `.{tool_name}ignore` (e.g.,
    `.globdispatchignore`). Returns the first found, or `None`.
    """
    ignore_name = f".{tool_name}ignore"
    current = start_dir.resolve()
    while True:
        candidate = current / ignore_name
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def build_ignore_spec(
    patterns: Iterable[str], tool_name: str | None, start_dir: Path
) -> pathspec.PathSpec | None:
    """
    Compile `patterns` plus the nearest tool ignore file (when `tool_name` is
    given) into a single gitignore-style `PathSpec`, or `None` if there is
    nothing to ignore.
    """
    lines = [p for p in patterns if p.strip()]
    if tool_name:
        ignore_file = find_tool_ignore(tool_name, start_dir)
        if ignore_file is not None:
            file_lines = _read_ignore_file(ignore_file)
            if file_lines:
                logger.debug("Using ignore file %s", ignore_file)
                lines.extend(file_lines)
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)
