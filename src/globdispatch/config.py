"""
TOML-based config file loading for globdispatch.

Searches for `.globdispatch.toml`, `globdispatch.toml`, or
`pyproject.toml [tool.globdispatch]` walking up from the current directory.
Config values are merged with CLI flags using three-way precedence:
explicit CLI flags > config file > built-in defaults.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class GlobDispatchConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    so merging can tell "not configured" apart from "set to the default".
    """

    # Resolution
    default_patterns: list[str] | None = None
    ignore: list[str] | None = None
    respect_ignore_file: bool | None = None
    platform: str | None = None
    dot: bool | None = None
    nocase: bool | None = None
    follow: bool | None = None
    # Output
    mark: bool | None = None
    absolute: bool | None = None
    dot_relative: bool | None = None
    # Dispatch
    each: bool | None = None
    jobs: int | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = (".globdispatch.toml", "globdispatch.toml", "pyproject.toml")

_TOOL_SECTION = "globdispatch"

# Pattern lists accept a bare string as shorthand for a one-element list.
_PATTERN_LIST_FIELDS = frozenset({"default_patterns", "ignore"})
_BOOL_FIELDS = frozenset(
    {"respect_ignore_file", "dot", "nocase", "follow", "mark", "absolute", "dot_relative", "each"}
)
_INT_FIELDS = frozenset({"jobs"})
_STR_FIELDS = frozenset({"platform"})

_VALID_FIELDS = {f.name for f in fields(GlobDispatchConfig)}


def _candidate_dirs(start_dir: Path) -> Iterator[Path]:
    current = start_dir.resolve()
    yield current
    yield from current.parents


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.globdispatch.toml` >
    `globdispatch.toml` > `pyproject.toml` (only if it has `[tool.globdispatch]`).
    """
    for directory in _candidate_dirs(start_dir):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _pyproject_has_tool_section(candidate):
                return candidate
    return None


def _pyproject_has_tool_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
    except (tomllib.TOMLDecodeError, OSError):
        return False
    return _TOOL_SECTION in data.get("tool", {})


def load_config(config_path: Path) -> GlobDispatchConfig:
    """
    Load a `GlobDispatchConfig` from a TOML file. Supports standalone
    `globdispatch.toml` / `.globdispatch.toml` and `pyproject.toml`
    (`[tool.globdispatch]`).

    Raises `ValueError` (including `tomllib.TOMLDecodeError`) if the file is
    malformed or a value has the wrong type.
    """
    data = tomllib.loads(config_path.read_text())
    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get(_TOOL_SECTION, {})
    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> GlobDispatchConfig:
    """
    Parse a flat or sectioned TOML dict into a typed `GlobDispatchConfig`.
    Tables like `[resolution]` or `[dispatch]` are flattened; kebab-case keys map
    to snake_case; unknown keys are ignored.
    """
    values: dict[str, Any] = {}
    for key, value in _flatten(data):
        name = key.replace("-", "_")
        if name in _VALID_FIELDS:
            values[name] = _check_value(key, name, value)
    return GlobDispatchConfig(**values)


def _flatten(data: dict[str, Any]) -> Iterator[tuple[str, Any]]:
    for key, value in data.items():
        if isinstance(value, dict):
            yield from cast(dict[str, Any], value).items()
        else:
            yield key, value


def _check_value(key: str, name: str, value: Any) -> Any:
    """Validate one config value against its field type, normalizing pattern lists."""
    if name in _PATTERN_LIST_FIELDS:
        if isinstance(value, str):
            return [value]
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return list(cast(list[str], value))
        raise ValueError(f"{key} must be a string or a list of strings, got {value!r}")
    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be true or false, got {value!r}")
        return value
    if name in _INT_FIELDS:
        # bool is an int subclass; `jobs = true` is still a mistake.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        return value
    if name in _STR_FIELDS:
        if not isinstance(value, str):
            raise ValueError(f"{key} must be a string, got {value!r}")
        return value
    raise AssertionError(f"Unhandled config field: {name}")


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: GlobDispatchConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy configured values onto `cli_opts`, except for options the user passed
    explicitly on the command line.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(GlobDispatchConfig):
        name = cfg_field.name
        value = getattr(config, name)
        if value is None or name in explicit_flags or not hasattr(cli_opts, name):
            continue
        setattr(cli_opts, name, value)

    return cli_opts
