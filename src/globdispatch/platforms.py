"""
Supported platform identifiers and validation of `--platform` overrides.

A platform only selects path semantics: the separator used when rendering
matches and whether matching is case-insensitive by default.
"""

from __future__ import annotations

import sys
from enum import Enum

from globdispatch.errors import InvalidOptionError


class PlatformId(str, Enum):
    """Operating-system identifiers accepted by `--platform`."""

    aix = "aix"
    android = "android"
    cygwin = "cygwin"
    darwin = "darwin"
    freebsd = "freebsd"
    haiku = "haiku"
    linux = "linux"
    netbsd = "netbsd"
    openbsd = "openbsd"
    sunos = "sunos"
    win32 = "win32"

    @property
    def sep(self) -> str:
        """Native path separator used when rendering matches."""
        return "\\" if self is PlatformId.win32 else "/"

    @property
    def case_insensitive(self) -> bool:
        """Whether filesystems on this platform match names case-insensitively."""
        return self in (PlatformId.win32, PlatformId.darwin)


SUPPORTED_PLATFORMS: tuple[str, ...] = tuple(p.value for p in PlatformId)

# `sys.platform` values that don't map directly onto a `PlatformId`.
_SYS_PLATFORM_ALIASES: dict[str, PlatformId] = {
    "sunos5": PlatformId.sunos,
    "msys": PlatformId.win32,
}


def validate_platform(value: str, option: str = "--platform") -> PlatformId:
    """
    Return the `PlatformId` named by `value`, or raise `InvalidOptionError`
    carrying the literal value and the option name.
    """
    try:
        return PlatformId(value)
    except ValueError:
        raise InvalidOptionError(option, value) from None


def current_platform() -> PlatformId:
    """Best-effort mapping of the running interpreter's `sys.platform`."""
    name = sys.platform
    if name in _SYS_PLATFORM_ALIASES:
        return _SYS_PLATFORM_ALIASES[name]
    for platform in PlatformId:
        if name.startswith(platform.value):
            return platform
    return PlatformId.linux
