"""
globdispatch: resolve glob patterns to paths and dispatch them to a command.
"""

from globdispatch.dispatcher import CommandDispatcher, parse_command_template
from globdispatch.errors import GlobDispatchError, InvalidOptionError, PatternError
from globdispatch.file_resolver import FileResolver, MatchSet, ResolveResult, ResolverConfig
from globdispatch.platforms import PlatformId, validate_platform

__all__ = [
    "CommandDispatcher",
    "FileResolver",
    "GlobDispatchError",
    "InvalidOptionError",
    "MatchSet",
    "PatternError",
    "PlatformId",
    "ResolveResult",
    "ResolverConfig",
    "parse_command_template",
    "validate_platform",
]
