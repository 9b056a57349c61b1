"""
Self-contained pattern resolution with exact-match precedence and
gitignore-style exclusions.

Usage::

    from globdispatch.file_resolver import FileResolver, ResolverConfig

    config = ResolverConfig(all=False, ignore=("build/",))
    resolver = FileResolver(config)
    result = resolver.resolve(["src/**/*.py", "routes/[id].tsx"], cwd=".")
    for path in result.paths:
        print(path)
"""

from globdispatch.file_resolver.matcher import PathMatcher
from globdispatch.file_resolver.resolver import FileResolver
from globdispatch.file_resolver.types import MatchSet, ResolveResult, ResolverConfig

__all__ = [
    "FileResolver",
    "MatchSet",
    "PathMatcher",
    "ResolveResult",
    "ResolverConfig",
]
