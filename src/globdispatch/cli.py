#!/usr/bin/env python3
"""
globdispatch: Expand glob patterns into matching paths, optionally running a command on them

Common usage:
  globdispatch '**/*.py'
  globdispatch --all 'routes/[id].tsx'
  globdispatch -c 'wc -l' 'src/**/*.py'
  globdispatch -c 'gzip -k {}' --each -j 4 'logs/*.log'

Arguments that exactly name an existing file are printed as-is rather than
expanded, unless --all is given. Matched paths are passed to --cmd as separate
arguments and never through a shell.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from globdispatch.config import find_config_file, load_config, merge_cli_with_config
from globdispatch.dispatcher import CommandDispatcher, parse_command_template
from globdispatch.errors import InvalidOptionError
from globdispatch.file_resolver import FileResolver, ResolverConfig
from globdispatch.platforms import PlatformId, current_platform, validate_platform

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the globdispatch tool."""

    patterns: list[str]
    extra_patterns: list[str]
    default_patterns: list[str]
    all: bool
    platform: str | None
    cmd: str | None
    each: bool
    jobs: int
    cwd: str
    # Matching options
    dot: bool
    nocase: bool
    follow: bool
    mark: bool
    absolute: bool
    dot_relative: bool
    nobrace: bool
    noext: bool
    noglobstar: bool
    match_base: bool
    windows_paths_no_escape: bool
    ignore: list[str]
    respect_ignore_file: bool
    no_config: bool
    debug: bool
    version: bool


def _build_parser(sentinel: object | None = None) -> argparse.ArgumentParser:
    """
    Build the argument parser. With `sentinel`, every config-backed option
    defaults to it instead of its real default, so that a re-parse reveals which
    flags the user actually passed.
    """

    def default(value: object) -> object:
        return value if sentinel is None else sentinel

    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    parser = argparse.ArgumentParser(
        prog="globdispatch",
        description=doc_parts[0],
        epilog="\n\n".join(doc_parts[1:]),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=sentinel is None,
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        type=str,
        default=[],
        help="Glob patterns or literal paths to resolve",
    )
    parser.add_argument(
        "-p",
        "--pattern",
        action="append",
        dest="extra_patterns",
        default=[],
        metavar="PATTERN",
        help="Additional pattern, equivalent to a positional pattern. Can be repeated",
    )
    parser.add_argument(
        "-A",
        "--all",
        action="store_true",
        help="Expand every pattern, even ones that exactly match an existing file",
    )
    parser.add_argument(
        "--platform",
        type=str,
        default=default(None),
        metavar="ID",
        help=f"Use path semantics of this platform (one of: {', '.join(p.value for p in PlatformId)})",
    )
    parser.add_argument(
        "-c",
        "--cmd",
        type=str,
        default=None,
        metavar="COMMAND",
        help="Run COMMAND with the matched paths as arguments ('{}' marks where they go). "
        "Use --dot-relative so paths starting with '-' aren't read as options",
    )
    parser.add_argument(
        "--each",
        action="store_true",
        default=default(False),
        help="Run --cmd once per matched path instead of once for all paths",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=default(1),
        metavar="N",
        help="Run up to N --each commands in parallel (default: %(default)s)",
    )
    parser.add_argument(
        "-C",
        "--cwd",
        type=str,
        default=".",
        metavar="DIR",
        help="Resolve patterns relative to DIR (default: current directory)",
    )
    parser.add_argument(
        "-d", "--dot", action="store_true", default=default(False), help="Let wildcards match dotfiles"
    )
    parser.add_argument(
        "--nocase",
        action="store_true",
        default=default(False),
        help="Match case-insensitively (default on darwin and win32)",
    )
    parser.add_argument(
        "-F",
        "--follow",
        action="store_true",
        default=default(False),
        help="Follow symlinked directories when expanding **",
    )
    parser.add_argument(
        "-m",
        "--mark",
        action="store_true",
        default=default(False),
        help="Append a path separator to matched directories",
    )
    parser.add_argument(
        "-a", "--absolute", action="store_true", default=default(False), help="Print absolute paths"
    )
    parser.add_argument(
        "--dot-relative",
        action="store_true",
        dest="dot_relative",
        default=default(False),
        help="Prefix relative paths with './'",
    )
    parser.add_argument("--nobrace", action="store_true", help="Disable {a,b} brace expansion")
    parser.add_argument("--noext", action="store_true", help="Disable extglob patterns like +(a|b)")
    parser.add_argument("--noglobstar", action="store_true", help="Treat ** like *")
    parser.add_argument(
        "-b",
        "--match-base",
        action="store_true",
        dest="match_base",
        help="Match patterns without slashes against the basename at any depth",
    )
    parser.add_argument(
        "--windows-paths-no-escape",
        action="store_true",
        dest="windows_paths_no_escape",
        help="Treat backslashes in patterns as path separators instead of escapes",
    )
    parser.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=None if sentinel is not None else [],
        metavar="PATTERN",
        help="Drop expanded matches matching this gitignore-style pattern. Can be repeated",
    )
    parser.add_argument(
        "--no-ignore-file",
        action="store_true",
        dest="no_ignore_file",
        default=default(False),
        help="Do not read .globdispatchignore",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        dest="no_config",
        help="Do not read a config file",
    )
    parser.add_argument(
        "-v", "--debug", action="store_true", help="Log resolution decisions to stderr"
    )
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which config-backed flags the user explicitly passed.
    """
    opts = _build_parser().parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    # append actions use None as sentinel (argparse creates a list when the flag is used).
    _SENTINEL = object()
    _tracked_flags: dict[str, str] = {
        # argparse dest name -> Options field name
        "platform": "platform",
        "each": "each",
        "jobs": "jobs",
        "dot": "dot",
        "nocase": "nocase",
        "follow": "follow",
        "mark": "mark",
        "absolute": "absolute",
        "dot_relative": "dot_relative",
        "ignore": "ignore",
        "no_ignore_file": "respect_ignore_file",
    }
    sentinel_opts, _ = _build_parser(_SENTINEL).parse_known_args(
        args if args is not None else sys.argv[1:]
    )

    explicit_flags: set[str] = set()
    for dest_name, field_name in _tracked_flags.items():
        val = getattr(sentinel_opts, dest_name, _SENTINEL)
        if dest_name == "ignore":
            if val is not None:
                explicit_flags.add(field_name)
        elif val is not _SENTINEL:
            explicit_flags.add(field_name)

    return (
        Options(
            patterns=opts.patterns,
            extra_patterns=opts.extra_patterns,
            default_patterns=[],
            all=opts.all,
            platform=opts.platform,
            cmd=opts.cmd,
            each=opts.each,
            jobs=opts.jobs,
            cwd=opts.cwd,
            dot=opts.dot,
            nocase=opts.nocase,
            follow=opts.follow,
            mark=opts.mark,
            absolute=opts.absolute,
            dot_relative=opts.dot_relative,
            nobrace=opts.nobrace,
            noext=opts.noext,
            noglobstar=opts.noglobstar,
            match_base=opts.match_base,
            windows_paths_no_escape=opts.windows_paths_no_escape,
            ignore=opts.ignore,
            respect_ignore_file=not opts.no_ignore_file,
            no_config=opts.no_config,
            debug=opts.debug,
            version=opts.version,
        ),
        explicit_flags,
    )


def _usage_error(message: str) -> int:
    """Print usage plus `message` to stderr and return the usage exit code."""
    print(_build_parser().format_usage(), end="", file=sys.stderr)
    print(message, file=sys.stderr)
    return 1


def _resolver_config(options: Options, platform: PlatformId) -> ResolverConfig:
    return ResolverConfig(
        platform=platform,
        all=options.all,
        dot=options.dot,
        nocase=options.nocase,
        follow=options.follow,
        mark=options.mark,
        absolute=options.absolute,
        dot_relative=options.dot_relative,
        brace=not options.nobrace,
        extglob=not options.noext,
        globstar=not options.noglobstar,
        match_base=options.match_base,
        windows_paths_no_escape=options.windows_paths_no_escape,
        ignore=tuple(options.ignore),
        respect_ignore_file=options.respect_ignore_file,
    )


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the globdispatch CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code: 0 for success, 1 for usage errors or no matches, otherwise
        the exit code of the dispatched command.
    """
    options, explicit_flags = _parse_args(args)

    logging.basicConfig(stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("globdispatch").setLevel(logging.DEBUG if options.debug else logging.WARNING)

    if options.version:
        try:
            version = importlib.metadata.version("globdispatch")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    # Validate before touching the filesystem (including config lookup).
    if options.platform is not None:
        try:
            validate_platform(options.platform)
        except InvalidOptionError as e:
            return _usage_error(str(e))

    cwd = Path(options.cwd)

    if not options.no_config:
        try:
            config_path = find_config_file(cwd)
            if config_path:
                logger.debug("Using config file %s", config_path)
                merge_cli_with_config(options, load_config(config_path), explicit_flags)
        except ValueError as e:  # includes TOMLDecodeError
            print(f"Error: Invalid config file: {e}", file=sys.stderr)
            return 1

    try:
        platform = (
            validate_platform(options.platform) if options.platform is not None else current_platform()
        )
    except InvalidOptionError as e:
        return _usage_error(str(e))

    if options.jobs < 1:
        return _usage_error(f'Invalid value provided for --jobs: "{options.jobs}"')

    patterns = options.patterns + options.extra_patterns
    if not patterns:
        patterns = list(options.default_patterns)
    if not patterns:
        return _usage_error("Error: No patterns provided")

    dispatcher: CommandDispatcher | None = None
    if options.cmd is not None:
        try:
            template = parse_command_template(options.cmd)
        except ValueError as e:
            print(f"Error: Invalid --cmd: {e}", file=sys.stderr)
            return 1
        dispatcher = CommandDispatcher(template, each=options.each, jobs=options.jobs)

    resolver = FileResolver(_resolver_config(options, platform))
    result = resolver.resolve(patterns, cwd)

    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    if len(result.errors) == len(patterns):
        return 1

    if result.no_matches:
        print("No matches found", file=sys.stderr)
        return 1

    if dispatcher is not None:
        sys.stdout.flush()
        return dispatcher.dispatch(result.paths)

    for path in result.paths:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
