"""
CommandDispatcher: forwards resolved paths to a user-supplied command.

Paths are always passed as separate argv elements of a direct process
invocation. No shell ever sees them, so metacharacters in filenames stay inert.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TextIO

logger = logging.getLogger(__name__)

PLACEHOLDER = "{}"

# Conventional shell exit statuses for launch failures and signal deaths.
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
SIGNAL_EXIT_BASE = 128


def parse_command_template(template: str) -> list[str]:
    """
    Split a user-authored command template into argv elements. Only the template
    is tokenized; matched paths are never passed through this.
    """
    argv = shlex.split(template)
    if not argv:
        raise ValueError("Command template is empty")
    return argv


def exit_code_for(returncode: int) -> int:
    """Map a `subprocess` return code to a process exit status (signal → 128+N)."""
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


@dataclass
class _Completed:
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""


class CommandDispatcher:
    """
    Runs `template` with matched paths as arguments.

    In batch mode (the default) the command runs once: an argv element exactly
    equal to `{}` is replaced by all paths, otherwise paths are appended. With
    `each=True` the command runs once per path: every `{}` inside an element is
    replaced by the path (still one element), otherwise the path is appended.

    Per-path runs use up to `jobs` worker threads. Output is relayed in input
    order and the exit code is that of the first failing path in input order.
    """

    def __init__(self, template: Sequence[str], each: bool = False, jobs: int = 1) -> None:
        if not template:
            raise ValueError("Command template is empty")
        if jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")
        self._template: list[str] = list(template)
        self._each: bool = each
        self._jobs: int = jobs

    def build_argv(self, paths: Sequence[str]) -> list[str]:
        """argv for a single batch invocation over all `paths`."""
        if PLACEHOLDER not in self._template:
            return [*self._template, *paths]
        argv: list[str] = []
        for arg in self._template:
            if arg == PLACEHOLDER:
                argv.extend(paths)
            else:
                argv.append(arg)
        return argv

    def build_argv_for_path(self, path: str) -> list[str]:
        """argv for one per-path invocation."""
        if not any(PLACEHOLDER in arg for arg in self._template):
            return [*self._template, path]
        return [arg.replace(PLACEHOLDER, path) for arg in self._template]

    def dispatch(self, paths: Sequence[str]) -> int:
        """Run the command over `paths` and return the aggregated exit code."""
        if not self._each:
            return self._relay(self._run(self.build_argv(paths)))

        argvs = [self.build_argv_for_path(path) for path in paths]
        exit_code = 0
        if self._jobs == 1:
            for argv in argvs:
                code = self._relay(self._run(argv))
                if code != 0 and exit_code == 0:
                    exit_code = code
            return exit_code

        with ThreadPoolExecutor(max_workers=self._jobs) as executor:
            # `map` yields in submission order, so relayed output stays ordered.
            for completed in executor.map(self._run, argvs):
                code = self._relay(completed)
                if code != 0 and exit_code == 0:
                    exit_code = code
        return exit_code

    @staticmethod
    def _run(argv: list[str]) -> _Completed:
        logger.debug("Running %s", argv)
        try:
            proc = subprocess.run(argv, capture_output=True)
        except FileNotFoundError:
            return _Completed(
                EXIT_NOT_FOUND, stderr=f"Error: Command not found: {argv[0]}\n".encode()
            )
        except PermissionError:
            return _Completed(
                EXIT_NOT_EXECUTABLE, stderr=f"Error: Command not executable: {argv[0]}\n".encode()
            )
        return _Completed(exit_code_for(proc.returncode), proc.stdout, proc.stderr)

    @staticmethod
    def _relay(completed: _Completed) -> int:
        _write_bytes(sys.stdout, completed.stdout)
        _write_bytes(sys.stderr, completed.stderr)
        return completed.exit_code


def _write_bytes(stream: TextIO, data: bytes) -> None:
    """Relay child output verbatim, bypassing text-layer newline and encoding handling."""
    if not data:
        return
    stream.flush()
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        stream.write(data.decode(errors="replace"))
        stream.flush()
        return
    buffer.write(data)
    buffer.flush()
