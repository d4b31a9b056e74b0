# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run external formatter processes without a shell."""

from __future__ import annotations

import os
import shutil

# Bandit: formatter commands are passed as argument lists, never through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

TIMEOUT_RETURNCODE: Final[int] = 124


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """How a formatter process is launched and observed.

    ``env`` entries are layered over the current environment rather than
    replacing it, so formatters still find their interpreters on ``PATH``.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = True
    capture_output: bool = False
    text: bool = True
    timeout: float | None = None
    discard_stdin: bool = False

    def environment(self) -> dict[str, str] | None:
        """Return the full child environment, or ``None`` to inherit it unchanged."""

        if not self.env:
            return None
        return {**os.environ, **self.env}


class SubprocessExecutionError(RuntimeError):
    """A checked command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stdout: str | None, stderr: str | None) -> None:
        """Keep the failed command and its captured streams for callers.

        Args:
            command: Argument list that was executed.
            returncode: Exit status of the process.
            stdout: Captured standard output, when captured.
            stderr: Captured standard error, when captured.
        """

        detail = (stderr or "").strip() or "<no stderr>"
        super().__init__(f"{Path(command[0]).name} exited with status {returncode}: {detail}")
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _as_text(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode(errors="replace")
    return stream


def resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with its program replaced by an absolute path.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If a bare program name is not on ``PATH``.
    """

    if not args:
        raise ValueError("cannot run an empty command")
    program, *rest = args
    if Path(program).is_absolute():
        return [program, *rest]
    found = shutil.which(program)
    if found is None:
        raise FileNotFoundError(f"Executable '{program}' was not found on PATH")
    return [found, *rest]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run ``args`` and return the completed process.

    A process exceeding ``options.timeout`` is killed and reported as a
    completed process with status :data:`TIMEOUT_RETURNCODE`.

    Args:
        args: Program followed by its arguments.
        options: Launch options; defaults to :class:`CommandOptions`.

    Returns:
        CompletedProcess[str]: Exit status and any captured output.

    Raises:
        FileNotFoundError: If the program cannot be found or launched.
        SubprocessExecutionError: If ``options.check`` is set and the
            process exits with a non-zero status.
    """

    opts = options or CommandOptions()
    argv = resolve_executable(args)
    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            argv,
            cwd=opts.cwd,
            env=opts.environment(),
            check=False,
            capture_output=opts.capture_output,
            text=opts.text,
            timeout=opts.timeout,
            stdin=subprocess.DEVNULL if opts.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        note = f"Command timed out after {opts.timeout:.1f}s"
        stderr = _as_text(exc.stderr)
        completed = CompletedProcess(
            args=argv,
            returncode=TIMEOUT_RETURNCODE,
            stdout=_as_text(exc.stdout),
            stderr=f"{stderr}\n{note}" if stderr else note,
        )
    if opts.check and completed.returncode != 0:
        raise SubprocessExecutionError(argv, completed.returncode, completed.stdout, completed.stderr)
    return completed


__all__ = [
    "CommandOptions",
    "SubprocessExecutionError",
    "TIMEOUT_RETURNCODE",
    "resolve_executable",
    "run_command",
]
