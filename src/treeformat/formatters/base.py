# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Formatter definitions built from configuration and their execution."""

from __future__ import annotations

import os
import shutil
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import pathspec
from pydantic import BaseModel, ConfigDict

from ..config.models import FormatterConfig, ProjectConfig
from ..runtime.logger import RunLogger
from ..runtime.process import CommandOptions, run_command

type FormatterName = str


class FormatterError(Exception):
    """Raised when a formatter cannot be built from its configuration."""


class FormatterDefinition(BaseModel):
    """Everything that determines a formatter's output for a given input.

    Cache entries are only trusted while the definition recorded next to them
    equals the current one, so any field that can change the bytes a
    formatter writes belongs here.
    """

    model_config = ConfigDict(frozen=True)

    command: str
    command_mtime: int
    options: tuple[str, ...] = ()
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    work_dir: str


@dataclass(frozen=True, slots=True)
class FormatterResult:
    """Outcome of a single formatter invocation."""

    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when the formatter ran and exited with status 0."""

        return self.error is None and self.returncode == 0

    def describe_failure(self) -> str:
        """Return a short human-readable reason for a failed invocation."""

        if self.error is not None:
            return self.error
        detail = self.stderr.strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"exited with status {self.returncode}{suffix}"


@runtime_checkable
class SupportsFormatting(Protocol):
    """Behaviour the walker and scheduler require from a formatter."""

    @property
    def name(self) -> FormatterName:
        """Return the unique formatter name."""
        ...

    @property
    def definition(self) -> FormatterDefinition:
        """Return the cache-relevant definition."""
        ...

    def matches(self, path: Path) -> bool:
        """Return whether ``path`` should be handled by this formatter."""
        ...

    def run(self, paths: Sequence[Path]) -> FormatterResult:
        """Format ``paths`` in one invocation."""
        ...


class Formatter:
    """A configured external formatter bound to a project tree."""

    def __init__(
        self,
        *,
        name: FormatterName,
        tree_root: Path,
        definition: FormatterDefinition,
        timeout: float | None = None,
    ) -> None:
        """Create a formatter from an already validated definition.

        Args:
            name: Unique formatter name.
            tree_root: Absolute project root patterns are relative to.
            definition: Resolved command, options and patterns.
            timeout: Optional per-invocation timeout in seconds.

        Raises:
            FormatterError: If a pattern cannot be compiled.
        """

        self._name = name
        self._tree_root = tree_root
        self._definition = definition
        self._timeout = timeout
        try:
            self._includes = pathspec.GitIgnoreSpec.from_lines(definition.includes)
            self._excludes = pathspec.GitIgnoreSpec.from_lines(definition.excludes)
        except ValueError as exc:
            raise FormatterError(f"invalid pattern: {exc}") from exc

    @classmethod
    def from_config(
        cls,
        tree_root: Path,
        name: FormatterName,
        config: FormatterConfig,
        *,
        global_excludes: Iterable[str] = (),
    ) -> Formatter:
        """Build a formatter from its configuration table.

        Args:
            tree_root: Absolute project root.
            name: Formatter name (the key of its ``[formatter.<name>]`` table).
            config: Validated formatter configuration.
            global_excludes: Patterns excluded for every formatter.

        Returns:
            Formatter: Ready-to-run formatter.

        Raises:
            FormatterError: If the command cannot be resolved or a pattern is invalid.
        """

        command = _resolve_command(config.command, tree_root)
        try:
            command_mtime = command.stat().st_mtime_ns
        except OSError as exc:
            raise FormatterError(f"cannot stat command {command}: {exc.strerror or exc}") from exc
        work_dir = tree_root if config.work_dir is None else Path(os.path.normpath(tree_root / config.work_dir))
        if not work_dir.is_dir():
            raise FormatterError(f"work_dir {work_dir} is not a directory")
        definition = FormatterDefinition(
            command=str(command),
            command_mtime=command_mtime,
            options=tuple(config.options),
            includes=tuple(config.includes),
            excludes=(*global_excludes, *config.excludes),
            work_dir=str(work_dir),
        )
        return cls(name=name, tree_root=tree_root, definition=definition)

    @property
    def name(self) -> FormatterName:
        """Return the unique formatter name."""

        return self._name

    @property
    def definition(self) -> FormatterDefinition:
        """Return the cache-relevant definition."""

        return self._definition

    def matches(self, path: Path) -> bool:
        """Return whether ``path`` matches an include pattern and no exclude pattern.

        Args:
            path: Absolute path of a file inside the tree.

        Returns:
            bool: ``True`` when the formatter applies to ``path``.
        """

        try:
            relative = path.relative_to(self._tree_root).as_posix()
        except ValueError:
            return False
        if not self._includes.match_file(relative):
            return False
        return not self._excludes.match_file(relative)

    def run(self, paths: Sequence[Path]) -> FormatterResult:
        """Invoke the formatter once with every path in ``paths``.

        Args:
            paths: Files to format, passed as trailing arguments.

        Returns:
            FormatterResult: Exit status and captured output. Launch failures
            are reported through ``error`` rather than raised.
        """

        cmd = [self._definition.command, *self._definition.options, *(str(path) for path in paths)]
        options = CommandOptions(
            cwd=Path(self._definition.work_dir),
            check=False,
            capture_output=True,
            discard_stdin=True,
            timeout=self._timeout,
        )
        started = time.perf_counter()
        try:
            completed = run_command(cmd, options=options)
        except OSError as exc:
            return FormatterResult(
                returncode=None,
                duration=time.perf_counter() - started,
                error=f"could not launch {self._definition.command}: {exc.strerror or exc}",
            )
        return FormatterResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration=time.perf_counter() - started,
        )

    def __repr__(self) -> str:
        """Return a diagnostic representation of the formatter."""

        return f"Formatter(name={self._name!r}, command={self._definition.command!r})"

    def __str__(self) -> str:
        """Return the formatter name prefixed like in configuration files."""

        return f"#{self._name}"


FormatterFactory = Callable[..., SupportsFormatting]


def _resolve_command(raw: str, tree_root: Path) -> Path:
    """Return the absolute executable path for ``raw``.

    Commands containing a path separator are taken relative to ``tree_root``;
    bare names are looked up on ``PATH``.

    Raises:
        FormatterError: If no executable can be found.
    """

    candidate = Path(raw).expanduser()
    if candidate.is_absolute() or len(candidate.parts) > 1:
        resolved = candidate if candidate.is_absolute() else tree_root / candidate
        if not resolved.is_file() or not os.access(resolved, os.X_OK):
            raise FormatterError(f"command {raw!r} is not an executable file")
        return Path(os.path.normpath(resolved))
    found = shutil.which(raw)
    if found is None:
        raise FormatterError(f"command {raw!r} was not found on PATH")
    return Path(found).absolute()


def load_formatters(
    tree_root: Path,
    config: ProjectConfig,
    *,
    logger: RunLogger,
    factory: FormatterFactory | None = None,
) -> dict[FormatterName, SupportsFormatting]:
    """Instantiate every configured formatter, skipping the ones that fail.

    Args:
        tree_root: Absolute project root.
        config: Parsed project configuration.
        logger: Logger receiving construction errors.
        factory: Callable building one formatter; defaults to
            :meth:`Formatter.from_config`.

    Returns:
        dict[FormatterName, SupportsFormatting]: Formatters keyed and sorted by name.
    """

    build = factory or Formatter.from_config
    formatters: dict[FormatterName, SupportsFormatting] = {}
    for name in sorted(config.formatter):
        try:
            formatters[name] = build(
                tree_root,
                name,
                config.formatter[name],
                global_excludes=config.global_.excludes,
            )
        except FormatterError as exc:
            logger.error(f"Ignoring formatter #{name} due to error: {exc}")
    return formatters


def definitions_of(formatters: Mapping[FormatterName, SupportsFormatting]) -> dict[FormatterName, FormatterDefinition]:
    """Return the definitions of ``formatters`` keyed by name."""

    return {name: formatter.definition for name, formatter in formatters.items()}


__all__ = [
    "Formatter",
    "FormatterDefinition",
    "FormatterError",
    "FormatterFactory",
    "FormatterName",
    "FormatterResult",
    "SupportsFormatting",
    "definitions_of",
    "load_formatters",
]
