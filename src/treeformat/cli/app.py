# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer entry point for ``treeformat``."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..config.loader import CONFIG_FILENAME, default_cache_dir, find_config_file, load_config, write_default_config
from ..config.models import ConfigError, default_parallel_jobs
from ..execution.engine import FailOnChangeError, RunRequest, run_treeformat
from ..execution.stdin import format_stdin
from ..filesystem.paths import expand_path, is_within_root
from ..formatters.base import FormatterError, load_formatters
from ..runtime.logger import RunLogger, build_run_logger
from .shared import EXIT_CHANGED, EXIT_FAILURE, EXIT_OK, CLIError

app = typer.Typer(
    name="treeformat",
    help="Format a whole project tree, only touching files that changed since the last run.",
    add_completion=False,
    no_args_is_help=False,
)


@dataclass(frozen=True, slots=True)
class TreeformatOptions:
    """Resolved command line options."""

    paths: tuple[Path, ...]
    work_dir: Path
    config_file: Path | None
    tree_root: Path | None
    cache_dir: Path | None
    init: bool
    clear_cache: bool
    fail_on_change: bool
    stdin_path: Path | None
    jobs: int


@app.command()
def format_tree(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Files or directories to format. Defaults to the tree root.", show_default=False),
    ] = None,
    init: Annotated[bool, typer.Option("--init", help=f"Create a {CONFIG_FILENAME} template and exit.")] = False,
    clear_cache: Annotated[
        bool,
        typer.Option("--clear-cache", help="Ignore the cache and format every matched file."),
    ] = False,
    fail_on_change: Annotated[
        bool,
        typer.Option("--fail-on-change", help=f"Exit with status {EXIT_CHANGED} when any file was re-formatted."),
    ] = False,
    stdin: Annotated[
        Path | None,
        typer.Option(
            "--stdin",
            help="Format standard input as if it were the given file and print the result.",
            show_default=False,
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config-file", help=f"Configuration file; searched upwards for {CONFIG_FILENAME} by default."),
    ] = None,
    tree_root: Annotated[
        Path | None,
        typer.Option("--tree-root", help="Project root; defaults to the directory of the configuration file."),
    ] = None,
    working_directory: Annotated[
        Path | None,
        typer.Option("-C", "--working-directory", help="Run as if started in this directory."),
    ] = None,
    cache_dir: Annotated[
        Path | None,
        typer.Option("--cache-dir", help="Directory holding cache manifests."),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("-j", "--jobs", min=1, help="Maximum number of concurrent workers."),
    ] = None,
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Emit debug output.")] = False,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="Only report warnings and errors.")] = False,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")] = False,
) -> None:
    """Format every stale file below PATHS.

    Args:
        paths: Files or directories to format.
        init: Whether to scaffold a configuration file instead of formatting.
        clear_cache: Whether to ignore previously cached results.
        fail_on_change: Whether re-formatted files make the run fail.
        stdin: Path the standard input content pretends to live at.
        config_file: Explicit configuration file.
        tree_root: Explicit project root.
        working_directory: Directory relative paths are resolved against.
        cache_dir: Directory holding cache manifests.
        jobs: Maximum number of concurrent workers.
        verbose: Whether debug output is enabled.
        quiet: Whether informational output is suppressed.
        no_emoji: Whether emoji output is disabled.
        no_color: Whether colour output is disabled.

    Raises:
        typer.Exit: Always raised to terminate the command with an exit status.
    """

    logger = build_run_logger(
        emoji=not no_emoji,
        debug=verbose,
        quiet=quiet,
        no_color=no_color,
        stderr=stdin is not None,
    )
    base_dir = Path.cwd() if working_directory is None else working_directory
    options = TreeformatOptions(
        paths=tuple(paths or ()),
        work_dir=expand_path(base_dir, Path.cwd()),
        config_file=config_file,
        tree_root=tree_root,
        cache_dir=cache_dir,
        init=init,
        clear_cache=clear_cache,
        fail_on_change=fail_on_change,
        stdin_path=stdin,
        jobs=jobs or default_parallel_jobs(),
    )
    try:
        code = _dispatch(options, logger)
    except CLIError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=code)


def _dispatch(options: TreeformatOptions, logger: RunLogger) -> int:
    """Route the invocation to init, stdin or tree formatting."""

    if options.init:
        return _run_init(options.work_dir, logger)
    config_file = _locate_config(options)
    tree_root = config_file.parent if options.tree_root is None else expand_path(options.tree_root, options.work_dir)
    if options.stdin_path is not None:
        return _run_stdin(
            options.stdin_path,
            work_dir=options.work_dir,
            config_file=config_file,
            tree_root=tree_root,
            logger=logger,
        )
    cache_dir = default_cache_dir() if options.cache_dir is None else expand_path(options.cache_dir, options.work_dir)
    request = RunRequest(
        tree_root=tree_root,
        work_dir=options.work_dir,
        cache_dir=cache_dir,
        config_file=config_file,
        paths=tuple(expand_path(path, options.work_dir) for path in options.paths),
        clear_cache=options.clear_cache,
        fail_on_change=options.fail_on_change,
        jobs=options.jobs,
    )
    try:
        request.validate()
    except ValueError as exc:
        raise CLIError(str(exc)) from exc
    try:
        run_treeformat(request, logger=logger)
    except FailOnChangeError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CHANGED) from exc
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    return EXIT_OK


def _locate_config(options: TreeformatOptions) -> Path:
    """Return the absolute configuration file for this invocation.

    Raises:
        CLIError: If no configuration file can be found.
    """

    if options.config_file is not None:
        return expand_path(options.config_file, options.work_dir)
    found = find_config_file(options.work_dir)
    if found is None:
        raise CLIError(
            f"{CONFIG_FILENAME} could not be found in {options.work_dir} or any parent directory; "
            "run with --init to create one",
        )
    return found


def _run_init(work_dir: Path, logger: RunLogger) -> int:
    try:
        created = write_default_config(work_dir)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    logger.ok(f"Generated {created}")
    return EXIT_OK


def _run_stdin(
    stdin_path: Path,
    *,
    work_dir: Path,
    config_file: Path,
    tree_root: Path,
    logger: RunLogger,
) -> int:
    """Format standard input and write the result to standard output."""

    target = expand_path(stdin_path, work_dir)
    if not is_within_root(target, tree_root):
        raise CLIError(f"{stdin_path} is not in the project root {tree_root}")
    try:
        config = load_config(config_file)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    formatters = load_formatters(tree_root, config, logger=logger)
    source = sys.stdin.read()
    try:
        formatted = format_stdin(target, source, formatters=formatters, logger=logger)
    except FormatterError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FAILURE) from exc
    typer.echo(formatted, nl=False)
    return EXIT_OK


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["TreeformatOptions", "app", "main"]
