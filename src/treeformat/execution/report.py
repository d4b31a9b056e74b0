# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compare pre- and post-run mtimes and render the run summary."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ..filesystem.paths import Mtime, display_relative_path
from ..formatters.base import FormatterName
from ..runtime.logger import RunLogger


def diff_matches(
    before: Mapping[FormatterName, Mapping[Path, Mtime]],
    after: Mapping[FormatterName, Mapping[Path, Mtime]],
) -> dict[FormatterName, list[Path]]:
    """Return, per formatter in ``after``, the paths whose mtime changed.

    Args:
        before: Mtimes observed during the walk.
        after: Mtimes observed once the formatters finished.

    Returns:
        dict[FormatterName, list[Path]]: Rewritten paths for every formatter in
        ``after`` that rewrote at least one file, sorted by name and path.
    """

    changed: dict[FormatterName, list[Path]] = {}
    for name in sorted(after):
        previous = before.get(name, {})
        paths = [path for path, mtime in sorted(after[name].items()) if previous.get(path) != mtime]
        if paths:
            changed[name] = paths
    return changed


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Counters describing one formatting run."""

    traversed: int = 0
    matched: int = 0
    filtered: int = 0
    reformatted: int = 0
    changed: Mapping[FormatterName, list[Path]] = field(default_factory=dict)
    failed_formatters: tuple[FormatterName, ...] = ()
    elapsed: float = 0.0

    @property
    def has_changes(self) -> bool:
        """Return ``True`` when at least one file was rewritten."""

        return self.reformatted > 0


def render_summary(summary: RunSummary, *, logger: RunLogger, tree_root: Path | None = None) -> None:
    """Print the run summary through ``logger``.

    Args:
        summary: Counters to display.
        logger: Logger used for output.
        tree_root: Optional root used to shorten the listed paths.
    """

    if logger.debug_enabled:
        for name, paths in summary.changed.items():
            for path in paths:
                shown = display_relative_path(path, tree_root) if tree_root is not None else str(path)
                logger.debug(f"reformatted formatter={name} path={shown}")
    logger.echo(f"traversed {summary.traversed} files")
    logger.echo(f"matched {summary.matched} files to formatters")
    logger.echo(f"left with {summary.filtered} files after cache")
    logger.echo(f"of whom {summary.reformatted} files were re-formatted")
    logger.echo(f"all of this in {summary.elapsed:.2f}s")


__all__ = ["RunSummary", "diff_matches", "render_summary"]
