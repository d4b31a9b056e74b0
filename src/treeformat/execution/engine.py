# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Incremental formatting run: resolve, walk, filter, format, record, report."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..cache.manifest import CacheManifest, count_matches
from ..config.loader import load_config
from ..config.models import ProjectConfig, default_parallel_jobs
from ..discovery.walker import TreeWalker
from ..filesystem.paths import resolve_targets
from ..formatters.base import Formatter, FormatterFactory, definitions_of, load_formatters
from ..runtime.logger import RunLogger
from .report import RunSummary, diff_matches, render_summary
from .scheduler import FormatScheduler

type ConfigLoader = Callable[[Path], ProjectConfig]


class FailOnChangeError(RuntimeError):
    """Raised when files were rewritten while changes are treated as failures."""

    def __init__(self, summary: RunSummary) -> None:
        """Initialise the error with the summary of the offending run.

        Args:
            summary: Counters of the run that rewrote files.
        """

        super().__init__(f"fail-on-change: {summary.reformatted} file(s) were re-formatted")
        self.summary = summary


@dataclass(frozen=True, slots=True)
class RunRequest:
    """Inputs of a formatting run; every path must be absolute."""

    tree_root: Path
    work_dir: Path
    cache_dir: Path
    config_file: Path
    paths: tuple[Path, ...] = ()
    clear_cache: bool = False
    fail_on_change: bool = False
    jobs: int = field(default_factory=default_parallel_jobs)

    def validate(self) -> None:
        """Ensure every path argument is absolute.

        Raises:
            ValueError: If any path argument is relative.
        """

        named = {
            "tree_root": self.tree_root,
            "work_dir": self.work_dir,
            "cache_dir": self.cache_dir,
            "config_file": self.config_file,
        }
        relative = [name for name, value in named.items() if not value.is_absolute()]
        relative.extend(f"paths[{index}]" for index, path in enumerate(self.paths) if not path.is_absolute())
        if relative:
            raise ValueError(f"RunRequest requires absolute paths; relative: {', '.join(relative)}")

    @property
    def targets(self) -> tuple[Path, ...]:
        """Return the requested paths, defaulting to the tree root."""

        return self.paths or (self.tree_root,)


class _PhaseTimer:
    """Log the cumulative and per-phase duration of a run at debug level."""

    def __init__(self, logger: RunLogger) -> None:
        self._logger = logger
        self._start = time.perf_counter()
        self._last = self._start

    def mark(self, phase: str) -> None:
        now = time.perf_counter()
        self._logger.debug(f"{phase}: {now - self._start:.3f}s (Δ {now - self._last:.3f}s)")
        self._last = now

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._start


class FormatEngine:
    """Coordinate one incremental formatting run."""

    def __init__(
        self,
        *,
        logger: RunLogger,
        config_loader: ConfigLoader = load_config,
        formatter_factory: FormatterFactory = Formatter.from_config,
    ) -> None:
        """Create an engine with injectable collaborators.

        Args:
            logger: Logger threaded through every component of the run.
            config_loader: Callable parsing the configuration file.
            formatter_factory: Callable building one formatter from its config.
        """

        self._logger = logger
        self._config_loader = config_loader
        self._formatter_factory = formatter_factory

    def run(self, request: RunRequest) -> RunSummary:
        """Format every stale file below the requested paths.

        Args:
            request: Absolute paths and flags describing the run.

        Returns:
            RunSummary: Counters of the run, already rendered through the logger.

        Raises:
            ValueError: If ``request`` carries a relative path.
            ConfigError: If the configuration file cannot be loaded.
            FailOnChangeError: If files changed while ``fail_on_change`` is set.
        """

        request.validate()
        logger = self._logger
        timer = _PhaseTimer(logger)

        targets = resolve_targets(
            request.targets,
            work_dir=request.work_dir,
            tree_root=request.tree_root,
            logger=logger,
        )
        if not targets:
            logger.warn("Aborting, no paths to format")
            return RunSummary(elapsed=timer.elapsed)

        config = self._config_loader(request.config_file)
        timer.mark("load config")

        formatters = load_formatters(
            request.tree_root,
            config,
            logger=logger,
            factory=self._formatter_factory,
        )
        timer.mark("load formatters")

        if request.clear_cache:
            manifest = CacheManifest()
        else:
            manifest = CacheManifest.load(request.cache_dir, request.config_file, logger=logger)
        timer.mark("load cache")
        manifest = manifest.invalidate_changed_formatters(definitions_of(formatters))

        walker = TreeWalker(formatters, tree_root=request.tree_root, logger=logger, jobs=request.jobs)
        walk = walker.walk(targets)
        timer.mark("tree walk")

        stale = manifest.filter_stale(walk.matches)
        filtered = count_matches(stale)
        timer.mark("filter cache")

        scheduled = FormatScheduler(formatters, logger=logger, jobs=request.jobs).run(stale)
        timer.mark("format")

        failed = set(scheduled.failed)
        recorded = {name: paths for name, paths in scheduled.matches.items() if name not in failed}
        manifest = manifest.merge_results(recorded)
        manifest.persist(request.cache_dir, request.config_file, logger=logger)
        timer.mark("write cache")

        changed = diff_matches(stale, scheduled.matches)
        summary = RunSummary(
            traversed=walk.traversed,
            matched=walk.matched,
            filtered=filtered,
            reformatted=sum(len(paths) for paths in changed.values()),
            changed=changed,
            failed_formatters=scheduled.failed,
            elapsed=timer.elapsed,
        )
        render_summary(summary, logger=logger, tree_root=request.tree_root)

        if request.fail_on_change and summary.has_changes:
            raise FailOnChangeError(summary)
        return summary


def run_treeformat(
    request: RunRequest,
    *,
    logger: RunLogger,
    config_loader: ConfigLoader = load_config,
) -> RunSummary:
    """Run :class:`FormatEngine` once with default collaborators.

    Args:
        request: Absolute paths and flags describing the run.
        logger: Logger threaded through the run.
        config_loader: Callable parsing the configuration file.

    Returns:
        RunSummary: Counters of the run.
    """

    return FormatEngine(logger=logger, config_loader=config_loader).run(request)


__all__ = [
    "ConfigLoader",
    "FailOnChangeError",
    "FormatEngine",
    "RunRequest",
    "run_treeformat",
]
