# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run one batch per formatter concurrently and capture post-run mtimes."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from ..cache.manifest import MatchSet
from ..filesystem.paths import Mtime, read_mtime
from ..formatters.base import FormatterName, FormatterResult, SupportsFormatting
from ..runtime.logger import RunLogger


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Summary of a single formatter batch."""

    formatter: FormatterName
    file_count: int
    returncode: int | None
    duration: float
    succeeded: bool


@dataclass(slots=True)
class SchedulerResult:
    """Post-run mtimes and per-formatter outcomes of a scheduling phase."""

    matches: MatchSet = field(default_factory=dict)
    outcomes: dict[FormatterName, BatchOutcome] = field(default_factory=dict)

    @property
    def failed(self) -> tuple[FormatterName, ...]:
        """Return the names of formatters whose batch failed."""

        return tuple(name for name, outcome in self.outcomes.items() if not outcome.succeeded)

    @property
    def executed(self) -> tuple[FormatterName, ...]:
        """Return the names of formatters that were actually invoked."""

        return tuple(self.outcomes)


class FormatScheduler:
    """Invoke each formatter once with all of its stale files."""

    def __init__(
        self,
        formatters: Mapping[FormatterName, SupportsFormatting],
        *,
        logger: RunLogger,
        jobs: int = 1,
    ) -> None:
        self._formatters = dict(formatters)
        self._logger = logger
        self._jobs = max(1, jobs)

    def run(self, stale: Mapping[FormatterName, Mapping[Path, Mtime]]) -> SchedulerResult:
        """Format every stale batch, running distinct formatters concurrently.

        Formatters with an empty batch are not invoked. A failed batch keeps
        the mtimes observed before the run and does not affect other batches.

        Args:
            stale: Stale (formatter, path, mtime) triples.

        Returns:
            SchedulerResult: Mtimes after formatting and the batch outcomes,
            both sorted by formatter name.

        Raises:
            KeyError: If ``stale`` names a formatter the scheduler was not given.
        """

        batches = {name: dict(paths) for name, paths in sorted(stale.items())}
        matches: MatchSet = {name: batch for name, batch in batches.items() if not batch}
        outcomes: dict[FormatterName, BatchOutcome] = {}
        pending = {name: batch for name, batch in batches.items() if batch}
        if pending:
            with ThreadPoolExecutor(max_workers=min(self._jobs, len(pending))) as executor:
                future_map = {
                    executor.submit(self._run_batch, self._formatters[name], batch): name
                    for name, batch in pending.items()
                }
                for future in as_completed(future_map):
                    name = future_map[future]
                    batch_matches, outcome = future.result()
                    matches[name] = batch_matches
                    outcomes[name] = outcome
        return SchedulerResult(
            matches={name: matches[name] for name in sorted(matches)},
            outcomes={name: outcomes[name] for name in sorted(outcomes)},
        )

    def _run_batch(
        self,
        formatter: SupportsFormatting,
        batch: dict[Path, Mtime],
    ) -> tuple[dict[Path, Mtime], BatchOutcome]:
        """Run ``formatter`` on ``batch`` and return the resulting mtimes."""

        paths = sorted(batch)
        self._logger.debug(f"formatting formatter={formatter.name} files={len(paths)}")
        result = formatter.run(paths)
        outcome = BatchOutcome(
            formatter=formatter.name,
            file_count=len(paths),
            returncode=result.returncode,
            duration=result.duration,
            succeeded=result.succeeded,
        )
        if not result.succeeded:
            self._report_failure(formatter, result)
            return dict(batch), outcome
        self._logger.info(f"{formatter.name}: {len(paths)} files processed in {result.duration:.2f}s")
        return self._reread_mtimes(formatter, batch), outcome

    def _reread_mtimes(self, formatter: SupportsFormatting, batch: dict[Path, Mtime]) -> dict[Path, Mtime]:
        refreshed: dict[Path, Mtime] = {}
        for path, previous in sorted(batch.items()):
            try:
                refreshed[path] = read_mtime(path)
            except OSError as exc:
                self._logger.warn(
                    f"{path} is no longer readable after running #{formatter.name}: {exc.strerror or exc}",
                )
                refreshed[path] = previous
        return refreshed

    def _report_failure(self, formatter: SupportsFormatting, result: FormatterResult) -> None:
        self._logger.error(f"#{formatter.name} failed: {result.describe_failure()}")
        if result.stderr.strip():
            self._logger.debug(f"stderr of #{formatter.name}:\n{result.stderr.rstrip()}")


__all__ = ["BatchOutcome", "FormatScheduler", "SchedulerResult"]
