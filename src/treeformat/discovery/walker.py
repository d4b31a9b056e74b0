# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tree traversal and classification of files against configured formatters."""

from __future__ import annotations

import os
import stat
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from ..cache.manifest import MatchSet
from ..filesystem.paths import Mtime
from ..formatters.base import FormatterName, SupportsFormatting
from ..runtime.logger import RunLogger
from .ignore import IgnoreRules, is_hidden


@dataclass(slots=True)
class WalkResult:
    """Files discovered by a walk together with their formatter matches."""

    matches: MatchSet = field(default_factory=dict)
    traversed: int = 0
    matched: int = 0

    def record(self, name: FormatterName, path: Path, mtime: Mtime) -> None:
        """Record that formatter ``name`` matches ``path`` at ``mtime``."""

        self.matches.setdefault(name, {})[path] = mtime
        self.matched += 1

    def absorb(self, other: WalkResult) -> None:
        """Fold the partial result ``other`` into this result."""

        for name, paths in other.matches.items():
            self.matches.setdefault(name, {}).update(paths)
        self.traversed += other.traversed
        self.matched += other.matched


def collapse_targets(targets: Sequence[Path]) -> list[Path]:
    """Return ``targets`` without entries nested inside another target.

    Args:
        targets: Absolute walk targets.

    Returns:
        list[Path]: Targets sorted by path, none an ancestor of another.
    """

    kept: list[Path] = []
    for target in sorted(set(targets), key=lambda candidate: (len(candidate.parts), candidate)):
        if any(target.is_relative_to(existing) for existing in kept):
            continue
        kept.append(target)
    return sorted(kept)


class TreeWalker:
    """Walk targets honouring ignore files and classify every file found."""

    def __init__(
        self,
        formatters: Mapping[FormatterName, SupportsFormatting],
        *,
        tree_root: Path,
        logger: RunLogger,
        jobs: int = 1,
        ignore_rules: IgnoreRules | None = None,
    ) -> None:
        """Create a walker for ``formatters``.

        Args:
            formatters: Formatters every discovered file is tested against.
            tree_root: Absolute project root ignore files are anchored at.
            logger: Logger receiving traversal warnings.
            jobs: Maximum number of targets walked concurrently.
            ignore_rules: Optional pre-built ignore rules.
        """

        self._formatters = dict(sorted(formatters.items()))
        self._tree_root = tree_root
        self._logger = logger
        self._jobs = max(1, jobs)
        self._ignore = ignore_rules or IgnoreRules(tree_root, logger=logger)

    def walk(self, targets: Sequence[Path]) -> WalkResult:
        """Traverse ``targets`` and return the combined classification.

        Each target is walked by its own worker producing a partial result;
        the partial results are merged once every worker finished.

        Args:
            targets: Absolute files or directories to traverse.

        Returns:
            WalkResult: Matches keyed by every configured formatter name.
        """

        result = WalkResult(matches={name: {} for name in self._formatters})
        roots = collapse_targets(targets)
        if not roots:
            return result
        partials: list[WalkResult] = []
        with ThreadPoolExecutor(max_workers=min(self._jobs, len(roots))) as executor:
            futures = [executor.submit(self._walk_target, root) for root in roots]
            for future in as_completed(futures):
                partials.append(future.result())
        for partial in partials:
            result.absorb(partial)
        result.matches = {name: dict(sorted(paths.items())) for name, paths in sorted(result.matches.items())}
        return result

    def _walk_target(self, target: Path) -> WalkResult:
        partial = WalkResult()
        try:
            info = target.stat()
        except OSError as exc:
            self._logger.warn(f"traversal error: {target}: {exc.strerror or exc}")
            return partial
        if stat.S_ISDIR(info.st_mode):
            self._walk_directory(target, partial)
        else:
            self._classify(target, info.st_mtime_ns, partial)
        return partial

    def _walk_directory(self, directory: Path, partial: WalkResult) -> None:
        """Depth-first traversal of ``directory`` into ``partial``."""

        pending = [directory]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as iterator:
                    entries = sorted(iterator, key=lambda entry: entry.name)
            except OSError as exc:
                self._logger.warn(f"traversal error: {current}: {exc.strerror or exc}")
                continue
            subdirectories: list[Path] = []
            for entry in entries:
                if is_hidden(entry.name):
                    continue
                path = Path(entry.path)
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError as exc:
                    self._logger.warn(f"Couldn't get file type for {path}: {exc.strerror or exc}")
                    continue
                if self._ignore.is_ignored(path, is_dir=is_dir):
                    continue
                if is_dir:
                    subdirectories.append(path)
                    continue
                try:
                    info = entry.stat()
                except OSError as exc:
                    self._logger.warn(f"Skipping {path}, unable to read its metadata: {exc.strerror or exc}")
                    continue
                if stat.S_ISDIR(info.st_mode):
                    # Symlinked directories are not followed.
                    continue
                self._classify(path, info.st_mtime_ns, partial)
            pending.extend(reversed(subdirectories))

    def _classify(self, path: Path, mtime: Mtime, partial: WalkResult) -> None:
        partial.traversed += 1
        for name, formatter in self._formatters.items():
            if formatter.matches(path):
                partial.record(name, path, mtime)


__all__ = ["TreeWalker", "WalkResult", "collapse_targets"]
