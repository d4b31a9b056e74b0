# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version-control style ignore rules evaluated during tree walks."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Final

import pathspec

from ..runtime.logger import RunLogger

IGNORE_FILENAMES: Final[tuple[str, ...]] = (".gitignore", ".ignore")
GIT_EXCLUDE_PATH: Final[tuple[str, ...]] = (".git", "info", "exclude")


def is_hidden(name: str) -> bool:
    """Return whether a directory entry name denotes a hidden entry."""

    return name.startswith(".")


def _last_verdict(spec: pathspec.PathSpec, relative: str) -> bool | None:
    """Return the verdict of the last pattern in ``spec`` matching ``relative``.

    Args:
        spec: Compiled ignore file.
        relative: POSIX path relative to the ignore file's directory.

    Returns:
        bool | None: ``True`` when ignored, ``False`` when re-included by a
        negated pattern, ``None`` when no pattern applies.
    """

    verdict: bool | None = None
    for pattern in spec.patterns:
        if pattern.include is None:
            continue
        if pattern.match_file(relative) is not None:
            verdict = bool(pattern.include)
    return verdict


class IgnoreRules:
    """Gitignore semantics for every directory below a tree root.

    Rules come from the tree root's ``.git/info/exclude`` and from each
    ``.gitignore`` and ``.ignore`` file between the root and the entry. Deeper
    files override shallower ones, and within one file the last matching
    pattern wins. Compiled files are cached per directory; instances are safe
    to share between walker threads.
    """

    def __init__(self, tree_root: Path, *, logger: RunLogger) -> None:
        """Create rules anchored at ``tree_root``.

        Args:
            tree_root: Absolute project root.
            logger: Logger receiving unreadable ignore files.
        """

        self._root = tree_root
        self._logger = logger
        self._lock = threading.Lock()
        self._specs: dict[Path, tuple[pathspec.PathSpec, ...]] = {}
        self._exclude = self._compile(tree_root.joinpath(*GIT_EXCLUDE_PATH))

    def is_ignored(self, path: Path, *, is_dir: bool) -> bool:
        """Return whether ``path`` is excluded by an ignore file.

        Args:
            path: Absolute path of a directory entry under the tree root.
            is_dir: Whether ``path`` is a directory, so that patterns with a
                trailing slash apply.

        Returns:
            bool: ``True`` when the entry must not be walked or classified.
        """

        try:
            path.relative_to(self._root)
        except ValueError:
            return False
        verdict: bool | None = None
        if self._exclude is not None:
            verdict = self._merge(verdict, _last_verdict(self._exclude, self._relative(path, self._root, is_dir)))
        for directory in self._directories_above(path):
            for spec in self._specs_for(directory):
                verdict = self._merge(verdict, _last_verdict(spec, self._relative(path, directory, is_dir)))
        return bool(verdict)

    @staticmethod
    def _merge(current: bool | None, candidate: bool | None) -> bool | None:
        return current if candidate is None else candidate

    @staticmethod
    def _relative(path: Path, directory: Path, is_dir: bool) -> str:
        relative = path.relative_to(directory).as_posix()
        return f"{relative}/" if is_dir else relative

    def _directories_above(self, path: Path) -> Iterable[Path]:
        """Yield the tree root and every directory down to ``path``'s parent."""

        parents = [parent for parent in path.parents if parent == self._root or parent.is_relative_to(self._root)]
        yield from reversed(parents)

    def _specs_for(self, directory: Path) -> tuple[pathspec.PathSpec, ...]:
        with self._lock:
            cached = self._specs.get(directory)
        if cached is not None:
            return cached
        compiled = tuple(
            spec
            for spec in (self._compile(directory / filename) for filename in IGNORE_FILENAMES)
            if spec is not None
        )
        with self._lock:
            self._specs[directory] = compiled
        return compiled

    def _compile(self, ignore_file: Path) -> pathspec.PathSpec | None:
        """Return the compiled patterns of ``ignore_file`` or ``None`` when absent."""

        if not ignore_file.is_file():
            return None
        try:
            lines = ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as exc:
            self._logger.warn(f"Unable to read ignore file {ignore_file}: {exc.strerror or exc}")
            return None
        try:
            return pathspec.PathSpec.from_lines("gitwildmatch", lines)
        except ValueError as exc:
            self._logger.warn(f"Skipping invalid ignore file {ignore_file}: {exc}")
            return None


__all__ = ["IGNORE_FILENAMES", "IgnoreRules", "is_hidden"]
