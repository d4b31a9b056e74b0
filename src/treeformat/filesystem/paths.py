# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about user-supplied filesystem paths."""

from __future__ import annotations

import os
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from ..runtime.logger import RunLogger

_Pathish = str | PathLike[str] | Path

type Mtime = int


def expand_path(path: _Pathish, work_dir: Path) -> Path:
    """Return ``path`` as an absolute, lexically normalised path.

    Relative paths are anchored at ``work_dir``. Symlinks are not resolved,
    but ``..`` segments are collapsed so that containment checks against the
    tree root see the real destination.

    Args:
        path: Path supplied by the user.
        work_dir: Absolute directory relative paths are anchored at.

    Returns:
        Path: Absolute normalised path.
    """

    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = work_dir / candidate
    return Path(os.path.normpath(candidate))


def is_within_root(path: Path, tree_root: Path) -> bool:
    """Return whether absolute ``path`` is ``tree_root`` or lies beneath it."""

    return path == tree_root or path.is_relative_to(tree_root)


def resolve_targets(
    paths: Iterable[_Pathish],
    *,
    work_dir: Path,
    tree_root: Path,
    logger: RunLogger,
) -> list[Path]:
    """Return absolute target paths contained in ``tree_root``.

    Paths outside the project root are dropped with a warning; duplicates are
    removed while preserving the original order.

    Args:
        paths: Paths supplied by the user, absolute or relative to ``work_dir``.
        work_dir: Directory relative paths are anchored at.
        tree_root: Project root every target must live under.
        logger: Logger receiving diagnostics for dropped paths.

    Returns:
        list[Path]: Accepted absolute targets, possibly empty.
    """

    root = Path(os.path.normpath(tree_root))
    accepted: list[Path] = []
    for raw in paths:
        absolute = expand_path(raw, work_dir)
        if not is_within_root(absolute, root):
            logger.warn(f"Ignoring path {raw}, it is not in the project root")
            continue
        if absolute not in accepted:
            accepted.append(absolute)
    return accepted


def read_mtime(path: Path) -> Mtime:
    """Return the modification time of ``path`` in nanoseconds.

    Args:
        path: File whose metadata should be read. Symlinks are followed.

    Returns:
        Mtime: ``st_mtime_ns`` of the file.

    Raises:
        OSError: If the file cannot be stat'ed.
    """

    return path.stat().st_mtime_ns


def display_relative_path(path: _Pathish, root: _Pathish) -> str:
    """Return a display-friendly representation of ``path`` relative to ``root``.

    Args:
        path: Path to present to the user.
        root: Base directory used for relativisation.

    Returns:
        str: Relative POSIX path when ``path`` lives under ``root``, otherwise
        the absolute POSIX representation.
    """

    candidate = Path(path)
    try:
        return candidate.relative_to(root).as_posix() or "."
    except ValueError:
        return candidate.as_posix()


__all__ = [
    "Mtime",
    "display_relative_path",
    "expand_path",
    "is_within_root",
    "read_mtime",
    "resolve_targets",
]
