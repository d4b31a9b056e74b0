# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Format source text received on standard input."""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from pathlib import Path

from ..formatters.base import FormatterError, FormatterName, SupportsFormatting
from ..runtime.logger import RunLogger


def select_formatter(
    formatters: Mapping[FormatterName, SupportsFormatting],
    path: Path,
) -> SupportsFormatting | None:
    """Return the first formatter, by name, that matches ``path``."""

    for name in sorted(formatters):
        if formatters[name].matches(path):
            return formatters[name]
    return None


def format_stdin(
    path: Path,
    source: str,
    *,
    formatters: Mapping[FormatterName, SupportsFormatting],
    logger: RunLogger,
) -> str:
    """Format ``source`` as if it were the content of ``path``.

    The text is written to a scratch file carrying the same name as ``path``
    so that formatters relying on the file extension behave normally. The
    cache is not consulted.

    Args:
        path: Absolute path, inside the tree, the content pretends to live at.
        source: Text to format.
        formatters: Configured formatters.
        logger: Logger receiving progress messages.

    Returns:
        str: The formatted text.

    Raises:
        FormatterError: If no formatter matches ``path`` or the formatter fails.
    """

    formatter = select_formatter(formatters, path)
    if formatter is None:
        raise FormatterError(f"no formatter matches {path}")
    with tempfile.TemporaryDirectory(prefix="treeformat-stdin-") as scratch:
        target = Path(scratch) / path.name
        target.write_text(source, encoding="utf-8")
        logger.debug(f"formatting stdin formatter={formatter.name} path={path}")
        result = formatter.run([target])
        if not result.succeeded:
            raise FormatterError(f"#{formatter.name} failed: {result.describe_failure()}")
        return target.read_text(encoding="utf-8")


__all__ = ["format_stdin", "select_formatter"]
