# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for formatting standard input content."""

from __future__ import annotations

from pathlib import Path

import pytest

from treeformat.config import FormatterConfig
from treeformat.execution import format_stdin, select_formatter
from treeformat.formatters import Formatter, FormatterError


def _formatters(project: Path, formatter_script) -> dict[str, Formatter]:
    return {
        "b-upper": Formatter.from_config(
            project,
            "b-upper",
            FormatterConfig(command=str(formatter_script("upper")), includes=("*.md",)),
        ),
        "a-noop": Formatter.from_config(
            project,
            "a-noop",
            FormatterConfig(command=str(formatter_script("noop", mode="noop")), includes=("*.md",)),
        ),
        "broken": Formatter.from_config(
            project,
            "broken",
            FormatterConfig(command=str(formatter_script("broken", mode="fail")), includes=("*.rs",)),
        ),
    }


def test_select_formatter_prefers_first_name(project: Path, formatter_script) -> None:
    formatters = _formatters(project, formatter_script)

    assert select_formatter(formatters, project / "x.md") is formatters["a-noop"]
    assert select_formatter(formatters, project / "x.txt") is None


def test_format_stdin_returns_formatted_text(project: Path, formatter_script, logger) -> None:
    formatters = _formatters(project, formatter_script)
    del formatters["a-noop"]

    assert format_stdin(project / "doc.md", "hello\n", formatters=formatters, logger=logger) == "HELLO\n"
    assert not (project / "doc.md").exists()


def test_format_stdin_raises_when_nothing_matches(project: Path, formatter_script, logger) -> None:
    with pytest.raises(FormatterError, match="no formatter matches"):
        format_stdin(project / "x.txt", "", formatters=_formatters(project, formatter_script), logger=logger)


def test_format_stdin_raises_on_formatter_failure(project: Path, formatter_script, logger) -> None:
    with pytest.raises(FormatterError, match="#broken failed"):
        format_stdin(
            project / "main.rs",
            "fn main() {}",
            formatters=_formatters(project, formatter_script),
            logger=logger,
        )
