# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for change detection and the run summary."""

from __future__ import annotations

from pathlib import Path

import pytest

from treeformat.execution import RunSummary, diff_matches, render_summary
from treeformat.runtime.logger import build_run_logger


def test_diff_matches_reports_only_changed_mtimes() -> None:
    before = {
        "go": {Path("/p/a.go"): 1, Path("/p/b.go"): 2},
        "md": {Path("/p/c.md"): 3},
    }
    after = {
        "go": {Path("/p/a.go"): 10, Path("/p/b.go"): 2},
        "md": {Path("/p/c.md"): 3},
    }

    assert diff_matches(before, after) == {"go": [Path("/p/a.go")]}


def test_diff_matches_counts_fan_out_per_formatter() -> None:
    shared = Path("/p/shared.md")

    changed = diff_matches({"a": {shared: 1}, "b": {shared: 1}}, {"a": {shared: 2}, "b": {shared: 2}})

    assert changed == {"a": [shared], "b": [shared]}


def test_render_summary_prints_counters(capsys: pytest.CaptureFixture[str]) -> None:
    logger = build_run_logger(emoji=False, no_color=True)
    summary = RunSummary(traversed=3, matched=2, filtered=2, reformatted=1, elapsed=0.5)

    render_summary(summary, logger=logger)

    assert capsys.readouterr().out.splitlines() == [
        "traversed 3 files",
        "matched 2 files to formatters",
        "left with 2 files after cache",
        "of whom 1 files were re-formatted",
        "all of this in 0.50s",
    ]


def test_render_summary_lists_changed_paths_when_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    logger = build_run_logger(emoji=False, no_color=True, debug=True)
    summary = RunSummary(reformatted=1, changed={"go": [Path("/p/src/a.go")]})

    render_summary(summary, logger=logger, tree_root=Path("/p"))

    assert "reformatted formatter=go path=src/a.go" in capsys.readouterr().out


def test_render_summary_is_silent_when_quiet(capsys: pytest.CaptureFixture[str]) -> None:
    logger = build_run_logger(emoji=False, no_color=True, quiet=True)

    render_summary(RunSummary(traversed=1), logger=logger)

    assert capsys.readouterr().out == ""
    assert not RunSummary().has_changes
