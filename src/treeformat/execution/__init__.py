# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatting run orchestration, scheduling and reporting."""

from __future__ import annotations

from .engine import FailOnChangeError, FormatEngine, RunRequest, run_treeformat
from .report import RunSummary, diff_matches, render_summary
from .scheduler import BatchOutcome, FormatScheduler, SchedulerResult
from .stdin import format_stdin, select_formatter

__all__ = [
    "BatchOutcome",
    "FailOnChangeError",
    "FormatEngine",
    "FormatScheduler",
    "RunRequest",
    "RunSummary",
    "SchedulerResult",
    "diff_matches",
    "format_stdin",
    "render_summary",
    "run_treeformat",
    "select_formatter",
]
