# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the run logger."""

from __future__ import annotations

import pytest

from treeformat.runtime.logger import build_run_logger


def test_quiet_suppresses_informational_output(capsys: pytest.CaptureFixture[str]) -> None:
    logger = build_run_logger(emoji=False, no_color=True, quiet=True, debug=True)

    logger.info("hidden info")
    logger.ok("hidden ok")
    logger.echo("hidden echo")
    logger.debug("hidden debug")
    logger.warn("visible warning")
    logger.error("visible error")

    output = capsys.readouterr().out
    assert "hidden" not in output
    assert "visible warning" in output
    assert "visible error" in output
    assert (logger.warnings, logger.errors) == (1, 1)


def test_debug_output_requires_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    build_run_logger(emoji=False, no_color=True).debug("silent")
    build_run_logger(emoji=False, no_color=True, debug=True).debug("phase=walk took=1s")

    assert capsys.readouterr().out.splitlines() == ["[debug] phase=walk took=1s"]


def test_emoji_prefix_is_optional(capsys: pytest.CaptureFixture[str]) -> None:
    build_run_logger(emoji=False, no_color=True).warn("plain")
    build_run_logger(emoji=True, no_color=True).warn("fancy")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "plain"
    assert lines[1].endswith("fancy")
    assert lines[1] != "fancy"


def test_stderr_routing(capsys: pytest.CaptureFixture[str]) -> None:
    build_run_logger(emoji=False, no_color=True, stderr=True).error("to stderr")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "to stderr" in captured.err
