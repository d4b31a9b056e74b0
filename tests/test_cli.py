# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the treeformat command line interface."""

from __future__ import annotations

import importlib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from treeformat.cli import EXIT_CHANGED, EXIT_FAILURE, EXIT_OK, app
from treeformat.config import CONFIG_FILENAME


@pytest.fixture
def configured(project: Path, formatter_script, write_file, write_config) -> Path:
    write_file(project / "a.go", "package main")
    write_file(project / "b.md", "UPPER")
    write_config(
        project,
        {
            "go": {"command": str(formatter_script("gofmt")), "includes": ["*.go"]},
            "md": {"command": str(formatter_script("mdfmt")), "includes": ["*.md"]},
        },
    )
    return project


def test_init_writes_template_once(tmp_path: Path) -> None:
    runner = CliRunner()

    created = runner.invoke(app, ["-C", str(tmp_path), "--init", "--no-emoji"])
    again = runner.invoke(app, ["-C", str(tmp_path), "--init", "--no-emoji"])

    assert created.exit_code == EXIT_OK
    assert (tmp_path / CONFIG_FILENAME).is_file()
    assert "Generated" in created.stdout
    assert again.exit_code == EXIT_FAILURE
    assert "already exists" in again.output


def test_missing_config_is_reported(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()

    result = CliRunner().invoke(app, ["-C", str(empty), "--no-emoji", "--cache-dir", str(tmp_path / "cache")])

    assert result.exit_code == EXIT_FAILURE
    assert f"{CONFIG_FILENAME} could not be found" in result.output


def test_run_formats_tree_and_uses_cache(configured: Path, cache_dir: Path) -> None:
    runner = CliRunner()
    args = ["-C", str(configured), "--cache-dir", str(cache_dir), "--no-emoji", "--no-color"]

    first = runner.invoke(app, args)
    second = runner.invoke(app, args)

    assert first.exit_code == EXIT_OK, first.output
    assert "matched 2 files to formatters" in first.stdout
    assert "of whom 1 files were re-formatted" in first.stdout
    assert (configured / "a.go").read_text(encoding="utf-8") == "PACKAGE MAIN"
    assert second.exit_code == EXIT_OK
    assert "left with 0 files after cache" in second.stdout


def test_fail_on_change_exit_code(configured: Path, cache_dir: Path) -> None:
    runner = CliRunner()
    args = ["-C", str(configured), "--cache-dir", str(cache_dir), "--no-emoji", "--fail-on-change"]

    changed = runner.invoke(app, args)
    clean = runner.invoke(app, args)

    assert changed.exit_code == EXIT_CHANGED
    assert "fail-on-change" in changed.output
    assert clean.exit_code == EXIT_OK


def test_relative_paths_are_resolved_against_working_directory(configured: Path, cache_dir: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["-C", str(configured), "--cache-dir", str(cache_dir), "--no-emoji", "b.md", "../elsewhere.go"],
    )

    assert result.exit_code == EXIT_OK
    assert "Ignoring path ../elsewhere.go, it is not in the project root" in result.output
    assert "matched 1 files to formatters" in result.stdout
    assert (configured / "a.go").read_text(encoding="utf-8") == "package main"


def test_explicit_config_and_tree_root(
    tmp_path: Path,
    project: Path,
    cache_dir: Path,
    formatter_script,
    write_file,
    write_config,
) -> None:
    write_file(project / "a.go", "package main")
    config = write_config(tmp_path, {"go": {"command": str(formatter_script("gofmt")), "includes": ["*.go"]}})

    result = CliRunner().invoke(
        app,
        [
            "--config-file",
            str(config),
            "--tree-root",
            str(project),
            "--cache-dir",
            str(cache_dir),
            "--jobs",
            "1",
            "--quiet",
        ],
    )

    assert result.exit_code == EXIT_OK
    assert result.stdout == ""
    assert (project / "a.go").read_text(encoding="utf-8") == "PACKAGE MAIN"


def test_invalid_config_exits_with_failure(tmp_path: Path, cache_dir: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("[formatter.go]\nunknown = 1\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["-C", str(tmp_path), "--cache-dir", str(cache_dir), "--no-emoji"])

    assert result.exit_code == EXIT_FAILURE
    assert "Invalid configuration" in result.output


def test_unexpected_errors_during_run_are_not_reported_as_config_errors(
    configured: Path,
    cache_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _explode(*_args, **_kwargs):
        raise ValueError("internal failure")

    monkeypatch.setattr(importlib.import_module("treeformat.cli.app"), "run_treeformat", _explode)

    result = CliRunner().invoke(app, ["-C", str(configured), "--cache-dir", str(cache_dir), "--no-emoji"])

    assert isinstance(result.exception, ValueError)
    assert "internal failure" not in result.output

def test_stdin_formats_and_prints(configured: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["-C", str(configured), "--no-emoji", "--stdin", "src/main.go"],
        input="package main\n",
    )

    assert result.exit_code == EXIT_OK
    assert result.stdout == "PACKAGE MAIN\n"
    assert not (configured / "src").exists()


def test_stdin_without_matching_formatter_fails(configured: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["-C", str(configured), "--no-emoji", "--stdin", "notes.txt"],
        input="hello\n",
    )

    assert result.exit_code == EXIT_FAILURE
    assert "no formatter matches" in result.output
