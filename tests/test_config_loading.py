# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for treeformat.toml loading and scaffolding."""

from __future__ import annotations

from pathlib import Path

import pytest

from treeformat.config import (
    CONFIG_FILENAME,
    ConfigError,
    default_cache_dir,
    default_parallel_jobs,
    find_config_file,
    load_config,
    parse_config,
    write_default_config,
)


def test_load_config_parses_formatters_and_global_excludes(tmp_path: Path) -> None:
    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text(
        """
[global]
excludes = ["vendor/*"]

[formatter.python]
command = "black"
options = ["--quiet"]
includes = ["*.py"]

[formatter.markdown]
command = "prettier"
includes = ["*.md"]
excludes = ["CHANGELOG.md"]
work_dir = "docs"
""",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.global_.excludes == ("vendor/*",)
    assert sorted(config.formatter) == ["markdown", "python"]
    python = config.formatter["python"]
    assert python.command == "black"
    assert python.options == ("--quiet",)
    assert python.includes == ("*.py",)
    assert python.work_dir is None
    assert config.formatter["markdown"].work_dir == "docs"


def test_missing_sections_default_to_empty() -> None:
    config = parse_config({})

    assert config.formatter == {}
    assert config.global_.excludes == ()


def test_invalid_toml_raises_config_error(tmp_path: Path) -> None:
    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text("[formatter.python\ncommand = ", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(config_path)


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError, match="formatter.python.comand"):
        parse_config({"formatter": {"python": {"comand": "black"}}}, source="inline")


def test_blank_command_is_rejected() -> None:
    with pytest.raises(ConfigError, match="command must not be empty"):
        parse_config({"formatter": {"python": {"command": "   "}}})


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(tmp_path / CONFIG_FILENAME)


def test_find_config_file_searches_ancestors(tmp_path: Path) -> None:
    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text("", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == config_path


def test_find_config_file_returns_none_when_absent(tmp_path: Path) -> None:
    nested = tmp_path / "a"
    nested.mkdir()
    # The temporary directory may itself live below a directory holding a config.
    found = find_config_file(nested)
    assert found is None or not found.is_relative_to(tmp_path)


def test_write_default_config_creates_loadable_template(tmp_path: Path) -> None:
    created = write_default_config(tmp_path)

    assert created == tmp_path / CONFIG_FILENAME
    assert load_config(created).formatter == {}


def test_write_default_config_refuses_to_overwrite(tmp_path: Path) -> None:
    existing = tmp_path / CONFIG_FILENAME
    existing.write_text("# mine\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="already exists"):
        write_default_config(tmp_path)
    assert existing.read_text(encoding="utf-8") == "# mine\n"


def test_default_cache_dir_honours_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))

    assert default_cache_dir() == tmp_path / "treeformat"


def test_default_cache_dir_falls_back_to_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert default_cache_dir() == tmp_path / ".cache" / "treeformat"


@pytest.mark.parametrize(("cores", "expected"), [(None, 1), (1, 1), (4, 3), (16, 12)])
def test_default_parallel_jobs(monkeypatch: pytest.MonkeyPatch, cores: int | None, expected: int) -> None:
    monkeypatch.setattr("treeformat.config.models.os.cpu_count", lambda: cores)

    assert default_parallel_jobs() == expected
