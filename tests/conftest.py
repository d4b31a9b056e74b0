# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import os
import stat
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import pytest

from treeformat.runtime.logger import RunLogger, build_run_logger

PAST_NS = 1_600_000_000 * 1_000_000_000

_SCRIPT_TEMPLATE = """#!{python}
import sys
from pathlib import Path

MODE = {mode!r}
LOG = {log!r}

files = [arg for arg in sys.argv[1:] if not arg.startswith("-")]
if LOG:
    with open(LOG, "a", encoding="utf-8") as handle:
        handle.write("\\t".join(files) + "\\n")
if MODE == "fail":
    sys.stderr.write("boom\\n")
    sys.exit(2)
for name in files:
    path = Path(name)
    if MODE == "upper":
        text = path.read_text(encoding="utf-8")
        if text != text.upper():
            path.write_text(text.upper(), encoding="utf-8")
    elif MODE == "touch":
        path.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
"""


@pytest.fixture
def logger() -> RunLogger:
    """Return a plain-text logger writing to the captured standard output."""
    return build_run_logger(emoji=False, no_color=True)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return an empty project root separate from helper scripts."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def formatter_script(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing executable formatter scripts.

    Modes: ``upper`` rewrites files whose content is not upper case, ``touch``
    rewrites every file, ``noop`` leaves files alone and ``fail`` exits with
    status 2. When ``log`` is given every invocation appends its file
    arguments to it, tab separated, one line per invocation.
    """

    bin_dir = tmp_path / "bin"

    def _create(name: str, mode: str = "upper", *, log: Path | None = None) -> Path:
        bin_dir.mkdir(exist_ok=True)
        script = bin_dir / name
        script.write_text(
            _SCRIPT_TEMPLATE.format(python=sys.executable, mode=mode, log=str(log) if log else ""),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _create


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Return a helper writing a file whose mtime is pinned into the past."""

    def _write(path: Path, content: str, *, mtime_ns: int = PAST_NS) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _write


@pytest.fixture
def write_config() -> Callable[..., Path]:
    """Return a helper rendering ``treeformat.toml`` from plain mappings."""

    def _render(values: Sequence[str]) -> str:
        return "[" + ", ".join(json.dumps(value) for value in values) + "]"

    def _write(
        root: Path,
        formatters: Mapping[str, Mapping[str, object]],
        *,
        global_excludes: Sequence[str] = (),
    ) -> Path:
        lines = ["[global]", f"excludes = {_render(global_excludes)}", ""]
        for name, table in formatters.items():
            lines.append(f"[formatter.{name}]")
            for key, value in table.items():
                if isinstance(value, (list, tuple)):
                    lines.append(f"{key} = {_render(value)}")
                else:
                    lines.append(f"{key} = {json.dumps(str(value))}")
            lines.append("")
        config = root / "treeformat.toml"
        config.write_text("\n".join(lines), encoding="utf-8")
        return config

    return _write
