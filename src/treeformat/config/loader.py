# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate, read and scaffold ``treeformat.toml`` files."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .models import ConfigError, ProjectConfig

CONFIG_FILENAME: Final[str] = "treeformat.toml"
CACHE_DIR_NAME: Final[str] = "treeformat"
XDG_CACHE_ENV: Final[str] = "XDG_CACHE_HOME"

DEFAULT_CONFIG_TEMPLATE: Final[str] = """\
# treeformat configuration.
#
# Every [formatter.<name>] table declares an external program that rewrites
# the files given as trailing arguments in place.

[global]
# Patterns excluded from every formatter.
excludes = []

# [formatter.python]
# command = "black"
# options = ["--quiet"]
# includes = ["*.py"]
# excludes = []

# [formatter.markdown]
# command = "prettier"
# options = ["--write"]
# includes = ["*.md"]
"""


def load_config(path: Path) -> ProjectConfig:
    """Return the :class:`ProjectConfig` stored at ``path``.

    Args:
        path: Location of the TOML configuration file.

    Returns:
        ProjectConfig: Validated configuration.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML or does not
            match the configuration schema.
    """

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return parse_config(data, source=str(path))


def parse_config(data: Mapping[str, Any], *, source: str = "<memory>") -> ProjectConfig:
    """Validate raw TOML ``data`` into a :class:`ProjectConfig`.

    Args:
        data: Decoded TOML document.
        source: Human-readable origin used in error messages.

    Returns:
        ProjectConfig: Validated configuration.

    Raises:
        ConfigError: If ``data`` does not match the configuration schema.
    """

    try:
        return ProjectConfig.model_validate(dict(data))
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"Invalid configuration in {source}: {details}") from exc


def find_config_file(start: Path) -> Path | None:
    """Search ``start`` and its ancestors for ``treeformat.toml``.

    Args:
        start: Directory the search begins in.

    Returns:
        Path | None: The closest configuration file, or ``None`` when absent.
    """

    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def write_default_config(directory: Path) -> Path:
    """Create a commented ``treeformat.toml`` template in ``directory``.

    Args:
        directory: Directory receiving the template.

    Returns:
        Path: Location of the created file.

    Raises:
        ConfigError: If a configuration file already exists or cannot be written.
    """

    target = directory / CONFIG_FILENAME
    try:
        with target.open("x", encoding="utf-8") as handle:
            handle.write(DEFAULT_CONFIG_TEMPLATE)
    except FileExistsError as exc:
        raise ConfigError(f"{target} already exists") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to write {target}: {exc.strerror or exc}") from exc
    return target


def default_cache_dir() -> Path:
    """Return the per-user cache directory for manifests."""

    xdg = os.environ.get(XDG_CACHE_ENV)
    base = Path(xdg).expanduser() if xdg else Path.home() / ".cache"
    return (base / CACHE_DIR_NAME).absolute()


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "default_cache_dir",
    "find_config_file",
    "load_config",
    "parse_config",
    "write_default_config",
]
