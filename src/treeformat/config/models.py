# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for ``treeformat.toml``."""

from __future__ import annotations

import math
import os

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def default_parallel_jobs() -> int:
    """Return 75% of available CPU cores (minimum of 1)."""

    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


class FormatterConfig(BaseModel):
    """Declarative description of one formatter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    command: str
    options: tuple[str, ...] = Field(default_factory=tuple)
    includes: tuple[str, ...] = Field(default_factory=tuple)
    excludes: tuple[str, ...] = Field(default_factory=tuple)
    work_dir: str | None = None

    @field_validator("command")
    @classmethod
    def _require_command(cls, value: str) -> str:
        """Reject blank commands.

        Args:
            value: Raw command string from the configuration file.

        Returns:
            str: The stripped command.

        Raises:
            ValueError: If the command is empty.
        """

        stripped = value.strip()
        if not stripped:
            raise ValueError("command must not be empty")
        return stripped


class GlobalConfig(BaseModel):
    """Settings applied to every formatter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    excludes: tuple[str, ...] = Field(default_factory=tuple)


class ProjectConfig(BaseModel):
    """Parsed project configuration.

    ``formatter`` keeps the declaration order of the file; the engine sorts by
    name wherever ordering matters.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    formatter: dict[str, FormatterConfig] = Field(default_factory=dict)


__all__ = [
    "ConfigError",
    "FormatterConfig",
    "GlobalConfig",
    "ProjectConfig",
    "default_parallel_jobs",
]
