# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loader import (
    CONFIG_FILENAME,
    default_cache_dir,
    find_config_file,
    load_config,
    parse_config,
    write_default_config,
)
from .models import ConfigError, FormatterConfig, GlobalConfig, ProjectConfig, default_parallel_jobs

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FormatterConfig",
    "GlobalConfig",
    "ProjectConfig",
    "default_cache_dir",
    "default_parallel_jobs",
    "find_config_file",
    "load_config",
    "parse_config",
    "write_default_config",
]
