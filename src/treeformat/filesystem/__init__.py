# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem helpers exposed for external consumers."""

from __future__ import annotations

from .paths import Mtime, display_relative_path, expand_path, is_within_root, read_mtime, resolve_targets

__all__ = (
    "Mtime",
    "display_relative_path",
    "expand_path",
    "is_within_root",
    "read_mtime",
    "resolve_targets",
)
