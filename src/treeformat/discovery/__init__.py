# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File discovery: ignore rules and the classifying tree walker."""

from __future__ import annotations

from .ignore import IgnoreRules, is_hidden
from .walker import TreeWalker, WalkResult, collapse_targets

__all__ = [
    "IgnoreRules",
    "TreeWalker",
    "WalkResult",
    "collapse_targets",
    "is_hidden",
]
