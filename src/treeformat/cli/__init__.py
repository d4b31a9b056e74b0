# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface for treeformat."""

from __future__ import annotations

from .app import app, main
from .shared import EXIT_CHANGED, EXIT_FAILURE, EXIT_OK, CLIError

__all__ = ["EXIT_CHANGED", "EXIT_FAILURE", "EXIT_OK", "CLIError", "app", "main"]
