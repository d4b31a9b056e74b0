# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime services: consoles, the run logger and subprocess execution.

Import :class:`~treeformat.runtime.logger.RunLogger` from its module directly;
it depends on :mod:`treeformat.logging`, which in turn depends on the console
helpers exported here.
"""

from __future__ import annotations

from .console import RichConsoleManager, detect_tty, get_console_manager
from .process import CommandOptions, SubprocessExecutionError, resolve_executable, run_command

__all__ = [
    "CommandOptions",
    "RichConsoleManager",
    "SubprocessExecutionError",
    "detect_tty",
    "get_console_manager",
    "resolve_executable",
    "run_command",
]
