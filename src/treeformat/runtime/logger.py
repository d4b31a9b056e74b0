# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Logger handle threaded through every formatting component."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Final

from rich.console import Console
from rich.text import Text

from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import plain as core_plain
from ..logging import warn as core_warn
from .console import detect_tty, get_console_manager

_KEY_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")


@dataclass(slots=True)
class RunLogger:
    """Adapter around the logging helpers honouring verbosity and output preferences.

    The logger is purely a side channel: components call it to report what
    happened but never branch on anything it returns.
    """

    console: Console
    use_emoji: bool = True
    use_color: bool | None = None
    debug_enabled: bool = False
    quiet: bool = False
    stderr: bool = False
    warnings: int = field(default=0, init=False)
    errors: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload rendered with simple ``key=value`` highlighting.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            text.append(raw_value, style="bold blue" if key in {"command", "cmd"} else "bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)

    def info(self, message: str) -> None:
        """Log an informational message unless quiet output was requested."""

        if self.quiet:
            return
        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def ok(self, message: str) -> None:
        """Log a success message unless quiet output was requested."""

        if self.quiet:
            return
        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences.

        Args:
            message: Text describing the warning condition.
        """

        with self._lock:
            self.warnings += 1
        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def error(self, message: str) -> None:
        """Log an error message honouring emoji preferences.

        Args:
            message: Text describing the failure state.
        """

        with self._lock:
            self.errors += 1
        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def echo(self, message: str) -> None:
        """Write ``message`` verbatim unless quiet output was requested."""

        if self.quiet:
            return
        core_plain(message, use_color=self.use_color, stderr=self.stderr)


def build_run_logger(
    *,
    emoji: bool = True,
    debug: bool = False,
    quiet: bool = False,
    no_color: bool = False,
    stderr: bool = False,
) -> RunLogger:
    """Return a :class:`RunLogger` bound to a shared Rich console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        quiet: Whether informational output should be suppressed.
        no_color: Whether terminal colour output should be disabled.
        stderr: Whether all output should be routed to standard error.

    Returns:
        RunLogger: Logger instance ready to be injected into components.
    """

    use_color = False if no_color else detect_tty(stderr=stderr)
    console = get_console_manager().get(color=use_color, emoji=emoji, stderr=stderr)
    return RunLogger(
        console=console,
        use_emoji=emoji,
        use_color=use_color,
        debug_enabled=debug and not quiet,
        quiet=quiet,
        stderr=stderr,
    )


__all__ = ["RunLogger", "build_run_logger"]
