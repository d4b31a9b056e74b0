# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console status lines with optional colour and emoji prefixes."""

from __future__ import annotations

from typing import Final

from rich.text import Text

from .runtime.console import detect_tty, get_console_manager

# level -> (emoji prefix, rich style)
_LEVELS: Final[dict[str, tuple[str, str | None]]] = {
    "plain": ("", None),
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise an empty string."""

    return symbol if enable else ""


def _print_line(
    level: str,
    msg: str,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
    stderr: bool = False,
) -> None:
    """Write one status line for ``level`` to the shared console.

    Args:
        level: Key of the level table selecting prefix and style.
        msg: Message text.
        use_emoji: Whether the level's emoji prefix is printed.
        use_color: Explicit colour preference; ``None`` follows TTY detection.
        stderr: Write to standard error instead of standard output.
    """

    prefix, style = _LEVELS[level]
    color_enabled = detect_tty(stderr=stderr) if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji, stderr=stderr)
    text = Text(f"{emoji(prefix, use_emoji)}{msg}")
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def plain(msg: str, *, use_color: bool | None = None, stderr: bool = False) -> None:
    """Emit ``msg`` verbatim."""

    _print_line("plain", msg, use_emoji=False, use_color=use_color, stderr=stderr)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None, stderr: bool = False) -> None:
    _print_line("info", msg, use_emoji=use_emoji, use_color=use_color, stderr=stderr)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None, stderr: bool = False) -> None:
    _print_line("ok", msg, use_emoji=use_emoji, use_color=use_color, stderr=stderr)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None, stderr: bool = False) -> None:
    _print_line("warn", msg, use_emoji=use_emoji, use_color=use_color, stderr=stderr)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None, stderr: bool = False) -> None:
    """Emit an error line; errors stay visible in quiet mode."""

    _print_line("fail", msg, use_emoji=use_emoji, use_color=use_color, stderr=stderr)


__all__ = ["emoji", "fail", "info", "ok", "plain", "warn"]
