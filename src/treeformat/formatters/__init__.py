# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatter construction and execution."""

from __future__ import annotations

from .base import (
    Formatter,
    FormatterDefinition,
    FormatterError,
    FormatterFactory,
    FormatterName,
    FormatterResult,
    SupportsFormatting,
    definitions_of,
    load_formatters,
)

__all__ = [
    "Formatter",
    "FormatterDefinition",
    "FormatterError",
    "FormatterFactory",
    "FormatterName",
    "FormatterResult",
    "SupportsFormatting",
    "definitions_of",
    "load_formatters",
]
