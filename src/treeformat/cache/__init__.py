# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache manifest recording formatted files between runs."""

from __future__ import annotations

from .manifest import MANIFEST_VERSION, CacheManifest, ManifestPayload, MatchSet, count_matches, manifest_path

__all__ = [
    "MANIFEST_VERSION",
    "CacheManifest",
    "ManifestPayload",
    "MatchSet",
    "count_matches",
    "manifest_path",
]
