# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persisted record of which (formatter, file) pairs are known to be clean."""

from __future__ import annotations

import hashlib
import os
import tempfile
import urllib.parse
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..filesystem.paths import Mtime
from ..formatters.base import FormatterDefinition, FormatterName
from ..runtime.logger import RunLogger

MANIFEST_VERSION: Final[int] = 2

type MatchSet = dict[FormatterName, dict[Path, Mtime]]


class ManifestPayload(BaseModel):
    """On-disk JSON representation of a :class:`CacheManifest`."""

    model_config = ConfigDict(extra="forbid")

    version: int
    config_file: str
    formatters: dict[str, FormatterDefinition] = Field(default_factory=dict)
    matches: dict[str, dict[str, int]] = Field(default_factory=dict)


class _ManifestMiss(Exception):
    """Raised when a persisted manifest cannot be used for the current run."""


def manifest_path(cache_dir: Path, config_file: Path) -> Path:
    """Return the manifest location for ``config_file`` inside ``cache_dir``.

    Args:
        cache_dir: Directory holding every manifest.
        config_file: Absolute configuration path, used as the namespace key.

    Returns:
        Path: JSON file dedicated to this configuration.
    """

    digest = hashlib.sha256(os.fsencode(config_file)).hexdigest()
    return cache_dir / f"{digest}.json"


def encode_path(path: Path) -> str:
    """Return a lossless JSON-safe key for ``path``.

    File names are arbitrary bytes on POSIX, so the raw bytes are
    percent-encoded rather than decoded as UTF-8.
    """

    return urllib.parse.quote(os.fsencode(path), safe="/")


def decode_path(key: str) -> Path:
    """Return the path encoded by :func:`encode_path`."""

    return Path(os.fsdecode(urllib.parse.unquote_to_bytes(key)))


def count_matches(matches: Mapping[FormatterName, Mapping[Path, Mtime]]) -> int:
    """Return the number of (formatter, path) pairs in ``matches``."""

    return sum(len(paths) for paths in matches.values())


class CacheManifest:
    """Recorded-clean state of the tree as of the end of the previous run.

    Instances are treated as values: every operation returns a new manifest
    and leaves the receiver untouched.
    """

    def __init__(
        self,
        definitions: Mapping[FormatterName, FormatterDefinition] | None = None,
        matches: Mapping[FormatterName, Mapping[Path, Mtime]] | None = None,
    ) -> None:
        """Create a manifest from definitions and recorded mtimes.

        Args:
            definitions: Formatter definitions the entries were validated against.
            matches: Recorded mtimes keyed by formatter name and absolute path.
        """

        self._definitions: dict[FormatterName, FormatterDefinition] = dict(sorted((definitions or {}).items()))
        self._matches: MatchSet = {
            name: dict(sorted(paths.items())) for name, paths in sorted((matches or {}).items()) if paths
        }

    @property
    def definitions(self) -> dict[FormatterName, FormatterDefinition]:
        """Return a copy of the recorded formatter definitions."""

        return dict(self._definitions)

    @property
    def matches(self) -> MatchSet:
        """Return a copy of the recorded mtimes."""

        return {name: dict(paths) for name, paths in self._matches.items()}

    def __len__(self) -> int:
        """Return the number of recorded (formatter, path) entries."""

        return count_matches(self._matches)

    def __eq__(self, other: object) -> bool:
        """Return whether ``other`` records the same definitions and mtimes."""

        if not isinstance(other, CacheManifest):
            return NotImplemented
        return self._definitions == other._definitions and self._matches == other._matches

    def __repr__(self) -> str:
        """Return a compact diagnostic representation."""

        return f"CacheManifest(formatters={list(self._definitions)}, entries={len(self)})"

    @classmethod
    def load(cls, cache_dir: Path, config_file: Path, *, logger: RunLogger) -> CacheManifest:
        """Return the manifest persisted for ``config_file``, or an empty one.

        Loading is best-effort: a missing, unreadable or incompatible file
        simply yields an empty manifest.

        Args:
            cache_dir: Directory holding manifests.
            config_file: Absolute configuration path identifying the manifest.
            logger: Logger receiving the reason a manifest was discarded.

        Returns:
            CacheManifest: Loaded manifest or an empty one.
        """

        path = manifest_path(cache_dir, config_file)
        if not path.is_file():
            logger.debug(f"no cache manifest at {path}")
            return cls()
        try:
            payload = _read_payload(path)
            if payload.version != MANIFEST_VERSION:
                raise _ManifestMiss(f"unsupported version {payload.version}")
            if payload.config_file != encode_path(config_file):
                raise _ManifestMiss(f"manifest belongs to {payload.config_file}")
        except _ManifestMiss as exc:
            logger.debug(f"discarding cache manifest {path}: {exc}")
            return cls()
        matches = {
            name: {decode_path(key): mtime for key, mtime in paths.items()}
            for name, paths in payload.matches.items()
        }
        return cls(definitions=payload.formatters, matches=matches)

    def invalidate_changed_formatters(
        self,
        definitions: Mapping[FormatterName, FormatterDefinition],
    ) -> CacheManifest:
        """Adopt ``definitions``, dropping entries recorded under different ones.

        A formatter whose definition changed (command, options, patterns,
        working directory or executable mtime) loses every cached entry, and so
        does a formatter that is no longer configured.

        Args:
            definitions: Definitions of the formatters configured for this run.

        Returns:
            CacheManifest: Manifest whose definitions are exactly ``definitions``.
        """

        kept = {
            name: paths
            for name, paths in self._matches.items()
            if name in definitions and self._definitions.get(name) == definitions[name]
        }
        return CacheManifest(definitions=definitions, matches=kept)

    def is_clean(self, name: FormatterName, path: Path, mtime: Mtime) -> bool:
        """Return whether ``(name, path)`` is recorded with exactly ``mtime``."""

        if name not in self._definitions:
            return False
        recorded = self._matches.get(name, {}).get(path)
        return recorded is not None and recorded == mtime

    def filter_stale(self, match_set: Mapping[FormatterName, Mapping[Path, Mtime]]) -> MatchSet:
        """Return the subset of ``match_set`` that needs formatting.

        Every formatter key of ``match_set`` is kept, possibly with an empty
        mapping, so callers can tell "matched but clean" from "never matched".

        Args:
            match_set: Current (formatter, path, mtime) triples from the walk.

        Returns:
            MatchSet: Only the stale triples.
        """

        return {
            name: {path: mtime for path, mtime in sorted(paths.items()) if not self.is_clean(name, path, mtime)}
            for name, paths in sorted(match_set.items())
        }

    def merge_results(self, new_matches: Mapping[FormatterName, Mapping[Path, Mtime]]) -> CacheManifest:
        """Record post-run mtimes, replacing prior entries for the same pairs.

        Args:
            new_matches: Mtimes observed after formatting, keyed like a match set.

        Returns:
            CacheManifest: Manifest including ``new_matches``.
        """

        merged = self.matches
        for name, paths in new_matches.items():
            merged.setdefault(name, {}).update(paths)
        return CacheManifest(definitions=self._definitions, matches=merged)

    def to_payload(self, config_file: Path) -> ManifestPayload:
        """Return the serializable payload for this manifest."""

        return ManifestPayload(
            version=MANIFEST_VERSION,
            config_file=encode_path(config_file),
            formatters=dict(self._definitions),
            matches={
                name: {encode_path(path): mtime for path, mtime in paths.items()}
                for name, paths in self._matches.items()
            },
        )

    def persist(self, cache_dir: Path, config_file: Path, *, logger: RunLogger) -> bool:
        """Atomically write the manifest, logging instead of raising on failure.

        Args:
            cache_dir: Directory holding manifests; created when missing.
            config_file: Absolute configuration path identifying the manifest.
            logger: Logger receiving write failures.

        Returns:
            bool: ``True`` when the manifest reached the disk.
        """

        target = manifest_path(cache_dir, config_file)
        document = self.to_payload(config_file).model_dump_json(indent=2)
        temp_path: Path | None = None
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=cache_dir,
                prefix=f".{target.stem}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(document)
            os.replace(temp_path, target)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.warn(f"Unable to write cache manifest {target}: {exc.strerror or exc}")
            return False
        logger.debug(f"cache manifest written path={target} entries={len(self)}")
        return True


def _read_payload(path: Path) -> ManifestPayload:
    """Return the parsed payload stored at ``path``.

    Raises:
        _ManifestMiss: If the file cannot be read or does not match the schema.
    """

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise _ManifestMiss(exc.strerror or str(exc)) from exc
    try:
        return ManifestPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise _ManifestMiss(f"invalid manifest: {exc.error_count()} error(s)") from exc


__all__ = [
    "MANIFEST_VERSION",
    "CacheManifest",
    "ManifestPayload",
    "MatchSet",
    "count_matches",
    "decode_path",
    "encode_path",
    "manifest_path",
]
