"""
Path containment guard.

A requested path is classified exactly once into Available(path) or
UNAVAILABLE. Nothing downstream can tell "missing" apart from "outside
the root", so responses cannot be used to map the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Resource:
    """Result of classifying a requested path."""

    path: Path | None = None

    @property
    def available(self) -> bool:
        return self.path is not None


UNAVAILABLE = Resource()


def _canonical(candidate: Path) -> tuple[Path, bool]:
    """Strictly resolve candidate, falling back to the lexical form if it is missing."""
    try:
        return candidate.resolve(strict=True), True
    except (OSError, RuntimeError):
        return candidate.resolve(), False


def resolve(raw_path: str, root: Path) -> Resource:
    """Canonicalize raw_path under root and check it is a servable file.

    root must already be absolute and symlink-free. A path that does not
    resolve still goes through the containment and file-type checks, so
    missing and escaping paths do the same work.
    """
    try:
        # An absolute raw_path replaces root here; containment rejects it below.
        candidate, exists = _canonical(root / raw_path)
        confined = candidate != root and candidate.is_relative_to(root)
        regular = candidate.is_file()
    except (OSError, ValueError, RuntimeError):
        return UNAVAILABLE

    if exists and confined and regular:
        return Resource(candidate)
    return UNAVAILABLE
