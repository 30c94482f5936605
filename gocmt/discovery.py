"""Filesystem discovery of Go files eligible for annotation."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .errors import DiscoveryError
from .logging import get_logger

SOURCE_SUFFIX = ".go"
TEST_SUFFIX = "_test.go"

_EXCLUDED_DIRS = {".git", ".hg", ".svn", "vendor"}

logger = get_logger("discovery")


def is_eligible(path: str | Path, excludes: Sequence[str] = ()) -> bool:
    """Return True for Go sources that are not tests and match no exclude glob."""
    posix = Path(path).as_posix()
    name = posix.rsplit("/", 1)[-1]
    if not name.endswith(SOURCE_SUFFIX) or name.endswith(TEST_SUFFIX):
        return False
    return not _excluded(posix, excludes)


def _excluded(posix: str, excludes: Sequence[str]) -> bool:
    parts = posix.split("/")
    for pattern in excludes:
        pattern = pattern.strip()
        if not pattern:
            continue
        if pattern.endswith("/"):
            if pattern.rstrip("/") in parts[:-1]:
                return True
            continue
        if "/" in pattern:
            if fnmatchcase(posix, pattern) or fnmatchcase(posix, f"*/{pattern}"):
                return True
            continue
        if fnmatchcase(parts[-1], pattern):
            return True
    return False


def _walk(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def discover_paths(root: str | Path, excludes: Sequence[str] = ()) -> List[Path]:
    """List eligible Go files under ``root``, or ``root`` itself if it is an eligible file."""
    path = Path(root).expanduser()
    if not path.exists():
        raise DiscoveryError(f"file or directory not found: {root}")

    if path.is_file():
        return [path] if is_eligible(path.name, excludes) else []

    files = [
        candidate
        for candidate in _walk(path)
        if is_eligible(candidate.relative_to(path), excludes)
    ]
    logger.debug("Discovered %d Go file(s) under %s", len(files), path)
    return files


def filter_eligible(paths: Iterable[str | Path], excludes: Sequence[str] = ()) -> List[Path]:
    return [Path(path) for path in paths if is_eligible(path, excludes)]


__all__ = ["SOURCE_SUFFIX", "TEST_SUFFIX", "discover_paths", "filter_eligible", "is_eligible"]
