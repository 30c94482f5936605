"""Tests for filesystem discovery of Go files."""

from __future__ import annotations

from pathlib import Path

import pytest

from gocmt.discovery import discover_paths, is_eligible
from gocmt.errors import DiscoveryError


def _touch(root: Path, *relatives: str) -> None:
    for relative in relatives:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("package demo\n", encoding="utf-8")


def test_discover_paths_walks_directories(tmp_path: Path) -> None:
    _touch(
        tmp_path,
        "main.go",
        "main_test.go",
        "README.md",
        "pkg/store/store.go",
        "pkg/store/store_test.go",
        "vendor/dep/dep.go",
        ".git/hooks/hook.go",
    )

    files = discover_paths(tmp_path)

    assert [path.relative_to(tmp_path).as_posix() for path in files] == [
        "main.go",
        "pkg/store/store.go",
    ]


def test_discover_paths_accepts_single_file(tmp_path: Path) -> None:
    _touch(tmp_path, "main.go", "main_test.go")

    assert discover_paths(tmp_path / "main.go") == [tmp_path / "main.go"]
    assert discover_paths(tmp_path / "main_test.go") == []


def test_discover_paths_returns_empty_when_nothing_eligible(tmp_path: Path) -> None:
    _touch(tmp_path, "notes.txt", "a_test.go")

    assert discover_paths(tmp_path) == []


def test_discover_paths_applies_exclude_globs(tmp_path: Path) -> None:
    _touch(tmp_path, "api/api.pb.go", "api/api.go", "gen/models.go", "cmd/main.go")

    files = discover_paths(tmp_path, ["*.pb.go", "gen/"])

    assert [path.relative_to(tmp_path).as_posix() for path in files] == ["api/api.go", "cmd/main.go"]


def test_discover_paths_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        discover_paths(tmp_path / "missing")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("main.go", True),
        ("pkg/handler.go", True),
        ("pkg/handler_test.go", False),
        ("pkg/handler.go.orig", False),
        ("docs/guide.md", False),
        ("internal/go", False),
    ],
)
def test_is_eligible(path: str, expected: bool) -> None:
    assert is_eligible(path) is expected
