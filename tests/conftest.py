from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from tests._fixtures.go import go_source


@pytest.fixture
def identity_formatter() -> Callable[[str], str]:
    """Stand-in for gofmt when the input is already canonical."""
    return lambda source: source


@pytest.fixture
def write_go(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a Go snippet under tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(go_source(content), encoding="utf-8")
        return path

    return _write
