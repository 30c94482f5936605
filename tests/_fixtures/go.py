"""Helpers for writing Go snippets in tests."""

from __future__ import annotations

import shutil
import textwrap

GOFMT_AVAILABLE = shutil.which("gofmt") is not None


def go_source(content: str) -> str:
    """Dedent an inline Go snippet and drop the leading newline."""
    return textwrap.dedent(content).lstrip("\n")


__all__ = ["GOFMT_AVAILABLE", "go_source"]
