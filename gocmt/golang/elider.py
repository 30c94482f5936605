"""Shrinks Go source to signatures before it is sent for annotation."""

from __future__ import annotations

import re
from typing import Callable

from ..errors import BoilerplateNotFoundError
from ..logging import get_logger
from .structure import StructuralModel, apply_edits, parse_source

BODY_PLACEHOLDER = b"{}"

_PROLOGUE_RE = re.compile(r"package\s+\w+\s+import\s+\((.*?)\)", re.DOTALL)

logger = get_logger("golang.elider")


def elide_bodies(model: StructuralModel, formatter: Callable[[str], str]) -> str:
    """Return canonical text of ``model`` with every function body emptied.

    Signatures and doc comments are kept; comments that lived inside a body
    disappear with it.
    """
    edits = [(start, end, BODY_PLACEHOLDER) for start, end in model.function_bodies()]
    elided = apply_edits(model.source, edits).decode("utf-8")
    rebuilt = parse_source(elided)
    return formatter(rebuilt.text)


def strip_boilerplate(source: str) -> str:
    """Remove the leading ``package ... import ( ... )`` block."""
    match = _PROLOGUE_RE.search(source)
    if match is None:
        raise BoilerplateNotFoundError("package or import section not found")
    return source.replace(match.group(0), "").strip()


def prepare_request_source(model: StructuralModel, formatter: Callable[[str], str]) -> str:
    """Elide bodies and strip the prologue, keeping the full text if no prologue matches."""
    elided = elide_bodies(model, formatter)
    try:
        return strip_boilerplate(elided)
    except BoilerplateNotFoundError as exc:
        logger.debug("Sending un-trimmed source: %s", exc)
        return elided


__all__ = ["BODY_PLACEHOLDER", "elide_bodies", "prepare_request_source", "strip_boilerplate"]
