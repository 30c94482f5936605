"""Attaches proposed comments to the declarations they describe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Set

from ..errors import MergeSerializationError, ParseError
from ..logging import get_logger
from ..models import AnnotationEntry
from .structure import Edit, StructuralModel, apply_edits, parse_source

logger = get_logger("golang.merger")


@dataclass(frozen=True)
class MergeResult:
    """Merged source and the number of doc comments it gained."""

    text: str
    added: int
    model: StructuralModel


def render_comment(comment: str, indent: str = "") -> str:
    """Turn prose into ``//`` line comments, one per line, ending with a newline."""
    rendered: List[str] = []
    for line in comment.strip().splitlines():
        line = line.rstrip()
        rendered.append(f"{indent}// {line}" if line else f"{indent}//")
    return "\n".join(rendered) + "\n"


def merge_comments(model: StructuralModel, entries: Sequence[AnnotationEntry]) -> MergeResult:
    """Attach entries to undocumented declarations of ``model``.

    Declarations are visited in document order. For each one, the first
    unconsumed entry whose ``position`` occurs in the declaration's source
    wins and is consumed. Declarations that already carry a doc comment are
    left alone, and entries that never match are dropped.
    """
    consumed: Set[int] = set()
    edits: List[Edit] = []

    for node in model.nodes:
        if model.comments.doc_for(node):
            continue
        fragment = model.slice(node)
        for index, entry in enumerate(entries):
            if index in consumed:
                continue
            if not entry.position or not entry.comment.strip():
                continue
            if entry.position not in fragment:
                continue
            block = render_comment(entry.comment, node.indent)
            edits.append((node.line_start, node.line_start, block.encode("utf-8")))
            consumed.add(index)
            logger.debug("Attaching comment to %s %s", node.kind, node.name or "<anonymous>")
            break

    dropped = len(entries) - len(consumed)
    if dropped:
        logger.debug("%d annotation(s) matched no undocumented declaration", dropped)

    merged = apply_edits(model.source, edits).decode("utf-8")
    try:
        rebuilt = parse_source(merged)
    except ParseError as exc:
        raise MergeSerializationError(f"merged source no longer parses: {exc}") from exc

    if len(rebuilt.nodes) != len(model.nodes):
        raise MergeSerializationError(
            f"merge changed declaration count from {len(model.nodes)} to {len(rebuilt.nodes)}"
        )
    comments = rebuilt.comments.filter(rebuilt.nodes)
    if len(comments) != len(model.comments) + len(edits):
        raise MergeSerializationError("merged comments are not attached to their declarations")

    return MergeResult(text=rebuilt.text, added=len(edits), model=rebuilt)


__all__ = ["MergeResult", "merge_comments", "render_comment"]
