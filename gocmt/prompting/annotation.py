"""Request and response contract for the annotation service."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, ValidationError

from ..errors import ResponseFormatError
from ..models import AnnotationEntry

TEMPLATES_DIR = Path(__file__).with_name("templates")

_FENCE_RE = re.compile(r"(^\s*```(?:json)?[ \t]*\n)|(\n?```\s*$)")


class CommentItem(BaseModel):
    position: str
    comment: str


class CommentPayload(BaseModel):
    comments: List[CommentItem] = []


OUTPUT_EXAMPLE = CommentPayload(
    comments=[
        CommentItem(
            position="type MockManagerInterface interface {",
            comment="MockManagerInterface defines the interface for mock manager.",
        ),
        CommentItem(
            position="type mockManager struct {",
            comment="mockManager is the implementation that mock manager.",
        ),
    ]
)


class AnnotationPrompt:
    """Renders the instruction sent alongside the elided source."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=False,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

    def render(self, source: str) -> str:
        template = self._env.get_template("annotate.j2")
        example = json.dumps(OUTPUT_EXAMPLE.model_dump(), indent=4)
        return template.render(example=example, source=source)


def build_prompt(source: str) -> str:
    return AnnotationPrompt().render(source)


def strip_fences(reply: str) -> str:
    """Remove markdown code fences the service may add despite instructions."""
    return _FENCE_RE.sub("", reply.strip()).strip()


def parse_response(reply: str) -> List[AnnotationEntry]:
    """Decode the service reply into annotation entries.

    Raises ResponseFormatError when the reply is not JSON of the shape
    ``{"comments": [{"position": str, "comment": str}, ...]}``.
    """
    cleaned = strip_fences(reply)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(f"annotation reply is not valid JSON: {exc}") from exc
    try:
        payload = CommentPayload.model_validate(data)
    except ValidationError as exc:
        raise ResponseFormatError(f"annotation reply has unexpected shape: {exc}") from exc
    return [AnnotationEntry(position=item.position, comment=item.comment) for item in payload.comments]


__all__ = [
    "AnnotationPrompt",
    "CommentItem",
    "CommentPayload",
    "build_prompt",
    "parse_response",
    "strip_fences",
]
