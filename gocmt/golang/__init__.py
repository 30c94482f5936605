"""Go source analysis: formatting, structural model, elision and comment merging."""

from .elider import elide_bodies, prepare_request_source, strip_boilerplate
from .formatter import GoFormatter
from .merger import MergeResult, merge_comments, render_comment
from .structure import (
    CommentMap,
    FunctionNode,
    GeneralNode,
    StructuralModel,
    StructuralNode,
    TypeNode,
    parse_source,
)

__all__ = [
    "CommentMap",
    "FunctionNode",
    "GeneralNode",
    "GoFormatter",
    "MergeResult",
    "StructuralModel",
    "StructuralNode",
    "TypeNode",
    "elide_bodies",
    "merge_comments",
    "parse_source",
    "prepare_request_source",
    "render_comment",
    "strip_boilerplate",
]
