"""Structural model of Go source built on tree-sitter.

The model records every top-level declaration together with its exact byte
range in the canonical text, so that slices of the original source can be
recovered for any node and new comments can be spliced in at precise offsets.

Declarations form a closed set of three variants: :class:`FunctionNode`,
:class:`TypeNode` and :class:`GeneralNode`. Callers dispatch over them with
:meth:`fold` instead of inspecting types.

Documentation comments are held in a :class:`CommentMap`, a read-only view
derived from a parse. Anything that changes the source (eliding bodies,
merging comments) produces new text which is parsed again, so the view is
always recomputed rather than patched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    TypeVar,
    Union,
)

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from ..errors import ParseError

GO_LANGUAGE = Language(tree_sitter_go.language())

_FUNCTION_TYPES = {"function_declaration": "function", "method_declaration": "method"}
_GENERAL_TYPES = {"const_declaration": "const", "var_declaration": "var"}
_TYPE_SPEC_TYPES = {"type_spec", "type_alias"}

T = TypeVar("T")
NodeKey = Tuple[str, int, int]
Edit = Tuple[int, int, bytes]


@dataclass(frozen=True)
class _Declaration:
    kind: str
    name: str
    start: int
    end: int
    line_start: int
    indent: str
    doc: Tuple[str, ...]

    @property
    def key(self) -> NodeKey:
        return (self.kind, self.start, self.end)


@dataclass(frozen=True)
class FunctionNode(_Declaration):
    """A function or method declaration; ``body`` is ``None`` for external functions."""

    body: Optional[Tuple[int, int]] = None

    def fold(
        self,
        on_function: Callable[["FunctionNode"], T],
        on_type: Callable[["TypeNode"], T],
        on_general: Callable[["GeneralNode"], T],
    ) -> T:
        return on_function(self)


@dataclass(frozen=True)
class TypeNode(_Declaration):
    """A single type specification."""

    def fold(
        self,
        on_function: Callable[[FunctionNode], T],
        on_type: Callable[["TypeNode"], T],
        on_general: Callable[["GeneralNode"], T],
    ) -> T:
        return on_type(self)


@dataclass(frozen=True)
class GeneralNode(_Declaration):
    """A top-level const or var declaration, grouped or not."""

    def fold(
        self,
        on_function: Callable[[FunctionNode], T],
        on_type: Callable[[TypeNode], T],
        on_general: Callable[["GeneralNode"], T],
    ) -> T:
        return on_general(self)


StructuralNode = Union[FunctionNode, TypeNode, GeneralNode]


class CommentMap(Mapping[NodeKey, Tuple[str, ...]]):
    """Read-only association between declarations and their doc comments."""

    def __init__(self, entries: Mapping[NodeKey, Tuple[str, ...]] | None = None) -> None:
        self._entries: Dict[NodeKey, Tuple[str, ...]] = dict(entries or {})

    @classmethod
    def from_nodes(cls, nodes: Iterable[StructuralNode]) -> "CommentMap":
        return cls({node.key: node.doc for node in nodes if node.doc})

    def __getitem__(self, key: NodeKey) -> Tuple[str, ...]:
        return self._entries[key]

    def __iter__(self) -> Iterator[NodeKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def doc_for(self, node: StructuralNode) -> Tuple[str, ...]:
        return self._entries.get(node.key, ())

    def filter(self, nodes: Iterable[StructuralNode]) -> "CommentMap":
        """Drop associations whose node is not among ``nodes``."""
        present = {node.key for node in nodes}
        return CommentMap({key: doc for key, doc in self._entries.items() if key in present})


@dataclass(frozen=True)
class StructuralModel:
    """Parsed view of one Go file addressed by byte offsets."""

    source: bytes
    nodes: Tuple[StructuralNode, ...]
    comments: CommentMap

    @property
    def text(self) -> str:
        return self.source.decode("utf-8")

    def slice(self, node: StructuralNode) -> str:
        return self.source[node.start : node.end].decode("utf-8")

    def function_bodies(self) -> List[Tuple[int, int]]:
        bodies: List[Tuple[int, int]] = []
        for node in self.nodes:
            body = node.fold(lambda fn: fn.body, lambda _: None, lambda _: None)
            if body is not None:
                bodies.append(body)
        return bodies


@dataclass(frozen=True)
class _Comment:
    start: int
    end: int
    start_row: int
    end_row: int
    text: str


def parse_source(text: str) -> StructuralModel:
    """Parse Go source into a :class:`StructuralModel`; raises ParseError on invalid input."""
    source = text.encode("utf-8")
    tree = Parser(GO_LANGUAGE).parse(source)
    root = tree.root_node
    if root.has_error:
        raise ParseError(_describe_error(root))

    comments = _index_comments(root, source)
    nodes = tuple(_collect_declarations(root, source, comments))
    return StructuralModel(source=source, nodes=nodes, comments=CommentMap.from_nodes(nodes))


def apply_edits(source: bytes, edits: Iterable[Edit]) -> bytes:
    """Replace ``source[start:end]`` with the given bytes for each edit.

    Edits must not overlap. They are applied from the end of the buffer
    backwards so earlier offsets stay valid.
    """
    result = source
    for start, end, replacement in sorted(edits, key=lambda edit: (edit[0], edit[1]), reverse=True):
        result = result[:start] + replacement + result[end:]
    return result


def _describe_error(root: Node) -> str:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            return f"parsing Go code: syntax error at line {row + 1}, column {column + 1}"
        stack.extend(reversed(node.children))
    return "parsing Go code: syntax error"


def _iter_nodes(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _index_comments(root: Node, source: bytes) -> Dict[int, List[_Comment]]:
    by_end_row: Dict[int, List[_Comment]] = {}
    for node in _iter_nodes(root):
        if node.type != "comment":
            continue
        by_end_row.setdefault(node.end_point[0], []).append(
            _Comment(
                start=node.start_byte,
                end=node.end_byte,
                start_row=node.start_point[0],
                end_row=node.end_point[0],
                text=source[node.start_byte : node.end_byte].decode("utf-8"),
            )
        )
    for row in by_end_row.values():
        row.sort(key=lambda comment: comment.start)
    return by_end_row


def _line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def _starts_line(source: bytes, offset: int) -> bool:
    return not source[_line_start(source, offset) : offset].strip()


def _ends_line(source: bytes, offset: int) -> bool:
    newline = source.find(b"\n", offset)
    tail = source[offset:] if newline == -1 else source[offset:newline]
    return not tail.strip()


def _comment_line(source: bytes, row: Sequence[_Comment]) -> bool:
    """True when ``row`` holds nothing but comments."""
    if not (_starts_line(source, row[0].start) and _ends_line(source, row[-1].end)):
        return False
    return all(not source[a.end : b.start].strip() for a, b in zip(row, row[1:]))


def _leading_doc(source: bytes, row: int, comments: Mapping[int, Sequence[_Comment]]) -> Tuple[str, ...]:
    lines: List[str] = []
    expected = row - 1
    while expected >= 0:
        group = comments.get(expected)
        if not group or not _comment_line(source, group):
            break
        lines.extend(comment.text for comment in reversed(group))
        expected = group[0].start_row - 1
    return tuple(reversed(lines))


def _field_text(node: Node, field: str, source: bytes) -> str:
    child = node.child_by_field_name(field)
    if child is None:
        return ""
    return source[child.start_byte : child.end_byte].decode("utf-8")


def _make(
    cls: type,
    kind: str,
    name: str,
    anchor: Node,
    end: int,
    source: bytes,
    comments: Mapping[int, Sequence[_Comment]],
    **extra: object,
) -> StructuralNode:
    line_start = _line_start(source, anchor.start_byte)
    indent_bytes = source[line_start : anchor.start_byte]
    indent = indent_bytes.decode("utf-8") if not indent_bytes.strip() else ""
    return cls(
        kind=kind,
        name=name,
        start=anchor.start_byte,
        end=end,
        line_start=line_start,
        indent=indent,
        doc=_leading_doc(source, anchor.start_point[0], comments),
        **extra,
    )


def _collect_declarations(
    root: Node, source: bytes, comments: Mapping[int, Sequence[_Comment]]
) -> Iterator[StructuralNode]:
    for child in root.children:
        if child.type in _FUNCTION_TYPES:
            body_node = child.child_by_field_name("body")
            body = (body_node.start_byte, body_node.end_byte) if body_node is not None else None
            yield _make(
                FunctionNode,
                _FUNCTION_TYPES[child.type],
                _field_text(child, "name", source),
                child,
                child.end_byte,
                source,
                comments,
                body=body,
            )
        elif child.type == "type_declaration":
            yield from _type_declarations(child, source, comments)
        elif child.type in _GENERAL_TYPES:
            spec_type = f"{_GENERAL_TYPES[child.type]}_spec"
            spec = next(iter(_specs(child, {spec_type})), None)
            name = _field_text(spec, "name", source) if spec is not None else ""
            yield _make(
                GeneralNode,
                _GENERAL_TYPES[child.type],
                name,
                child,
                child.end_byte,
                source,
                comments,
            )


def _specs(decl: Node, types: Set[str]) -> List[Node]:
    """Specs of a declaration, looking through grammar ``*_list`` wrappers."""
    found: List[Node] = []
    for child in decl.children:
        if child.type in types:
            found.append(child)
        elif child.type.endswith("_list"):
            found.extend(c for c in child.children if c.type in types)
    return found


def _is_grouped(decl: Node) -> bool:
    for child in decl.children:
        if child.type == "(":
            return True
        if child.type.endswith("_list") and any(c.type == "(" for c in child.children):
            return True
    return False


def _type_declarations(
    decl: Node, source: bytes, comments: Mapping[int, Sequence[_Comment]]
) -> Iterator[StructuralNode]:
    specs: Sequence[Node] = _specs(decl, _TYPE_SPEC_TYPES)
    grouped = _is_grouped(decl)
    if not grouped and len(specs) == 1:
        # Anchor on the `type` keyword so markers like "type X struct {" match.
        yield _make(TypeNode, "type", _field_text(specs[0], "name", source), decl, decl.end_byte, source, comments)
        return
    for spec in specs:
        yield _make(TypeNode, "type", _field_text(spec, "name", source), spec, spec.end_byte, source, comments)


__all__ = [
    "CommentMap",
    "FunctionNode",
    "GO_LANGUAGE",
    "GeneralNode",
    "StructuralModel",
    "StructuralNode",
    "TypeNode",
    "apply_edits",
    "parse_source",
]
