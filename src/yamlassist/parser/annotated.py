"""Value trees annotated with exact source spans.

:func:`build_annotated` turns a ``ruamel.yaml`` node tree into
:class:`AnnotatedNode` objects whose ``start``/``end`` offsets index into the
mapped code that was parsed, and therefore resolve to root-document
positions through the mapped text.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from yamlassist.text.mapped import MappedText

PathSegment = str | int


class NodeKind(StrEnum):
    SCALAR = "scalar"
    MAPPING = "mapping"
    SEQUENCE = "sequence"


@dataclass
class AnnotatedNode:
    """A parsed value plus its ``[start, end)`` span in ``source``.

    Mappings keep ``keys`` and ``children`` as parallel lists.
    """

    kind: NodeKind
    value: Any
    start: int
    end: int
    source: MappedText
    children: list[AnnotatedNode] = field(default_factory=list)
    keys: list[AnnotatedNode] = field(default_factory=list)

    def root_span(self) -> tuple[int, int, int, int]:
        """``(start_row, start_col, end_row, end_col)`` in the root document."""
        source, start, end = self.source.locate_range(self.start, self.end)
        start_row, start_col = source.position(start)
        end_row, end_col = source.position(end)
        return start_row, start_col, end_row, end_col

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


@dataclass
class CursorLocation:
    """Where a cursor offset falls inside an annotated tree."""

    path: list[PathSegment]
    with_error: bool = False
    kind: str | None = None  # "key" or "value" when known
    node: AnnotatedNode | None = None


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def key_string(value: Any) -> str:
    """Render a mapping key the way it appears in an object path."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _scalar_value(node: ScalarNode) -> Any:
    tag = node.tag or ""
    text = node.value
    if tag.endswith(":null"):
        return None
    if tag.endswith(":bool"):
        return text.lower() in ("true", "yes", "on")
    if tag.endswith(":int"):
        digits = text.replace("_", "")
        try:
            return int(digits, 0)
        except ValueError:
            try:
                return int(digits, 10)
            except ValueError:
                return text
    if tag.endswith(":float"):
        lowered = text.lower().replace("_", "")
        if lowered in (".inf", "+.inf"):
            return math.inf
        if lowered == "-.inf":
            return -math.inf
        if lowered == ".nan":
            return math.nan
        try:
            return float(lowered)
        except ValueError:
            return text
    return text


def _annotate(node: Node, code: MappedText) -> AnnotatedNode:
    length = len(code.value)
    start = min(max(node.start_mark.index, 0), length)
    end = min(max(node.end_mark.index, start), length)

    if isinstance(node, MappingNode):
        keys: list[AnnotatedNode] = []
        children: list[AnnotatedNode] = []
        value: dict[str, Any] = {}
        for key_node, value_node in node.value:
            key = _annotate(key_node, code)
            child = _annotate(value_node, code)
            keys.append(key)
            children.append(child)
            value[key_string(key.value)] = child.value
        return AnnotatedNode(NodeKind.MAPPING, value, start, end, code, children, keys)

    if isinstance(node, SequenceNode):
        children = [_annotate(item, code) for item in node.value]
        return AnnotatedNode(
            NodeKind.SEQUENCE, [c.value for c in children], start, end, code, children
        )

    assert isinstance(node, ScalarNode)
    return AnnotatedNode(NodeKind.SCALAR, _scalar_value(node), start, end, code)


def build_annotated(tree: Node | None, code: MappedText) -> AnnotatedNode | None:
    """Annotate *tree* (parsed from ``code.value``); ``None`` for empty documents."""
    if tree is None or not code.value.strip():
        return None
    return _annotate(tree, code)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


def locate_cursor(root: AnnotatedNode, offset: int) -> CursorLocation:
    """Find the key/index path leading to *offset*.

    At each level the first child whose span contains the offset (end
    inclusive) is selected.  When none does, ``with_error`` is set and the
    path walked so far is returned.
    """
    location = CursorLocation(path=[], node=root)
    node = root
    while True:
        if node.kind is NodeKind.MAPPING:
            for key, child in zip(node.keys, node.children, strict=True):
                if key.contains(offset):
                    location.path.append(key_string(key.value))
                    location.kind = "key"
                    location.node = key
                    return location
                if child.contains(offset):
                    location.path.append(key_string(key.value))
                    location.node = child
                    node = child
                    break
            else:
                location.with_error = True
                return location
        elif node.kind is NodeKind.SEQUENCE:
            selected: int | None = None
            for index, child in enumerate(node.children):
                if child.contains(offset):
                    selected = index
                    break
                if child.start > offset:
                    if index == 0:
                        location.kind = "value"
                        return location
                    selected = index - 1
                    break
            if selected is None:
                location.with_error = True
                return location
            location.path.append(selected)
            node = node.children[selected]
            location.node = node
        else:
            location.kind = "value"
            return location


def node_at_path(
    root: AnnotatedNode, path: list[PathSegment], *, key: bool = False
) -> AnnotatedNode:
    """Return the deepest node reachable along *path*.

    With ``key=True`` the key node of the last mapping segment is returned
    instead of its value.
    """
    node = root
    for depth, segment in enumerate(path):
        if node.kind is NodeKind.MAPPING:
            wanted = key_string(segment)
            for key_node, child in zip(node.keys, node.children, strict=True):
                if key_string(key_node.value) == wanted:
                    if key and depth == len(path) - 1:
                        return key_node
                    node = child
                    break
            else:
                return node
        elif node.kind is NodeKind.SEQUENCE and isinstance(segment, int):
            if not 0 <= segment < len(node.children):
                return node
            node = node.children[segment]
        else:
            return node
    return node
