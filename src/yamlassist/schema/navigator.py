"""Schema navigation and completion candidates.

Union schemas (``anyOf``/``oneOf``/``allOf``) are never collapsed to a single
branch: while a document is being typed there is no way to know which branch
the author means, so every branch that accepts the path contributes.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from yamlassist.models.completion import Completion, CompletionKind
from yamlassist.schema.registry import Schema

SchemaNode = dict[str, Any] | bool

UNION_KEYWORDS = ("anyOf", "oneOf", "allOf")
_MAX_REF_DEPTH = 32


def _pointer(root: dict[str, Any], ref: str) -> SchemaNode:
    if not ref.startswith("#"):
        raise ValueError(f"only local schema references are supported, got '{ref}'")
    node: Any = root
    for part in ref[1:].split("/"):
        if not part:
            continue
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(node, list):
            node = node[int(part)]
        else:
            node = node[part]
    return node


def resolve_ref(node: SchemaNode, root: dict[str, Any]) -> SchemaNode:
    """Follow local ``$ref`` chains (``#/definitions/...``)."""
    for _ in range(_MAX_REF_DEPTH):
        if not isinstance(node, dict) or "$ref" not in node:
            return node
        node = _pointer(root, node["$ref"])
    raise ValueError("schema reference chain is too deep or cyclic")


def schema_type(node: SchemaNode) -> str:
    """Classify a schema node for navigation and completion."""
    if node is True:
        return "any"
    if node is False:
        return "false"
    for keyword in UNION_KEYWORDS:
        if keyword in node:
            return keyword
    declared = node.get("type")
    types = [declared] if isinstance(declared, str) else list(declared or [])
    if "object" in types or "properties" in node or "patternProperties" in node:
        return "object"
    if "array" in types or "items" in node:
        return "array"
    if "enum" in node:
        return "enum"
    if "const" in node:
        return "const"
    if len(types) == 1:
        return types[0]
    if "boolean" in types:
        return "boolean"
    return "any"


def _union_parts(node: dict[str, Any]) -> list[SchemaNode]:
    """Alternatives of a union node, led by the node's own structure if it has one.

    ``{"type": "object", "properties": {...}, "anyOf": [...]}`` keeps its
    properties next to the branches.
    """
    own = {key: value for key, value in node.items() if key not in UNION_KEYWORDS}
    parts: list[SchemaNode] = [own] if schema_type(own) != "any" else []
    for keyword in UNION_KEYWORDS:
        parts.extend(node.get(keyword, []))
    return parts


def _definition(schema: Schema | dict[str, Any]) -> dict[str, Any]:
    return schema.definition if isinstance(schema, Schema) else schema


def navigate_schema(
    schema: Schema | dict[str, Any], path: Sequence[str | int]
) -> list[SchemaNode]:
    """Return every sub-schema reachable from *schema* along *path*.

    Object schemas are entered by property name (then matching
    ``patternProperties``, then a schema-valued ``additionalProperties``);
    array schemas by any integer index.  A branch that cannot follow the path
    is dropped on its own.
    """
    root = _definition(schema)

    def inner(node: SchemaNode, index: int) -> list[SchemaNode]:
        node = resolve_ref(node, root)
        if index == len(path):
            return [node]
        kind = schema_type(node)
        if kind in UNION_KEYWORDS:
            assert isinstance(node, dict)
            return [found for part in _union_parts(node) for found in inner(part, index)]
        segment = path[index]
        if kind == "object":
            assert isinstance(node, dict)
            if isinstance(segment, int):
                return []
            properties = node.get("properties", {})
            if segment in properties:
                return inner(properties[segment], index + 1)
            matches = [
                sub
                for pattern, sub in node.get("patternProperties", {}).items()
                if re.search(pattern, segment)
            ]
            if matches:
                return [found for sub in matches for found in inner(sub, index + 1)]
            additional = node.get("additionalProperties")
            if isinstance(additional, dict):
                return inner(additional, index + 1)
            return []
        if kind == "array":
            assert isinstance(node, dict)
            if not isinstance(segment, int):
                return []
            items = node.get("items")
            if isinstance(items, list):
                return inner(items[segment], index + 1) if 0 <= segment < len(items) else []
            if isinstance(items, dict):
                return inner(items, index + 1)
            return []
        return []

    return inner(root, 0)


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------


def yaml_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _value_completion(value: Any, node: SchemaNode, description: str = "") -> Completion:
    text = yaml_literal(value)
    return Completion(
        value=text,
        kind=CompletionKind.VALUE,
        display=text,
        description=description,
        source_schema=node if isinstance(node, dict) else None,
    )


def schema_completions(node: SchemaNode, root: dict[str, Any]) -> list[Completion]:
    """Key and value completions offered by a single schema node.

    Keys come from ``properties``; values from ``enum``, ``const`` and
    boolean types.  Unions contribute the completions of every branch and
    arrays those of their item schema.  Duplicates are dropped.
    """
    result: list[Completion] = []
    seen: set[tuple[str, str]] = set()

    def add(completion: Completion) -> None:
        marker = (completion.value, completion.kind)
        if marker not in seen:
            seen.add(marker)
            result.append(completion)

    def walk(current: SchemaNode, depth: int) -> None:
        current = resolve_ref(current, root)
        if not isinstance(current, dict) or depth > _MAX_REF_DEPTH:
            return
        kind = schema_type(current)
        description = current.get("description", "")
        if kind in UNION_KEYWORDS:
            for part in _union_parts(current):
                walk(part, depth + 1)
        elif kind == "object":
            for key, sub in current.get("properties", {}).items():
                resolved = resolve_ref(sub, root)
                sub_description = sub.get("description", "") if isinstance(sub, dict) else ""
                if not sub_description and isinstance(resolved, dict):
                    sub_description = resolved.get("description", "")
                add(
                    Completion(
                        value=f"{key}: ",
                        kind=CompletionKind.KEY,
                        display=key,
                        description=sub_description,
                        suggest_on_accept=schema_type(resolved) in ("object", "array"),
                        source_schema=resolved if isinstance(resolved, dict) else None,
                    )
                )
        elif kind == "array":
            items = current.get("items")
            if isinstance(items, dict):
                walk(items, depth + 1)
        elif kind == "enum":
            for value in current["enum"]:
                add(_value_completion(value, current, description))
        elif kind == "const":
            add(_value_completion(current["const"], current, description))
        elif kind == "boolean":
            add(_value_completion(True, current, description))
            add(_value_completion(False, current, description))

    walk(node, 0)
    return result
