"""Tests for schema navigation and completion candidates."""

from __future__ import annotations

import pytest

from yamlassist.models.completion import CompletionKind
from yamlassist.schema.navigator import (
    navigate_schema,
    resolve_ref,
    schema_completions,
    schema_type,
)
from yamlassist.schema.registry import Schema

UNION_SCHEMA = {
    "anyOf": [
        {"type": "object", "properties": {"a": {"type": "string"}}},
        {"type": "object", "properties": {"a": {"type": "number"}, "b": {}}},
        {"type": "object", "properties": {"b": {"type": "boolean"}}},
    ]
}

REQUIRED_EITHER = {
    "type": "object",
    "properties": {"a": {"type": "boolean"}, "b": {"type": "string"}},
    "anyOf": [{"required": ["a"]}, {"required": ["b"]}],
}


class TestNavigateSchema:
    @pytest.mark.parametrize(("segment", "expected"), [("a", 2), ("b", 2), ("c", 0)])
    def test_union_keeps_every_matching_branch(self, segment: str, expected: int) -> None:
        assert len(navigate_schema(UNION_SCHEMA, [segment])) == expected

    def test_empty_path_returns_node(self) -> None:
        assert navigate_schema(UNION_SCHEMA, []) == [UNION_SCHEMA]

    def test_union_branches_in_order(self) -> None:
        found = navigate_schema(UNION_SCHEMA, ["a"])
        assert found == [{"type": "string"}, {"type": "number"}]

    def test_union_with_own_properties(self) -> None:
        assert navigate_schema(REQUIRED_EITHER, ["a"]) == [{"type": "boolean"}]
        assert navigate_schema(REQUIRED_EITHER, ["c"]) == []

    def test_array_items_for_any_index(self) -> None:
        schema = {"type": "array", "items": {"type": "string"}}
        assert navigate_schema(schema, [0]) == [{"type": "string"}]
        assert navigate_schema(schema, [7]) == [{"type": "string"}]
        assert navigate_schema(schema, ["x"]) == []

    def test_tuple_items(self) -> None:
        schema = {"type": "array", "items": [{"type": "string"}, {"type": "integer"}]}
        assert navigate_schema(schema, [1]) == [{"type": "integer"}]
        assert navigate_schema(schema, [2]) == []

    def test_pattern_properties(self) -> None:
        schema = {"type": "object", "patternProperties": {"^x-": {"type": "string"}}}
        assert navigate_schema(schema, ["x-custom"]) == [{"type": "string"}]
        assert navigate_schema(schema, ["other"]) == []

    def test_additional_properties(self) -> None:
        schema = {"type": "object", "additionalProperties": {"type": "integer"}}
        assert navigate_schema(schema, ["anything"]) == [{"type": "integer"}]

    def test_local_ref(self) -> None:
        schema = {
            "definitions": {"flag": {"type": "boolean"}},
            "type": "object",
            "properties": {"x": {"$ref": "#/definitions/flag"}},
        }
        assert navigate_schema(schema, ["x"]) == [{"type": "boolean"}]

    def test_scalar_cannot_be_entered(self) -> None:
        assert navigate_schema({"type": "string"}, ["x"]) == []

    def test_accepts_registered_schema(self) -> None:
        schema = Schema("s", {"type": "object", "properties": {"x": {"type": "string"}}})
        assert navigate_schema(schema, ["x"]) == [{"type": "string"}]


class TestResolveRef:
    def test_remote_ref_rejected(self) -> None:
        with pytest.raises(ValueError, match="local"):
            resolve_ref({"$ref": "http://example.com/schema"}, {})

    def test_cyclic_ref_rejected(self) -> None:
        root = {"definitions": {"a": {"$ref": "#/definitions/a"}}}
        with pytest.raises(ValueError, match="cyclic"):
            resolve_ref({"$ref": "#/definitions/a"}, root)


class TestSchemaType:
    @pytest.mark.parametrize(
        ("node", "expected"),
        [
            (True, "any"),
            ({"anyOf": []}, "anyOf"),
            ({"properties": {}}, "object"),
            ({"type": ["array", "null"]}, "array"),
            ({"enum": [1, 2]}, "enum"),
            ({"const": "x"}, "const"),
            ({"type": "boolean"}, "boolean"),
            ({"type": ["boolean", "string"]}, "boolean"),
            ({}, "any"),
        ],
    )
    def test_schema_type(self, node: dict | bool, expected: str) -> None:
        assert schema_type(node) == expected


class TestSchemaCompletions:
    def test_object_keys(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "toc": {"type": "boolean", "description": "Table of contents"},
                "format": {"type": "object"},
                "tags": {"type": "array"},
            },
        }
        completions = schema_completions(schema, schema)
        assert [c.value for c in completions] == ["toc: ", "format: ", "tags: "]
        assert all(c.kind is CompletionKind.KEY for c in completions)
        assert [c.suggest_on_accept for c in completions] == [False, True, True]
        assert completions[0].description == "Table of contents"
        assert completions[0].display == "toc"

    def test_union_values_are_deduplicated(self) -> None:
        schema = {"anyOf": [{"type": "boolean"}, {"enum": ["fenced", True]}]}
        completions = schema_completions(schema, schema)
        assert [c.value for c in completions] == ["true", "false", "fenced"]
        assert all(c.kind is CompletionKind.VALUE for c in completions)

    def test_union_with_own_properties(self) -> None:
        completions = schema_completions(REQUIRED_EITHER, REQUIRED_EITHER)
        assert [c.value for c in completions] == ["a: ", "b: "]

    def test_const(self) -> None:
        completions = schema_completions({"const": "x"}, {})
        assert [c.value for c in completions] == ["x"]

    def test_array_offers_item_completions(self) -> None:
        schema = {"type": "array", "items": {"enum": ["a", "b"]}}
        assert [c.value for c in schema_completions(schema, schema)] == ["a", "b"]

    def test_ref_description_is_used(self) -> None:
        root = {
            "definitions": {"opts": {"type": "object", "description": "Options"}},
            "type": "object",
            "properties": {"html": {"$ref": "#/definitions/opts"}},
        }
        [completion] = schema_completions(root, root)
        assert completion.description == "Options"
        assert completion.suggest_on_accept
        assert completion.source_schema == {"type": "object", "description": "Options"}
