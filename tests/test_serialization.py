"""Tests for typeschema.serialization module."""

import json

import pytest

from typeschema.ast import AST, ASTType, EnumParam, InterfaceParam
from typeschema.parser import compile_schema
from typeschema.serialization import to_dict, to_json


class TestToDict:
    """Test exporting AST graphs to builtins."""

    def test_anonymous_leaf_is_inlined(self) -> None:
        """Test that a single anonymous node is emitted in place."""
        result = to_dict(AST(type=ASTType.STRING, comment="text"))
        assert result == {"root": {"tag": "STRING", "comment": "text"}, "nodes": {}}

    def test_named_node_is_referenced(self) -> None:
        """Test that named nodes live under nodes, keyed by name."""
        result = to_dict(AST(type=ASTType.NUMBER, standalone_name="Count"))
        assert result == {
            "root": {"tag": "ref", "id": "Count"},
            "nodes": {"Count": {"tag": "NUMBER", "standalone_name": "Count"}},
        }

    def test_shared_anonymous_node(self) -> None:
        """Test that an anonymous node reached twice gets a generated id."""
        shared = AST(type=ASTType.STRING)
        union = AST(type=ASTType.UNION, params=[shared, shared])
        result = to_dict(union)
        ref = {"tag": "ref", "id": "#1"}
        assert result == {
            "root": {"tag": "UNION", "params": [ref, ref]},
            "nodes": {"#1": {"tag": "STRING"}},
        }

    def test_literal_params(self) -> None:
        """Test that literal values are emitted as-is."""
        result = to_dict(AST(type=ASTType.LITERAL, params={"a": [1, 2]}))
        assert result["root"] == {"tag": "LITERAL", "params": {"a": [1, 2]}}

    def test_interface_members(self) -> None:
        """Test the shape of interface members."""
        member = InterfaceParam(
            key_name="a",
            ast=AST(type=ASTType.STRING, key_name="a"),
            is_required=True,
        )
        result = to_dict(AST(type=ASTType.INTERFACE, params=[member], super_types=[]))
        assert result["root"] == {
            "tag": "INTERFACE",
            "params": [
                {
                    "key_name": "a",
                    "ast": {"tag": "STRING", "key_name": "a"},
                    "is_required": True,
                    "is_pattern_property": False,
                    "is_unreachable_definition": False,
                },
            ],
        }

    def test_enum_members(self) -> None:
        """Test the shape of enum members."""
        member = EnumParam(key_name="Red", ast=AST(type=ASTType.LITERAL, params=1))
        result = to_dict(AST(type=ASTType.ENUM, params=[member]))
        assert result["root"]["params"] == [
            {"key_name": "Red", "ast": {"tag": "LITERAL", "params": 1}},
        ]

    def test_tuple_fields(self) -> None:
        """Test that bounds and the spread member are emitted."""
        tuple_ast = AST(
            type=ASTType.TUPLE,
            params=[AST(type=ASTType.STRING)],
            min_items=1,
            max_items=None,
            spread_param=AST(type=ASTType.ANY),
        )
        assert to_dict(tuple_ast)["root"] == {
            "tag": "TUPLE",
            "params": [{"tag": "STRING"}],
            "min_items": 1,
            "spread_param": {"tag": "ANY"},
        }

    def test_cycle(self) -> None:
        """Test that a self-referencing AST serializes through a ref."""
        data: dict = {"type": "object", "properties": {}, "additionalProperties": False}
        data["properties"]["self"] = data
        result = to_dict(compile_schema(data))
        ref = {"tag": "ref", "id": "#1"}
        assert result["root"] == ref
        node = result["nodes"]["#1"]
        assert node["tag"] == "INTERFACE"
        assert node["params"][0]["ast"] == ref

    def test_placeholder_is_rejected(self) -> None:
        """Test that an unfilled placeholder cannot be serialized."""
        with pytest.raises(ValueError, match="placeholder"):
            to_dict(AST(type=ASTType.ARRAY, params=AST.placeholder()))


class TestToJson:
    """Test JSON output."""

    def test_json_matches_dict(self) -> None:
        """Test that the JSON text decodes to the dict form."""
        ast = compile_schema(
            {"title": "Pair", "items": [{"type": "string"}, {"type": "number"}]},
        )
        assert json.loads(to_json(ast)) == to_dict(ast)

    def test_compact_output(self) -> None:
        """Test indent=None for single-line output."""
        assert "\n" not in to_json(AST(type=ASTType.NULL), indent=None)
