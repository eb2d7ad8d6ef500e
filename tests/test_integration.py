"""Integration tests for typeschema - end-to-end workflows."""

import copy
import json

import pytest

from typeschema import (
    INDEX_KEY,
    ASTType,
    ConflictingIdError,
    Options,
    Schema,
    SchemaError,
    compile_schema,
    normalize,
    parse,
    to_dict,
    to_json,
)


def _person_schema() -> dict:
    address = {
        "type": "object",
        "properties": {"street": {"type": "string"}, "city": {"type": "string"}},
        "required": ["street"],
        "additionalProperties": False,
    }
    person: dict = {
        "title": "Person",
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Full name"},
            "age": {"type": ["integer", "null"]},
            "home": address,
            "status": {
                "enum": ["active", "retired"],
                "tsEnumNames": ["Active", "Retired"],
            },
            "friends": {"type": "array"},
        },
        "required": ["name"],
        "additionalProperties": False,
        "$defs": {"Address": address},
    }
    person["properties"]["friends"]["items"] = person
    return person


class TestCompleteWorkflow:
    """Test complete workflow: ingest, normalize, parse, serialize."""

    def test_person_document(self) -> None:
        """Test: Ingest -> Normalize -> Parse -> Verify members."""
        ast = compile_schema(_person_schema(), "person.json")

        assert ast.type == ASTType.INTERFACE
        assert ast.standalone_name == "Person"
        members = {p.key_name: p for p in ast.params}
        assert list(members) == ["name", "age", "home", "status", "friends", "Address"]

        assert members["name"].is_required
        assert members["name"].ast.comment == "Full name"
        assert not members["age"].is_required
        age_types = [p.type for p in members["age"].ast.params]
        assert age_types == [ASTType.NUMBER, ASTType.NULL]

        home = members["home"].ast
        assert home.standalone_name == "Address"
        assert home is members["Address"].ast
        assert members["Address"].is_unreachable_definition
        assert [p.key_name for p in home.params] == ["street", "city"]

        assert members["status"].ast.type == ASTType.ENUM
        assert members["status"].ast.standalone_name == "Status"

        friends = members["friends"].ast
        assert friends.type == ASTType.ARRAY
        assert friends.params is ast

    def test_serialized_graph_is_finite(self) -> None:
        """Test: Parse cyclic document -> JSON -> decode."""
        ast = compile_schema(_person_schema())
        decoded = json.loads(to_json(ast))
        assert decoded["root"] == {"tag": "ref", "id": "Person"}
        assert set(decoded["nodes"]) == {"Person", "Address", "Status"}
        friends = decoded["nodes"]["Person"]["params"][4]["ast"]
        assert friends["params"] == {"tag": "ref", "id": "Person"}

    def test_output_is_deterministic(self) -> None:
        """Test that two builds of equal input serialize identically."""
        first = to_dict(compile_schema(_person_schema()))
        second = to_dict(compile_schema(_person_schema()))
        assert first == second

    def test_staged_pipeline_matches_compile(self) -> None:
        """Test that the individual stages compose like compile_schema."""
        schema = Schema.from_dict(_person_schema())
        normalize(schema, "person.json")
        staged = parse(schema, file_name="person.json")
        assert to_dict(staged) == to_dict(compile_schema(_person_schema()))

    def test_normalization_is_idempotent_end_to_end(self) -> None:
        """Test that normalizing an already normalized graph changes nothing."""
        schema = Schema.from_dict(_person_schema())
        normalize(schema)
        once = schema.to_dict()
        normalize(schema)
        assert schema.to_dict() == once


class TestSpecExamples:
    """Test documented end-to-end behaviours."""

    def test_string_or_number(self) -> None:
        """Test {type: [string, number]} -> UNION[STRING, NUMBER]."""
        ast = compile_schema({"type": ["string", "number"]})
        assert ast.type == ASTType.UNION
        assert [p.type for p in ast.params] == [ASTType.STRING, ASTType.NUMBER]

    def test_closed_object(self) -> None:
        """Test a closed object has exactly one optional member."""
        ast = compile_schema(
            {
                "type": "object",
                "properties": {"a": {"type": "string"}},
                "additionalProperties": False,
            },
        )
        assert ast.type == ASTType.INTERFACE
        assert [(p.key_name, p.is_required) for p in ast.params] == [("a", False)]
        assert all(p.key_name != INDEX_KEY for p in ast.params)

    def test_enum_of_numbers(self) -> None:
        """Test {enum: [1, 2, 3]} -> UNION of literals."""
        ast = compile_schema({"enum": [1, 2, 3]})
        assert ast.type == ASTType.UNION
        assert [(p.type, p.params) for p in ast.params] == [
            (ASTType.LITERAL, 1),
            (ASTType.LITERAL, 2),
            (ASTType.LITERAL, 3),
        ]

    def test_nullable_enum(self) -> None:
        """Test that a null enum member does not duplicate the null type."""
        ast = compile_schema({"type": ["string", "null"], "enum": ["a", None]})
        assert ast.type == ASTType.UNION
        assert [p.params for p in ast.params] == ["a", None]


class TestOptionsWorkflow:
    """Test options flowing through compile_schema."""

    def test_bounded_array_is_tuple_by_default(self) -> None:
        """Test that bounds are kept unless stripping is requested."""
        data = {"type": "array", "items": {"type": "string"}, "maxItems": 2}
        assert compile_schema(copy.deepcopy(data)).type == ASTType.TUPLE
        stripped = compile_schema(
            copy.deepcopy(data),
            options=Options(strip_item_bounds=True),
        )
        assert stripped.type == ASTType.ARRAY
        assert stripped.comment == "@maxItems 2"


class TestErrorWorkflow:
    """Test that failures surface with context."""

    def test_conflicting_ids(self) -> None:
        """Test that every error derives from SchemaError with a file name."""
        with pytest.raises(SchemaError) as excinfo:
            compile_schema({"id": "a", "$id": "b"}, "ids.json")
        assert isinstance(excinfo.value, ConflictingIdError)
        assert excinfo.value.format().startswith("ids.json: ")
