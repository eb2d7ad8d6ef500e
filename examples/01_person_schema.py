"""
Person Schema Example
=====================

Compiling a linked JSON Schema document into a type AST, demonstrating:
- Normalization defaults (required, additionalProperties, tuple bounds)
- Shared definitions reused by identity
- A self-referencing schema serialized as a finite graph
"""

import logging

from typeschema import ASTType, Options, compile_schema, to_json


# ============================================================================
# Build a linked schema
# ============================================================================

# Refs are already resolved: "Address" is the same dict in both places.
address = {
    "type": "object",
    "properties": {
        "street": {"type": "string"},
        "city": {"type": "string"},
    },
    "required": ["street"],
    "additionalProperties": False,
}

person = {
    "title": "Person",
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Full name"},
        "age": {"type": ["integer", "null"]},
        "home": address,
        "coordinates": {"type": "array", "items": {"type": "number"}, "maxItems": 2},
        "status": {
            "enum": ["active", "retired"],
            "tsEnumNames": ["Active", "Retired"],
        },
        "friends": {"type": "array"},
    },
    "required": ["name"],
    "definitions": {"Address": address},
}
# friends: a list of people
person["properties"]["friends"]["items"] = person


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    ast = compile_schema(person, "person.json")

    print(f"Root: {ast.type} {ast.standalone_name}")
    for member in ast.params:
        required = "" if member.is_required else "?"
        name = member.ast.standalone_name or member.ast.type
        print(f"  {member.key_name}{required}: {name}")
    print()

    friends = next(m for m in ast.params if m.key_name == "friends")
    assert friends.ast.type == ASTType.ARRAY
    assert friends.ast.params is ast
    print("friends is a list of the root interface itself")
    print()

    # Stripping bounds keeps coordinates a plain list
    stripped = compile_schema(
        {"type": "array", "items": {"type": "number"}, "maxItems": 2},
        options=Options(strip_item_bounds=True),
    )
    print(f"With strip_item_bounds: {stripped.type} ({stripped.comment})")
    print()

    print(to_json(ast))


if __name__ == "__main__":
    main()
