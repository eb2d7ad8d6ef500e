"""Classification of schema nodes into structural categories."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Final

from typeschema.schema import PRIMITIVE_TYPE_NAMES, Schema


class SchemaType(StrEnum):
    """Structural category of a schema node."""

    ALL_OF = "ALL_OF"
    ANY = "ANY"
    ANY_OF = "ANY_OF"
    BOOLEAN = "BOOLEAN"
    CUSTOM_TYPE = "CUSTOM_TYPE"
    NAMED_ENUM = "NAMED_ENUM"
    NAMED_SCHEMA = "NAMED_SCHEMA"
    NEVER = "NEVER"
    NULL = "NULL"
    NUMBER = "NUMBER"
    OBJECT = "OBJECT"
    ONE_OF = "ONE_OF"
    REFERENCE = "REFERENCE"
    STRING = "STRING"
    TYPED_ARRAY = "TYPED_ARRAY"
    UNION = "UNION"
    UNNAMED_ENUM = "UNNAMED_ENUM"
    UNNAMED_SCHEMA = "UNNAMED_SCHEMA"
    UNTYPED_ARRAY = "UNTYPED_ARRAY"


def is_compound(schema: Schema) -> bool:
    """A union in disguise: list-valued type, ``anyOf`` or ``oneOf``."""
    return (
        isinstance(schema.type, list)
        or schema.any_of is not None
        or schema.one_of is not None
    )


def _default_is_number(schema: Schema) -> bool:
    default = schema.default
    return isinstance(default, int | float) and not isinstance(default, bool)


def _match_boolean(schema: Schema) -> bool:
    if schema.enum is not None:
        return False
    if schema.type == "boolean":
        return True
    return not is_compound(schema) and isinstance(schema.default, bool)


def _match_number(schema: Schema) -> bool:
    if schema.enum is not None:
        return False
    if schema.type in ("integer", "number"):
        return True
    return not is_compound(schema) and _default_is_number(schema)


def _match_string(schema: Schema) -> bool:
    if schema.enum is not None:
        return False
    if schema.type == "string":
        return True
    return not is_compound(schema) and isinstance(schema.default, str)


def _match_object(schema: Schema) -> bool:
    return (
        schema.type == "object"
        and not isinstance(schema.additional_properties, Schema)
        and schema.all_of is None
        and schema.any_of is None
        and schema.one_of is None
        and schema.pattern_properties is None
        and schema.properties is None
        and schema.required is None
    )


def _match_unnamed_enum(schema: Schema) -> bool:
    if schema.ts_enum_names is not None:
        return False
    if schema.type is not None and not (
        isinstance(schema.type, str) and schema.type in PRIMITIVE_TYPE_NAMES
    ):
        return False
    return schema.enum is not None


# Matchers in tag order; the order of the result follows this table.
_MATCHERS: Final[dict[SchemaType, Callable[[Schema], bool]]] = {
    SchemaType.ALL_OF: lambda s: s.all_of is not None,
    SchemaType.ANY: lambda s: s.is_empty() or s.type == "any",
    SchemaType.ANY_OF: lambda s: s.any_of is not None,
    SchemaType.BOOLEAN: _match_boolean,
    SchemaType.NAMED_ENUM: lambda s: s.enum is not None and s.ts_enum_names is not None,
    SchemaType.NAMED_SCHEMA: lambda s: s.id is not None and (
        s.pattern_properties is not None or s.properties is not None
    ),
    SchemaType.NULL: lambda s: s.type == "null",
    SchemaType.NUMBER: _match_number,
    SchemaType.OBJECT: _match_object,
    SchemaType.ONE_OF: lambda s: s.one_of is not None,
    SchemaType.REFERENCE: lambda s: s.ref is not None,
    SchemaType.STRING: _match_string,
    SchemaType.TYPED_ARRAY: lambda s: (
        (s.type is None or s.type == "array") and s.items is not None
    ),
    SchemaType.UNION: lambda s: isinstance(s.type, list),
    SchemaType.UNNAMED_ENUM: _match_unnamed_enum,
    SchemaType.UNTYPED_ARRAY: lambda s: s.type == "array" and s.items is None,
}


def classify(schema: Schema) -> tuple[SchemaType, ...]:
    """Return every structural category ``schema`` belongs to.

    ``tsType`` is an escape hatch that supersedes everything else. A node no
    matcher accepts is an unnamed record. More than one tag means the node
    combines several shapes (e.g. ``allOf`` next to a list-valued ``type``).
    """
    if schema.ts_type:
        return (SchemaType.CUSTOM_TYPE,)
    matched = tuple(tag for tag, matches in _MATCHERS.items() if matches(schema))
    return matched or (SchemaType.UNNAMED_SCHEMA,)
