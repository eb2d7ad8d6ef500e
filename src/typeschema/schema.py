"""Schema node model and ingestion of linked JSON Schema documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, TypeAlias


class _Unset(Enum):
    """Sentinel type for keywords where JSON ``null`` is a meaningful value."""

    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset.UNSET

JSONValue: TypeAlias = (
    "str | int | float | bool | None | list[JSONValue] | dict[str, JSONValue]"
)
SchemaLike: TypeAlias = "Schema | bool"
ItemsValue: TypeAlias = "SchemaLike | list[SchemaLike]"

PRIMITIVE_TYPE_NAMES: Final = frozenset({"boolean", "integer", "number", "string"})


@dataclass(eq=False)
class Schema:
    """One node of a linked JSON Schema graph.

    Nodes compare and hash by identity: the same node may be reachable through
    several paths (shared sub-schemas, self references), and caches key on it.

    Keywords that may legitimately hold JSON ``null`` (``const``, ``default``,
    ``extends``) use ``UNSET`` for absence. Every other keyword uses ``None``.
    """

    type: str | list[str] | None = None
    properties: dict[str, SchemaLike] | None = None
    pattern_properties: dict[str, SchemaLike] | None = None
    additional_properties: SchemaLike | None = None
    items: ItemsValue | None = None
    additional_items: SchemaLike | None = None
    min_items: int | None = None
    max_items: int | None = None
    required: list[str] | bool | None = None
    enum: list[Any] | dict[str, Any] | None = None
    ts_enum_names: list[str] | None = None
    ts_type: str | None = None
    const: Any = UNSET
    default: Any = UNSET
    all_of: list[SchemaLike] | None = None
    any_of: list[SchemaLike] | None = None
    one_of: list[SchemaLike] | None = None
    extends: Any = UNSET
    definitions: dict[str, SchemaLike] | None = None
    title: str | None = None
    id: str | None = None
    legacy_id: str | None = None
    description: str | None = None
    deprecated: bool | None = None
    ref: str | None = None
    parent: Schema | None = field(default=None, repr=False)

    @property
    def root(self) -> Schema:
        """The document root this node was ingested under."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def is_empty(self) -> bool:
        """Return True if no keyword at all is set on this node."""
        return all(
            getattr(self, name) in (None, UNSET)
            for name in _KEYWORD_FIELDS
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Schema:
        """Ingest a JSON-compatible schema graph.

        The input may already be cyclic or shared (an upstream linker replaces
        each ``$ref`` with a direct edge to its target). Dict identity is
        preserved: a dict reached through two paths becomes one node.

        Raises:
            TypeError: If ``data`` is not an object, or a schema position holds
                something other than an object or a boolean

        """
        if not isinstance(data, dict):
            msg = f"Expected a schema object at the root, got {type(data).__name__}"
            raise TypeError(msg)
        return _Ingester().ingest(data, None)

    def to_dict(self) -> dict[str, Any]:
        """Export back to JSON-compatible builtins.

        Nodes already on the current path are emitted as ``{"$ref": "#cycle"}``.
        """
        return _export(self, set())


# (json keyword, attribute) pairs in declaration order
_PLAIN_KEYWORDS: Final = (
    ("type", "type"),
    ("minItems", "min_items"),
    ("maxItems", "max_items"),
    ("required", "required"),
    ("enum", "enum"),
    ("tsEnumNames", "ts_enum_names"),
    ("tsType", "ts_type"),
    ("title", "title"),
    ("$id", "id"),
    ("id", "legacy_id"),
    ("description", "description"),
    ("deprecated", "deprecated"),
    ("$ref", "ref"),
)
_NULLABLE_KEYWORDS: Final = (("const", "const"), ("default", "default"))
_SCHEMA_KEYWORDS: Final = (
    ("additionalProperties", "additional_properties"),
    ("additionalItems", "additional_items"),
)
_SCHEMA_LIST_KEYWORDS: Final = (
    ("allOf", "all_of"),
    ("anyOf", "any_of"),
    ("oneOf", "one_of"),
)
_SCHEMA_MAP_KEYWORDS: Final = (
    ("properties", "properties"),
    ("patternProperties", "pattern_properties"),
)
_DEFINITIONS_KEYWORDS: Final = ("definitions", "$defs")

_KEYWORD_FIELDS: Final = (
    *(attr for _, attr in _PLAIN_KEYWORDS),
    *(attr for _, attr in _NULLABLE_KEYWORDS),
    *(attr for _, attr in _SCHEMA_KEYWORDS),
    *(attr for _, attr in _SCHEMA_LIST_KEYWORDS),
    *(attr for _, attr in _SCHEMA_MAP_KEYWORDS),
    "items",
    "extends",
    "definitions",
)


@dataclass
class _Ingester:
    """Converts dicts to Schema nodes, one node per distinct dict."""

    _seen: dict[int, Schema] = field(default_factory=dict)
    # keeps ingested dicts alive so their ids stay unique for the whole walk
    _sources: list[dict[str, Any]] = field(default_factory=list)

    def ingest(self, data: dict[str, Any], parent: Schema | None) -> Schema:
        if (existing := self._seen.get(id(data))) is not None:
            return existing

        node = Schema(parent=parent)
        self._seen[id(data)] = node
        self._sources.append(data)

        for key, attr in _PLAIN_KEYWORDS:
            if key in data:
                setattr(node, attr, data[key])
        for key, attr in _NULLABLE_KEYWORDS:
            if key in data:
                setattr(node, attr, data[key])
        for key, attr in _SCHEMA_KEYWORDS:
            if key in data:
                setattr(node, attr, self._child(data[key], node, key))
        for key, attr in _SCHEMA_LIST_KEYWORDS:
            if key in data:
                setattr(node, attr, self._children(data[key], node, key))
        for key, attr in _SCHEMA_MAP_KEYWORDS:
            if key in data:
                setattr(node, attr, self._child_map(data[key], node, key))

        if "items" in data:
            items = data["items"]
            node.items = (
                self._children(items, node, "items")
                if isinstance(items, list)
                else self._child(items, node, "items")
            )

        if "extends" in data:
            extends = data["extends"]
            if extends is None:
                node.extends = None
            elif isinstance(extends, list):
                node.extends = self._children(extends, node, "extends")
            else:
                node.extends = self._child(extends, node, "extends")

        for key in _DEFINITIONS_KEYWORDS:
            if key in data:
                definitions = self._child_map(data[key], node, key)
                node.definitions = {**(node.definitions or {}), **definitions}

        return node

    def _child(self, value: Any, parent: Schema, keyword: str) -> SchemaLike:
        if isinstance(value, bool):
            return value
        if isinstance(value, dict):
            return self.ingest(value, parent)
        msg = (
            f"Expected a schema object or boolean under '{keyword}', "
            f"got {type(value).__name__}"
        )
        raise TypeError(msg)

    def _children(
        self,
        values: Any,
        parent: Schema,
        keyword: str,
    ) -> list[SchemaLike]:
        if not isinstance(values, list):
            msg = f"Expected a list of schemas under '{keyword}'"
            raise TypeError(msg)
        return [self._child(value, parent, keyword) for value in values]

    def _child_map(
        self,
        values: Any,
        parent: Schema,
        keyword: str,
    ) -> dict[str, SchemaLike]:
        if not isinstance(values, dict):
            msg = f"Expected an object of schemas under '{keyword}'"
            raise TypeError(msg)
        return {
            key: self._child(value, parent, keyword) for key, value in values.items()
        }


def _export(node: Schema, path: set[Schema]) -> dict[str, Any]:
    if node in path:
        return {"$ref": "#cycle"}
    path = path | {node}

    def export(value: Any) -> Any:
        if isinstance(value, Schema):
            return _export(value, path)
        if isinstance(value, list):
            return [export(v) for v in value]
        return value

    result: dict[str, Any] = {}
    for key, attr in (*_PLAIN_KEYWORDS, *_NULLABLE_KEYWORDS, *_SCHEMA_KEYWORDS):
        value = getattr(node, attr)
        if value is not None and value is not UNSET:
            result[key] = export(value)
    for key, attr in _SCHEMA_LIST_KEYWORDS:
        if (value := getattr(node, attr)) is not None:
            result[key] = export(value)
    for key, attr in _SCHEMA_MAP_KEYWORDS:
        if (value := getattr(node, attr)) is not None:
            result[key] = {k: export(v) for k, v in value.items()}
    if node.items is not None:
        result["items"] = export(node.items)
    if node.extends is not UNSET:
        result["extends"] = export(node.extends)
    if node.definitions is not None:
        result["definitions"] = {k: export(v) for k, v in node.definitions.items()}
    return result


def has_type(schema: Schema, type_name: str) -> bool:
    """Return True if ``type_name`` is (one of) the declared type(s)."""
    if isinstance(schema.type, list):
        return type_name in schema.type
    return schema.type == type_name


def is_object_type(schema: Schema) -> bool:
    """Object-like: declares properties, or type ``object`` or ``any``."""
    return (
        schema.properties is not None
        or has_type(schema, "object")
        or has_type(schema, "any")
    )


def is_array_type(schema: Schema) -> bool:
    """Array-like: declares items, or type ``array`` or ``any``."""
    return (
        schema.items is not None
        or has_type(schema, "array")
        or has_type(schema, "any")
    )
