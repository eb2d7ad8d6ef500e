"""Recursive-descent construction of the type AST from a normalized schema.

The parser memoizes every AST it builds by ``(schema node, category)``. An
empty placeholder is cached *before* a node's contents are computed and filled
in place afterwards, so self-referencing and diamond-shaped schemas terminate
and share one AST instance per node.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from typeschema.ast import (
    INDEX_KEY,
    T_ANY,
    T_ANY_ADDITIONAL_PROPERTIES,
    AST,
    ASTType,
    EnumParam,
    InterfaceParam,
)
from typeschema.classify import SchemaType, classify
from typeschema.definitions import DefinitionsCache
from typeschema.errors import MalformedEnumError, UnresolvedReferenceError
from typeschema.naming import generate_name
from typeschema.normalizer import normalize
from typeschema.options import DEFAULT_OPTIONS, Options
from typeschema.schema import UNSET, Schema

logger = logging.getLogger(__name__)

Processed: TypeAlias = "dict[Schema, dict[SchemaType, AST]]"
UsedNames: TypeAlias = "set[str]"

_SCALARS = {
    SchemaType.BOOLEAN: ASTType.BOOLEAN,
    SchemaType.NEVER: ASTType.NEVER,
    SchemaType.NULL: ASTType.NULL,
    SchemaType.NUMBER: ASTType.NUMBER,
    SchemaType.OBJECT: ASTType.OBJECT,
    SchemaType.STRING: ASTType.STRING,
}


@dataclass
class Parser:
    """State of one AST build.

    Attributes:
        file_name: Originating document, used in error messages
        processed: Build cache, ``schema -> category -> AST``
        used_names: Standalone names allocated so far; only ever grows
        definitions: Definitions collected per document root
        root: Schema of the first ``parse`` call. Its definitions also name
            nodes of hand-built graphs, which have no parent links

    """

    file_name: str | None = None
    processed: Processed = field(default_factory=dict)
    used_names: UsedNames = field(default_factory=set)
    definitions: DefinitionsCache = field(default_factory=DefinitionsCache)
    root: Schema | None = None
    # derived copies are memoized so cycles through them hit the cache
    _stripped: dict[Schema, Schema] = field(default_factory=dict)
    _narrowed: dict[tuple[Schema, str], Schema] = field(default_factory=dict)

    def parse(self, schema: Any, key_name: str | None = None) -> AST:
        """Build the AST for ``schema``.

        Args:
            schema: A schema node, a boolean schema, or a bare JSON value
                (as found inside ``enum``)
            key_name: Property name the schema was found under

        Returns:
            The AST, shared with every other path to the same node

        Raises:
            MalformedEnumError: If a named enum is not a plain sequence
            UnresolvedReferenceError: If a ``$ref`` is still present

        """
        if not isinstance(schema, Schema):
            if isinstance(schema, bool):
                return _parse_boolean_schema(schema, key_name)
            return _parse_literal(schema, key_name)

        if self.root is None:
            self.root = schema
        types = classify(schema)
        if len(types) == 1:
            return self._parse_as_type_with_cache(schema, types[0], key_name)

        # The intersection is built before its members so that it gets first
        # pick of the standalone name.
        by_type = self.processed.setdefault(schema, {})
        if (cached := by_type.get(SchemaType.ALL_OF)) is not None:
            return cached
        ast = AST.placeholder()
        by_type[SchemaType.ALL_OF] = ast
        ast.fill(
            AST(
                type=ASTType.INTERSECTION,
                comment=schema.description,
                deprecated=schema.deprecated,
                key_name=key_name,
                standalone_name=self._standalone_name(
                    schema,
                    self._key_for(schema),
                ),
                params=[],
            ),
        )
        # description and id/title are hoisted to the intersection, so the
        # members are built from a copy without them
        stripped = self._strip_name_hints(schema)
        ast.params = [
            self._parse_as_type_with_cache(stripped, type_, key_name) for type_ in types
        ]
        return ast

    def _parse_as_type_with_cache(
        self,
        schema: Schema,
        type_: SchemaType,
        key_name: str | None,
    ) -> AST:
        by_type = self.processed.setdefault(schema, {})
        if (cached := by_type.get(type_)) is not None:
            if cached.is_placeholder:
                logger.debug("Reusing placeholder for cyclic %s node", type_)
            return cached

        ast = AST.placeholder()
        by_type[type_] = ast
        return ast.fill(self._parse_non_literal(schema, type_, key_name))

    def _parse_non_literal(  # noqa: C901, PLR0911
        self,
        schema: Schema,
        type_: SchemaType,
        key_name: str | None,
    ) -> AST:
        key_from_definition = self._key_for(schema)

        match type_:
            case SchemaType.ALL_OF:
                return self._collection(
                    schema, ASTType.INTERSECTION, schema.all_of or [],
                    key_name, key_from_definition,
                )
            case SchemaType.ANY_OF:
                return self._collection(
                    schema, ASTType.UNION, schema.any_of or [],
                    key_name, key_from_definition,
                )
            case SchemaType.ONE_OF:
                return self._collection(
                    schema, ASTType.UNION, schema.one_of or [],
                    key_name, key_from_definition,
                )
            case SchemaType.ANY:
                return T_ANY.copy(
                    comment=schema.description,
                    deprecated=schema.deprecated,
                    key_name=key_name,
                    standalone_name=self._standalone_name(schema, key_from_definition),
                )
            case SchemaType.CUSTOM_TYPE:
                return AST(
                    type=ASTType.CUSTOM_TYPE,
                    comment=schema.description,
                    deprecated=schema.deprecated,
                    key_name=key_name,
                    params=schema.ts_type,
                    standalone_name=self._standalone_name(schema, key_from_definition),
                )
            case SchemaType.NAMED_ENUM:
                return self._named_enum(schema, key_name, key_from_definition)
            case SchemaType.UNNAMED_ENUM:
                values = (
                    list(schema.enum.values())
                    if isinstance(schema.enum, dict)
                    else list(schema.enum or [])
                )
                return AST(
                    type=ASTType.UNION,
                    comment=schema.description,
                    deprecated=schema.deprecated,
                    key_name=key_name,
                    standalone_name=self._standalone_name(schema, key_from_definition),
                    params=[_parse_literal(value, None) for value in values],
                )
            case SchemaType.NAMED_SCHEMA:
                return self._new_interface(schema, key_name)
            case SchemaType.UNNAMED_SCHEMA:
                return self._new_interface(schema, key_name, key_from_definition)
            case SchemaType.REFERENCE:
                raise UnresolvedReferenceError(
                    schema.ref or "",
                    schema=schema,
                    file_name=self.file_name,
                )
            case SchemaType.TYPED_ARRAY:
                return self._typed_array(schema, key_name, key_from_definition)
            case SchemaType.UNTYPED_ARRAY:
                return self._untyped_array(schema, key_name, key_from_definition)
            case SchemaType.UNION:
                name = self._standalone_name(schema, key_from_definition)
                type_names = schema.type if isinstance(schema.type, list) else []
                return AST(
                    type=ASTType.UNION,
                    comment=schema.description,
                    deprecated=schema.deprecated,
                    key_name=key_name,
                    standalone_name=name,
                    params=[self.parse(self._narrow(schema, t)) for t in type_names],
                )
            case _:
                return AST(
                    type=_SCALARS[type_],
                    comment=schema.description,
                    deprecated=schema.deprecated,
                    key_name=key_name,
                    standalone_name=self._standalone_name(schema, key_from_definition),
                )

    def _collection(
        self,
        schema: Schema,
        ast_type: ASTType,
        members: list[Any],
        key_name: str | None,
        key_from_definition: str | None,
    ) -> AST:
        name = self._standalone_name(schema, key_from_definition)
        return AST(
            type=ast_type,
            comment=schema.description,
            deprecated=schema.deprecated,
            key_name=key_name,
            standalone_name=name,
            params=[self.parse(member) for member in members],
        )

    def _named_enum(
        self,
        schema: Schema,
        key_name: str | None,
        key_from_definition: str | None,
    ) -> AST:
        if not isinstance(schema.enum, list):
            msg = "schema.enum is an object; tsEnumNames requires a list of values"
            raise MalformedEnumError(msg, schema=schema, file_name=self.file_name)
        names = schema.ts_enum_names or []
        if len(names) != len(schema.enum):
            msg = (
                f"tsEnumNames has {len(names)} entries but enum has "
                f"{len(schema.enum)} values"
            )
            raise MalformedEnumError(msg, schema=schema, file_name=self.file_name)

        return AST(
            type=ASTType.ENUM,
            comment=schema.description,
            deprecated=schema.deprecated,
            key_name=key_name,
            standalone_name=self._standalone_name(
                schema,
                key_from_definition or key_name,
            ),
            params=[
                EnumParam(key_name=name, ast=_parse_literal(value, None))
                for name, value in zip(names, schema.enum, strict=True)
            ],
        )

    def _typed_array(
        self,
        schema: Schema,
        key_name: str | None,
        key_from_definition: str | None,
    ) -> AST:
        name = self._standalone_name(schema, key_from_definition)
        if not isinstance(schema.items, list):
            return AST(
                type=ASTType.ARRAY,
                comment=schema.description,
                deprecated=schema.deprecated,
                key_name=key_name,
                standalone_name=name,
                params=self.parse(schema.items),
            )

        tuple_ast = AST(
            type=ASTType.TUPLE,
            comment=schema.description,
            deprecated=schema.deprecated,
            key_name=key_name,
            min_items=schema.min_items,
            max_items=schema.max_items,
            standalone_name=name,
            params=[self.parse(item) for item in schema.items],
        )
        if schema.additional_items is True:
            tuple_ast.spread_param = T_ANY.copy()
        elif isinstance(schema.additional_items, Schema):
            tuple_ast.spread_param = self.parse(schema.additional_items)
        return tuple_ast

    def _untyped_array(
        self,
        schema: Schema,
        key_name: str | None,
        key_from_definition: str | None,
    ) -> AST:
        min_items = schema.min_items or 0
        max_items = schema.max_items if isinstance(schema.max_items, int) else -1
        name = self._standalone_name(schema, key_from_definition)

        if min_items > 0 or max_items >= 0:
            return AST(
                type=ASTType.TUPLE,
                comment=schema.description,
                deprecated=schema.deprecated,
                key_name=key_name,
                min_items=min_items,
                max_items=schema.max_items,
                params=[T_ANY.copy() for _ in range(max(max_items, min_items))],
                # no maximum: a spread member collects the rest
                spread_param=None if max_items >= 0 else T_ANY.copy(),
                standalone_name=name,
            )

        return AST(
            type=ASTType.ARRAY,
            comment=schema.description,
            deprecated=schema.deprecated,
            key_name=key_name,
            params=T_ANY.copy(),
            standalone_name=name,
        )

    def _new_interface(
        self,
        schema: Schema,
        key_name: str | None,
        key_from_definition: str | None = None,
    ) -> AST:
        name = self._standalone_name(schema, key_from_definition)
        return AST(
            type=ASTType.INTERFACE,
            comment=schema.description,
            deprecated=schema.deprecated,
            key_name=key_name,
            params=self._parse_schema(schema, name),
            standalone_name=name,
            super_types=self._parse_super_types(schema),
        )

    def _parse_super_types(self, schema: Schema) -> list[AST]:
        if schema.extends is UNSET or not schema.extends:
            return []
        super_types = (
            schema.extends if isinstance(schema.extends, list) else [schema.extends]
        )
        return [self.parse(super_type) for super_type in super_types]

    def _parse_schema(
        self,
        schema: Schema,
        parent_schema_name: str | None,
    ) -> list[InterfaceParam]:
        """Assemble the members of an interface, in declaration order."""
        required = schema.required if isinstance(schema.required, list) else []
        referenced_by = (
            f"`{parent_schema_name}`'s" if parent_schema_name else "its parent's"
        )

        params = [
            InterfaceParam(
                key_name=key,
                ast=self.parse(value, key),
                is_required=key in required,
            )
            for key, value in (schema.properties or {}).items()
        ]

        single_pattern_property = False
        if schema.pattern_properties is not None:
            # Partial support: with no additionalProperties and exactly one
            # pattern, the pattern's schema types the index signature.
            single_pattern_property = (
                not schema.additional_properties
                and len(schema.pattern_properties) == 1
            )
            for key, value in schema.pattern_properties.items():
                ast = self.parse(value, key)
                pattern = key.replace("*/", "*\\/")
                _append_comment(
                    ast,
                    f"This interface was referenced by {referenced_by} JSON-Schema "
                    f'definition\nvia the `patternProperty` "{pattern}".',
                )
                params.append(
                    InterfaceParam(
                        key_name=INDEX_KEY if single_pattern_property else key,
                        ast=ast,
                        is_required=single_pattern_property or key in required,
                        is_pattern_property=not single_pattern_property,
                    ),
                )

        for key, value in (schema.definitions or {}).items():
            ast = self.parse(value, key)
            _append_comment(
                ast,
                f"This interface was referenced by {referenced_by} JSON-Schema\n"
                f'via the `definition` "{key}".',
            )
            params.append(
                InterfaceParam(
                    key_name=key,
                    ast=ast,
                    is_required=key in required,
                    is_unreachable_definition=True,
                ),
            )

        additional = schema.additional_properties
        if additional is None or additional is True:
            if not single_pattern_property:
                params.append(
                    InterfaceParam(
                        key_name=INDEX_KEY,
                        ast=T_ANY_ADDITIONAL_PROPERTIES.copy(),
                        is_required=True,
                    ),
                )
        elif isinstance(additional, Schema):
            # index signatures are already optional in the target language
            params.append(
                InterfaceParam(
                    key_name=INDEX_KEY,
                    ast=self.parse(additional, INDEX_KEY),
                    is_required=True,
                ),
            )
        return params

    def _standalone_name(
        self,
        schema: Schema,
        key_from_definition: str | None,
    ) -> str | None:
        """Compute a schema name using a series of fallbacks."""
        name = schema.title or schema.id or key_from_definition
        if name:
            return generate_name(name, self.used_names)
        return None

    def _key_for(self, schema: Schema) -> str | None:
        key = self.definitions.key_for(schema)
        if key is None and self.root is not None and self.root is not schema.root:
            key = self.definitions.key_for(schema, self.root)
        return key

    def _strip_name_hints(self, schema: Schema) -> Schema:
        if (stripped := self._stripped.get(schema)) is None:
            stripped = dataclasses.replace(schema, id=None, title=None, description=None)
            self._stripped[schema] = stripped
        return stripped

    def _narrow(self, schema: Schema, type_name: str) -> Schema:
        """Copy of a multi-typed schema fixed to one of its types."""
        key = (schema, type_name)
        if (narrowed := self._narrowed.get(key)) is None:
            default = schema.default
            if default is not UNSET and not _default_fits(type_name, default):
                default = UNSET
            narrowed = dataclasses.replace(
                schema,
                type=type_name,
                id=None,
                title=None,
                description=None,
                default=default,
            )
            self._narrowed[key] = narrowed
        return narrowed


def _parse_boolean_schema(schema: bool, key_name: str | None) -> AST:  # noqa: FBT001
    if schema:
        return T_ANY.copy(key_name=key_name)
    return AST(type=ASTType.NEVER, key_name=key_name)


def _parse_literal(value: Any, key_name: str | None) -> AST:
    return AST(type=ASTType.LITERAL, key_name=key_name, params=value)


def _append_comment(ast: AST, comment: str) -> None:
    ast.comment = f"{ast.comment}\n\n{comment}" if ast.comment else comment


def _default_fits(type_name: str, default: Any) -> bool:
    match type_name:
        case "array":
            return isinstance(default, list)
        case "boolean":
            return isinstance(default, bool)
        case "integer" | "number":
            return isinstance(default, int | float) and not isinstance(default, bool)
        case "string":
            return isinstance(default, str)
        case "null":
            return default is None
        case "object":
            return isinstance(default, dict)
        case _:
            return False


def parse(
    schema: Any,
    key_name: str | None = None,
    processed: Processed | None = None,
    used_names: UsedNames | None = None,
    *,
    definitions: DefinitionsCache | None = None,
    file_name: str | None = None,
) -> AST:
    """Build the AST of a normalized schema.

    Args:
        schema: Normalized schema node (or boolean schema / JSON value)
        key_name: Property name the schema was found under
        processed: Build cache to share across calls; fresh if omitted
        used_names: Names already taken; fresh if omitted
        definitions: Definitions cache to share across builds
        file_name: Originating document, used in error messages

    Returns:
        The AST. Every placeholder reachable from it is filled.

    """
    parser = Parser(
        file_name=file_name,
        processed=processed if processed is not None else {},
        used_names=used_names if used_names is not None else set(),
        definitions=definitions if definitions is not None else DefinitionsCache(),
    )
    return parser.parse(schema, key_name)


def compile_schema(
    data: dict[str, Any] | Schema | bool,
    file_name: str | None = None,
    options: Options = DEFAULT_OPTIONS,
) -> AST:
    """Ingest, normalize and parse a linked schema document in one call.

    A boolean document needs no normalization and builds to ANY or NEVER.

    Example:
        ast = compile_schema({"type": ["string", "number"]})
        assert [p.type for p in ast.params] == ["STRING", "NUMBER"]

    """
    if isinstance(data, bool):
        ast = parse(data, file_name=file_name)
    else:
        root = data if isinstance(data, Schema) else Schema.from_dict(data)
        normalize(root, file_name, options)
        ast = parse(root, file_name=file_name)
    logger.info(
        "Compiled %s into %s %s",
        file_name or "<schema>",
        ast.type,
        ast.standalone_name or "(anonymous)",
    )
    return ast
