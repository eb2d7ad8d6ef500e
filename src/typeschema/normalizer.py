"""In-place normalization of a linked schema graph.

Normalization is an explicit, ordered tuple of independent rules. Each rule is
idempotent and runs over the whole tree (one traversal per rule) before the
next one starts, so later rules can rely on the guarantees of earlier ones:

- ``required`` is always a list on object-like nodes
- ``additionalProperties`` is always set unless ``patternProperties`` is
- ``minItems`` is always a number on array-like nodes
- ``extends`` is absent or a non-empty list
- ``const`` has been folded into ``enum``
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from typeschema.errors import ConflictingIdError
from typeschema.options import DEFAULT_OPTIONS, Options
from typeschema.schema import UNSET, Schema, is_array_type, is_object_type
from typeschema.traversal import traverse

logger = logging.getLogger(__name__)

RuleFn: TypeAlias = "Callable[[Schema, str | None, Options], None]"


@dataclass(frozen=True)
class Rule:
    """A named normalization step."""

    name: str
    apply: RuleFn


def _remove_null_type_if_enum_has_null(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    # a null const becomes enum=[null] later in the same pass
    null_enum = (
        isinstance(schema.enum, list) and None in schema.enum
    ) or schema.const is None
    if (
        null_enum
        and isinstance(schema.type, list)
        and "null" in schema.type
    ):
        schema.type = [t for t in schema.type if t != "null"]


def _destructure_unary_types(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if isinstance(schema.type, list) and len(schema.type) == 1:
        schema.type = schema.type[0]


def _default_required(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if is_object_type(schema) and schema.required is None:
        schema.required = []


def _required_false_to_empty(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if schema.required is False:
        schema.required = []


def _default_additional_properties(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if (
        is_object_type(schema)
        and schema.additional_properties is None
        and schema.pattern_properties is None
    ):
        schema.additional_properties = True


def _migrate_legacy_id(
    schema: Schema, file_name: str | None, _options: Options,
) -> None:
    if schema.legacy_id and schema.id and schema.legacy_id != schema.id:
        raise ConflictingIdError(
            schema.legacy_id,
            schema.id,
            schema=schema,
            file_name=file_name,
        )
    if schema.legacy_id:
        schema.id = schema.legacy_id
        schema.legacy_id = None


def _escape_block_comment(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if isinstance(schema.description, str):
        schema.description = schema.description.replace("*/", "* /")


def append_to_description(existing: str | None, *values: str) -> str:
    """Append lines to a description, separated from it by a blank line."""
    if existing:
        return f"{existing}\n\n" + "\n".join(values)
    return "\n".join(values)


def _document_item_bounds(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if not is_array_type(schema):
        return
    # minItems 0 is the default applied by a later rule
    existing = schema.description or ""
    comments = [
        line
        for line in (
            f"@minItems {schema.min_items}" if schema.min_items else "",
            f"@maxItems {schema.max_items}" if schema.max_items is not None else "",
        )
        if line and line not in existing.splitlines()
    ]
    if comments:
        schema.description = append_to_description(schema.description, *comments)


def _strip_item_bounds(
    schema: Schema, _file_name: str | None, options: Options,
) -> None:
    if options.strip_item_bounds and is_array_type(schema):
        schema.min_items = None
        schema.max_items = None


def _default_min_items(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    # maxItems has no default: maxItems = 0 has an actual meaning
    if is_array_type(schema) and not isinstance(schema.min_items, int):
        schema.min_items = 0


def _drop_oversized_max_items(
    schema: Schema, _file_name: str | None, options: Options,
) -> None:
    if not is_array_type(schema) or schema.max_items is None:
        return
    if schema.max_items - (schema.min_items or 0) > options.max_tuple_size:
        schema.max_items = None


def _normalize_items(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    max_items, min_items = schema.max_items, schema.min_items
    has_max_items = isinstance(max_items, int) and max_items >= 0
    has_min_items = isinstance(min_items, int) and min_items > 0

    if (
        schema.items is not None
        and not isinstance(schema.items, list)
        and (has_max_items or has_min_items)
    ):
        items = schema.items
        schema.items = [items] * max(max_items or 0, min_items or 0)
        if not has_max_items:
            # no upper bound: a spread slot collects the rest
            schema.additional_items = items

    if (
        isinstance(schema.items, list)
        and has_max_items
        and max_items is not None
        and max_items < len(schema.items)
    ):
        schema.items = schema.items[:max_items]


def _remove_empty_extends(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if schema.extends is UNSET:
        return
    if schema.extends is None or schema.extends == []:
        schema.extends = UNSET


def _extends_to_list(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if schema.extends is UNSET or schema.extends is None:
        return
    if not isinstance(schema.extends, list):
        schema.extends = [schema.extends]


def _const_to_enum(
    schema: Schema, _file_name: str | None, _options: Options,
) -> None:
    if schema.const is not UNSET:
        schema.enum = [schema.const]
        schema.const = UNSET


RULES: tuple[Rule, ...] = (
    Rule('Remove `type=["null"]` if `enum=[null]`', _remove_null_type_if_enum_has_null),
    Rule("Destructure unary types", _destructure_unary_types),
    Rule("Add empty `required` property if none is defined", _default_required),
    Rule("Transform `required`=false to `required`=[]", _required_false_to_empty),
    Rule("Default additionalProperties", _default_additional_properties),
    Rule("Transform id to $id", _migrate_legacy_id),
    Rule("Escape closing block comment", _escape_block_comment),
    Rule("Add comments for minItems and maxItems", _document_item_bounds),
    Rule("Optionally remove maxItems and minItems", _strip_item_bounds),
    Rule("Normalize schema.minItems", _default_min_items),
    Rule("Remove maxItems if it is big enough to likely cause OOMs", _drop_oversized_max_items),
    Rule("Normalize schema.items", _normalize_items),
    Rule("Remove extends, if it is empty", _remove_empty_extends),
    Rule("Make extends always an array, if it is defined", _extends_to_list),
    Rule("Transform const to singleton enum", _const_to_enum),
)


def apply_rules(
    root: Schema,
    rules: Sequence[Rule],
    file_name: str | None = None,
    options: Options = DEFAULT_OPTIONS,
) -> Schema:
    """Apply ``rules`` in order, each with its own full traversal of ``root``."""
    for rule in rules:
        logger.debug("Applying rule %r to %s", rule.name, file_name or "<schema>")
        traverse(root, lambda schema, _key, rule=rule: rule.apply(schema, file_name, options))
    return root


def normalize(
    root: Schema,
    file_name: str | None = None,
    options: Options = DEFAULT_OPTIONS,
) -> Schema:
    """Normalize ``root`` in place with the full rule pipeline.

    Args:
        root: Linked schema graph to normalize
        file_name: Originating document, used in error messages
        options: Policy switches for the bound-related rules

    Returns:
        The same root, now normalized

    Raises:
        ConflictingIdError: If a node declares differing ``id`` and ``$id``

    """
    return apply_rules(root, RULES, file_name, options)
