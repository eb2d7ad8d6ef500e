"""Cycle-safe recursive walk over a schema node's structural children."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TypeAlias

from typeschema.schema import Schema, SchemaLike

Visitor: TypeAlias = "Callable[[Schema, str | None], None]"


def traverse(schema: Schema, callback: Visitor) -> None:
    """Visit ``schema`` and every structural child reachable from it.

    The callback receives each node with the property or definitions key it
    was reached under (``None`` for the root and positional children). Every
    call performs one full walk with a fresh visited set, so shared and cyclic
    nodes are visited exactly once per call.
    """
    _traverse(schema, callback, set(), None)


def _traverse(
    schema: Schema,
    callback: Visitor,
    processed: set[Schema],
    key: str | None,
) -> None:
    if schema in processed:
        return
    processed.add(schema)
    callback(schema, key)

    for members in (schema.any_of, schema.all_of, schema.one_of):
        if members is not None:
            _traverse_list(members, callback, processed)
    if schema.properties is not None:
        _traverse_map(schema.properties, callback, processed)
    if schema.pattern_properties is not None:
        _traverse_map(schema.pattern_properties, callback, processed)
    if isinstance(schema.additional_properties, Schema):
        _traverse(schema.additional_properties, callback, processed, None)
    if isinstance(schema.items, list):
        _traverse_list(schema.items, callback, processed)
    elif isinstance(schema.items, Schema):
        _traverse(schema.items, callback, processed, None)
    if isinstance(schema.additional_items, Schema):
        _traverse(schema.additional_items, callback, processed, None)
    if isinstance(schema.extends, list):
        _traverse_list(schema.extends, callback, processed)
    elif isinstance(schema.extends, Schema):
        _traverse(schema.extends, callback, processed, None)
    if schema.definitions is not None:
        _traverse_map(schema.definitions, callback, processed)


def _traverse_list(
    members: Iterable[SchemaLike],
    callback: Visitor,
    processed: set[Schema],
) -> None:
    for member in members:
        if isinstance(member, Schema):
            _traverse(member, callback, processed, None)


def _traverse_map(
    members: Mapping[str, SchemaLike],
    callback: Visitor,
    processed: set[Schema],
) -> None:
    for key, member in members.items():
        if isinstance(member, Schema):
            _traverse(member, callback, processed, key)
