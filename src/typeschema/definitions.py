"""Collection of named sub-schemas reachable from a document root."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TypeAlias

from typeschema.schema import Schema, SchemaLike

Definitions: TypeAlias = "dict[str, SchemaLike]"


def collect_definitions(schema: Schema) -> Definitions:
    """Collect every definition-map entry reachable from ``schema``.

    All nested nodes are walked, not only declared definition maps. Entries
    found deeper override shallower ones on key collision, while the key keeps
    the position of its first insertion.
    """
    return _collect(schema, set())


def _collect(schema: SchemaLike, processed: set[Schema]) -> Definitions:
    if not isinstance(schema, Schema) or schema in processed:
        return {}
    processed.add(schema)

    result: Definitions = dict(schema.definitions or {})
    for child in _children(schema):
        result.update(_collect(child, processed))
    return result


def _children(schema: Schema) -> list[SchemaLike]:
    children: list[SchemaLike] = []
    for mapping in (schema.properties, schema.pattern_properties, schema.definitions):
        if mapping is not None:
            children.extend(mapping.values())
    for members in (schema.all_of, schema.any_of, schema.one_of):
        if members is not None:
            children.extend(members)
    if isinstance(schema.items, list):
        children.extend(schema.items)
    elif schema.items is not None:
        children.append(schema.items)
    if isinstance(schema.extends, list):
        children.extend(schema.extends)
    elif isinstance(schema.extends, Schema):
        children.append(schema.extends)
    for value in (schema.additional_properties, schema.additional_items):
        if isinstance(value, Schema):
            children.append(value)
    return children


@dataclass
class DefinitionsCache:
    """Memoizes ``collect_definitions`` per document root.

    Entries are held weakly, so one cache may outlive several builds without
    pinning their schema graphs in memory.
    """

    _entries: weakref.WeakKeyDictionary[Schema, Definitions] = field(
        default_factory=weakref.WeakKeyDictionary,
    )

    def get(self, root: Schema) -> Definitions:
        """Return the definitions of ``root``, collecting them on first use."""
        if (cached := self._entries.get(root)) is not None:
            return cached
        definitions = collect_definitions(root)
        self._entries[root] = definitions
        return definitions

    def key_for(self, schema: Schema, root: Schema | None = None) -> str | None:
        """Return the first definitions key under which ``schema`` is declared.

        ``root`` defaults to the document root found through parent links.
        """
        for key, value in self.get(schema.root if root is None else root).items():
            if value is schema:
                return key
        return None
