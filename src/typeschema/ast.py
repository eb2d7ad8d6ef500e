"""AST of structural types produced from a normalized schema."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Self


class ASTType(StrEnum):
    """Category of an AST node."""

    ANY = "ANY"
    ARRAY = "ARRAY"
    BOOLEAN = "BOOLEAN"
    CUSTOM_TYPE = "CUSTOM_TYPE"
    ENUM = "ENUM"
    INTERFACE = "INTERFACE"
    INTERSECTION = "INTERSECTION"
    LITERAL = "LITERAL"
    NEVER = "NEVER"
    NULL = "NULL"
    NUMBER = "NUMBER"
    OBJECT = "OBJECT"
    STRING = "STRING"
    TUPLE = "TUPLE"
    UNION = "UNION"


@dataclass(eq=False)
class AST:
    """A node of the type AST.

    ``params`` depends on ``type``:
    - INTERSECTION, UNION, TUPLE: ``list[AST]``
    - ARRAY: the element ``AST``
    - INTERFACE: ``list[InterfaceParam]``
    - ENUM: ``list[EnumParam]``
    - LITERAL: the JSON value
    - CUSTOM_TYPE: the raw type expression

    Nodes are mutable and compared by identity: the parser hands out an
    unfilled placeholder first and fills it in place once computed, so
    self-referencing schemas share one instance.
    """

    type: ASTType | None = None
    params: Any = None
    key_name: str | None = None
    standalone_name: str | None = None
    comment: str | None = None
    deprecated: bool | None = None
    super_types: list[AST] | None = None
    min_items: int | None = None
    max_items: int | None = None
    spread_param: AST | None = None

    @classmethod
    def placeholder(cls) -> Self:
        """Create an empty slot to be filled later."""
        return cls()

    @property
    def is_placeholder(self) -> bool:
        """Return True while the node has not been filled."""
        return self.type is None

    def fill(self, other: AST) -> Self:
        """Copy the contents of ``other`` into this node, in place."""
        for f in dataclasses.fields(self):
            setattr(self, f.name, getattr(other, f.name))
        return self

    def copy(self, **changes: Any) -> AST:
        """Return a shallow copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True, eq=False)
class InterfaceParam:
    """A member of an INTERFACE."""

    key_name: str
    ast: AST
    is_required: bool
    is_pattern_property: bool = False
    is_unreachable_definition: bool = False


@dataclass(frozen=True, eq=False)
class EnumParam:
    """A member of a named ENUM."""

    key_name: str
    ast: AST


INDEX_KEY: Final = "[k: string]"

T_ANY: Final = AST(type=ASTType.ANY)
T_ANY_ADDITIONAL_PROPERTIES: Final = AST(type=ASTType.ANY, key_name=INDEX_KEY)
