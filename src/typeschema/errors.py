"""Fatal errors raised while normalizing or parsing a schema.

Every error carries a closed ``ErrorKind`` plus the offending node and the
originating file, so callers can tell failures apart programmatically and
report them with context.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typeschema.schema import Schema


class ErrorKind(StrEnum):
    """Kinds of structural failure."""

    CONFLICTING_ID = "conflicting_id"
    MALFORMED_ENUM = "malformed_enum"
    UNRESOLVED_REFERENCE = "unresolved_reference"


class SchemaError(Exception):
    """Base class for fatal schema errors."""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        schema: Schema | None = None,
        file_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.schema = schema
        self.file_name = file_name

    def format(self) -> str:
        """Format the error for display."""
        if self.file_name is None:
            return self.message
        return f"{self.file_name}: {self.message}"

    def __str__(self) -> str:
        return self.format()


class ConflictingIdError(SchemaError, ReferenceError):
    """A node declares both a legacy ``id`` and a ``$id`` that differ."""

    kind = ErrorKind.CONFLICTING_ID

    def __init__(
        self,
        legacy_id: str,
        id: str,  # noqa: A002
        *,
        schema: Schema | None = None,
        file_name: str | None = None,
    ) -> None:
        self.legacy_id = legacy_id
        self.id = id
        message = (
            "Schema must define either id or $id, not both. "
            f"Given id={legacy_id}, $id={id}"
        )
        super().__init__(message, schema=schema, file_name=file_name)


class MalformedEnumError(SchemaError, TypeError):
    """A named enum whose values are not an ordered sequence."""

    kind = ErrorKind.MALFORMED_ENUM


class UnresolvedReferenceError(SchemaError, LookupError):
    """A ``$ref`` survived linking and reached the AST builder."""

    kind = ErrorKind.UNRESOLVED_REFERENCE

    def __init__(
        self,
        ref: str,
        *,
        schema: Schema | None = None,
        file_name: str | None = None,
    ) -> None:
        self.ref = ref
        message = f"Refs should have been resolved by the resolver! Found $ref={ref!r}"
        super().__init__(message, schema=schema, file_name=file_name)
