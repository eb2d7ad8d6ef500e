"""Configuration for normalization and AST building."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Options:
    """Build options, passed explicitly through normalize and parse.

    Attributes:
        strip_item_bounds: Remove ``minItems``/``maxItems`` from array-like
            nodes after documenting them. Disabled by default so bounded
            arrays still become fixed-length tuples.
        max_tuple_size: Largest ``maxItems - minItems`` gap that is still
            materialized as a tuple. Wider bounds drop ``maxItems``.

    """

    strip_item_bounds: bool = False
    max_tuple_size: int = 20

    def __post_init__(self) -> None:
        if self.max_tuple_size < 0:
            msg = f"max_tuple_size must be non-negative, got {self.max_tuple_size}"
            raise ValueError(msg)


DEFAULT_OPTIONS = Options()
