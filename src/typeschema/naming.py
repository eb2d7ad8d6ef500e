"""Allocation of unique declaration names."""

from __future__ import annotations

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

_INVALID_CHARS = re.compile(r"(^\s*[^a-zA-Z_$])|([^a-zA-Z_$\d])")
_LEADING_UNDERSCORE = re.compile(r"^_[a-z]")
_SNAKE_SEGMENT = re.compile(r"_[a-z]")
_AFTER_DIGITS = re.compile(r"([\d$]+[a-zA-Z])")
_AFTER_SPACE = re.compile(r"\s+([a-zA-Z])")
_WHITESPACE = re.compile(r"\s")


def _deburr(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def to_safe_string(text: str) -> str:
    """Convert arbitrary text into a PascalCase identifier.

    Examples:
        >>> to_safe_string("my cool_type")
        'MyCoolType'
        >>> to_safe_string("http://example.com/foo.json")
        'HttpExampleComFooJson'

    """
    name = _INVALID_CHARS.sub(" ", _deburr(text))
    name = _LEADING_UNDERSCORE.sub(lambda m: m.group(0).upper(), name)
    name = _SNAKE_SEGMENT.sub(lambda m: m.group(0)[1:].upper(), name)
    name = _AFTER_DIGITS.sub(lambda m: m.group(0).upper(), name)
    name = _AFTER_SPACE.sub(lambda m: m.group(0).upper().strip(), name)
    name = _WHITESPACE.sub("", name)
    return name[:1].upper() + name[1:]


def generate_name(source: str, used_names: set[str]) -> str:
    """Derive a name from ``source`` that is not in ``used_names`` and claim it.

    Collisions get the smallest free numeric suffix, starting at 1
    (``Foo``, ``Foo1``, ``Foo2``...).
    """
    name = to_safe_string(source) or "NoName"
    if name in used_names:
        counter = 1
        while f"{name}{counter}" in used_names:
            counter += 1
        name = f"{name}{counter}"
    used_names.add(name)
    logger.debug("Allocated standalone name %r for %r", name, source)
    return name
