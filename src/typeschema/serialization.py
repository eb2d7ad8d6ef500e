"""Serialization of type ASTs to builtins and JSON.

An AST may share nodes and contain cycles, so it is exported as a graph:

    {"root": <node or ref>, "nodes": {<id>: <node>, ...}}

Named nodes, and any node reachable along more than one path, are emitted once
under ``nodes`` and referenced elsewhere as ``{"tag": "ref", "id": <id>}``.
Named nodes use their standalone name as id; other shared nodes get ``#<n>``.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from typeschema.ast import AST, EnumParam, InterfaceParam


def to_dict(ast: AST) -> dict[str, Any]:
    """Serialize an AST graph to a dictionary.

    Args:
        ast: Root of a fully built AST

    Returns:
        Dictionary with ``root`` and ``nodes`` keys

    Raises:
        ValueError: If an unfilled placeholder is reachable

    """
    counts: Counter[int] = Counter()
    order: list[AST] = []
    _count_references(ast, counts, order)

    ids: dict[int, str] = {}
    anonymous = 0
    for node in order:
        if node.standalone_name is not None:
            ids[id(node)] = node.standalone_name
        elif counts[id(node)] > 1:
            anonymous += 1
            ids[id(node)] = f"#{anonymous}"

    encoder = _Encoder(ids)
    root = encoder.child(ast)
    nodes = {ids[id(node)]: encoder.node(node) for node in order if id(node) in ids}
    return {"root": root, "nodes": nodes}


def to_json(ast: AST, *, indent: int | None = 2) -> str:
    """Serialize an AST graph to a JSON string.

    Args:
        ast: Root of a fully built AST
        indent: JSON indentation level (default 2, None for compact)

    Returns:
        JSON string representation

    """
    return json.dumps(to_dict(ast), indent=indent)


def _children(ast: AST) -> list[AST]:
    children: list[AST] = []
    params = ast.params
    if isinstance(params, AST):
        children.append(params)
    elif isinstance(params, list):
        for param in params:
            if isinstance(param, AST):
                children.append(param)
            elif isinstance(param, InterfaceParam | EnumParam):
                children.append(param.ast)
    children.extend(ast.super_types or [])
    if ast.spread_param is not None:
        children.append(ast.spread_param)
    return children


def _count_references(ast: AST, counts: Counter[int], order: list[AST]) -> None:
    """Count incoming edges per node; ``order`` receives nodes in DFS order."""
    stack = [ast]
    counts[id(ast)] += 1
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if node.is_placeholder:
            msg = "Cannot serialize an AST that still contains a placeholder"
            raise ValueError(msg)
        order.append(node)
        children = _children(node)
        for child in children:
            counts[id(child)] += 1
        stack.extend(reversed(children))


class _Encoder:
    def __init__(self, ids: dict[int, str]) -> None:
        self._ids = ids

    def child(self, ast: AST) -> dict[str, Any]:
        if (ref_id := self._ids.get(id(ast))) is not None:
            return {"tag": "ref", "id": ref_id}
        return self.node(ast)

    def node(self, ast: AST) -> dict[str, Any]:
        result: dict[str, Any] = {"tag": str(ast.type)}
        for attr in ("standalone_name", "key_name", "comment", "deprecated"):
            if (value := getattr(ast, attr)) is not None:
                result[attr] = value
        if ast.params is not None:
            result["params"] = self._params(ast.params)
        if ast.super_types:
            result["super_types"] = [self.child(s) for s in ast.super_types]
        if ast.min_items is not None:
            result["min_items"] = ast.min_items
        if ast.max_items is not None:
            result["max_items"] = ast.max_items
        if ast.spread_param is not None:
            result["spread_param"] = self.child(ast.spread_param)
        return result

    def _params(self, params: Any) -> Any:
        if isinstance(params, AST):
            return self.child(params)
        if not isinstance(params, list):
            return params
        encoded: list[Any] = []
        for param in params:
            if isinstance(param, AST):
                encoded.append(self.child(param))
            elif isinstance(param, InterfaceParam):
                encoded.append(
                    {
                        "key_name": param.key_name,
                        "ast": self.child(param.ast),
                        "is_required": param.is_required,
                        "is_pattern_property": param.is_pattern_property,
                        "is_unreachable_definition": param.is_unreachable_definition,
                    },
                )
            elif isinstance(param, EnumParam):
                encoded.append(
                    {"key_name": param.key_name, "ast": self.child(param.ast)},
                )
            else:
                encoded.append(param)
        return encoded
