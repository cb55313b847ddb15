"""A small JSONPath subset for pulling values out of nested documents.

Supported syntax, always starting from the root ``$``::

    $.field            member access
    $['field']         quoted member access (keys with dots or slashes)
    $.arr[0]           list index, negative counts from the end
    $.arr[*].field     wildcard over list items
    $.obj.*            wildcard over mapping values

Recursive descent (``..``), filters, slices and unions are not supported and
raise JsonPathError.
"""

import re
from functools import lru_cache
from typing import Any

from api_normalizer.exceptions import JsonPathError

_MEMBER = re.compile(r"\.([^.\[\]]+)")
_BRACKET = re.compile(r"""\[\s*(?:(\*)|(-?\d+)|'([^']*)'|"([^"]*)")\s*\]""")

WILDCARD = ("wildcard", None)


@lru_cache(maxsize=256)
def compile_path(expression: str) -> tuple[tuple[str, Any], ...]:
    """Parse an expression into a tuple of (kind, argument) steps."""
    if not isinstance(expression, str):
        raise JsonPathError(repr(expression), "expression must be a string")
    expr = expression.strip()
    if not expr.startswith("$"):
        raise JsonPathError(expression, "must start with '$'")

    steps = []
    pos = 1
    while pos < len(expr):
        if expr.startswith("..", pos):
            raise JsonPathError(expression, "recursive descent is not supported")

        member = _MEMBER.match(expr, pos)
        if member:
            name = member.group(1)
            steps.append(WILDCARD if name == "*" else ("key", name))
            pos = member.end()
            continue

        bracket = _BRACKET.match(expr, pos)
        if bracket:
            star, index, single, double = bracket.groups()
            if star:
                steps.append(WILDCARD)
            elif index is not None:
                steps.append(("index", int(index)))
            else:
                steps.append(("key", single if single is not None else double))
            pos = bracket.end()
            continue

        raise JsonPathError(expression, f"unexpected {expr[pos:]!r} at position {pos}")

    return tuple(steps)


def query(data: Any, expression: str) -> list:
    """Return every value matched by ``expression``, in document order."""
    nodes = [data]
    for kind, arg in compile_path(expression):
        matched = []
        for node in nodes:
            if kind == "key":
                if isinstance(node, dict) and arg in node:
                    matched.append(node[arg])
            elif kind == "index":
                if isinstance(node, list) and -len(node) <= arg < len(node):
                    matched.append(node[arg])
            elif isinstance(node, dict):
                matched.extend(node.values())
            elif isinstance(node, list):
                matched.extend(node)
        nodes = matched
    return nodes
