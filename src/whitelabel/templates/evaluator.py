"""Tree walker that turns parsed nodes into output text.

Variables are looked up in a scope chain: each section repetition pushes its
element mapping on top of the enclosing scope, so element fields shadow
outer names of the same name.
"""

from collections import ChainMap
from collections.abc import Mapping, Sequence
from typing import Any

from whitelabel.templates.errors import MissingVariableError, TypeMismatchError
from whitelabel.templates.nodes import Node, TextNode, VariableNode

_MISSING = object()


def describe_kind(value: Any) -> str:
    """Name the kind of a context value for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (str, int, float)):
        return "scalar"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return "sequence"
    return type(value).__name__


def format_scalar(name: str, value: Any, node: VariableNode | None = None) -> str:
    """Convert a scalar context value to output text.

    Booleans are written as lowercase literals so they can be used directly
    in Kotlin/Gradle (`isMinifyEnabled = {{isMinifyEnabled}}`).

    Raises:
        TypeMismatchError: If the value is a sequence or mapping
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    line, column = (node.line, node.column) if node else (None, None)
    raise TypeMismatchError(name, "scalar", describe_kind(value), line, column)


def _render(nodes: tuple[Node, ...], scope: ChainMap, strict: bool, out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(node.text)
            continue

        value = scope.get(node.name, _MISSING)
        if value is _MISSING:
            if strict:
                raise MissingVariableError(node.name, node.line, node.column)
            continue

        if isinstance(node, VariableNode):
            out.append(format_scalar(node.name, value, node))
            continue

        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Sequence):
            raise TypeMismatchError(
                node.name, "sequence", describe_kind(value), node.line, node.column
            )
        for item in value:
            if not isinstance(item, Mapping):
                raise TypeMismatchError(
                    f"{node.name}[]", "mapping", describe_kind(item), node.line, node.column
                )
            _render(node.children, scope.new_child(item), strict, out)


def render_nodes(
    nodes: tuple[Node, ...],
    context: Mapping[str, Any],
    strict: bool = True,
) -> str:
    """Render a node sequence against a context.

    Output is assembled in full before returning, so a failure never yields
    truncated text.
    """
    out: list[str] = []
    _render(nodes, ChainMap(context), strict, out)
    return "".join(out)
