"""Parsed template.

A Template is built once by the parser and never modified afterwards, so it
can be shared between threads and rendered concurrently.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from whitelabel.templates.evaluator import render_nodes
from whitelabel.templates.nodes import Node, SectionNode, VariableNode


@dataclass(frozen=True)
class Template:
    """Parsed template.

    Attributes:
        source: Original template text
        nodes: Top-level nodes in source order
    """

    source: str
    nodes: tuple[Node, ...] = field(default=())

    def variables(self) -> list[str]:
        """Return variable names in order of first appearance."""
        return _collect(self.nodes, VariableNode)

    def sections(self) -> list[str]:
        """Return section names in order of first appearance."""
        return _collect(self.nodes, SectionNode)

    def render(self, context: Mapping[str, Any], strict: bool = True) -> str:
        """Render this template against a context.

        Args:
            context: Mapping of names to scalars or sequences of mappings
            strict: Raise on missing names instead of rendering them empty

        Returns:
            Rendered text
        """
        return render_nodes(self.nodes, context, strict=strict)


def _collect(nodes: tuple[Node, ...], kind: type) -> list[str]:
    seen: dict[str, None] = {}
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        if isinstance(node, kind):
            seen.setdefault(node.name, None)
        if isinstance(node, SectionNode):
            stack.extend(reversed(node.children))
    return list(seen)
