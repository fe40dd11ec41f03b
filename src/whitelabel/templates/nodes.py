"""Parsed template tree nodes.

Nodes are frozen dataclasses holding tuples, so a tree built by the parser
cannot be modified afterwards.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextNode:
    """Literal text, emitted unchanged."""

    text: str


@dataclass(frozen=True)
class VariableNode:
    """A {{name}} reference."""

    name: str
    line: int = 1
    column: int = 1


@dataclass(frozen=True)
class SectionNode:
    """A {{#name}} ... {{/name}} block repeated once per sequence element."""

    name: str
    children: tuple["Node", ...] = ()
    line: int = 1
    column: int = 1


Node = TextNode | VariableNode | SectionNode
