"""Template parser.

Scans template text left to right and splits it into literal text runs and
{{...}} directives, then folds the flat token list into a node tree using a
stack of open sections.

Supported directives:
  - {{name}}            variable reference
  - {{#name}} ... {{/name}}  section block

With trim_blocks enabled, a section tag standing alone on its line removes
the whole line (indentation and newline) from the output, similar to
Jinja2's trim_blocks/lstrip_blocks.
"""

import logging
import re
from dataclasses import dataclass

from whitelabel.templates.errors import ParseError
from whitelabel.templates.nodes import Node, SectionNode, TextNode, VariableNode
from whitelabel.templates.template import Template

logger = logging.getLogger(__name__)

OPEN_DELIMITER = "{{"
CLOSE_DELIMITER = "}}"

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")

# Whitespace between a line start and a tag / a tag and the line end
_LEADING_INDENT_RE = re.compile(r"\n[ \t]*\Z")
_TRAILING_EOL_RE = re.compile(r"\A[ \t]*(\r?\n)")
_BLANK_RE = re.compile(r"[ \t]*")


@dataclass
class _Token:
    """Flat token produced by the scanner.

    kind is one of "text", "var", "open", "close".
    """

    kind: str
    value: str
    offset: int
    line: int
    column: int


class _LineTracker:
    """Map character offsets to 1-based (line, column) while scanning forward.

    Offsets must be requested in non-decreasing order; each call only counts
    newlines since the previous one.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.offset = 0
        self.line = 1
        self.line_start = 0

    def position(self, offset: int) -> tuple[int, int]:
        newlines = self.text.count("\n", self.offset, offset)
        if newlines:
            self.line += newlines
            self.line_start = self.text.rfind("\n", self.offset, offset) + 1
        self.offset = offset
        return self.line, offset - self.line_start + 1


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    tracker = _LineTracker(text)

    while True:
        start = text.find(OPEN_DELIMITER, pos)
        if start == -1:
            if pos < len(text):
                line, column = tracker.position(pos)
                tokens.append(_Token("text", text[pos:], pos, line, column))
            break

        if start > pos:
            line, column = tracker.position(pos)
            tokens.append(_Token("text", text[pos:start], pos, line, column))

        line, column = tracker.position(start)
        end = text.find(CLOSE_DELIMITER, start + len(OPEN_DELIMITER))
        if end == -1:
            fragment = text[start + len(OPEN_DELIMITER):start + 22].split("\n")[0]
            raise ParseError(
                f"Unterminated tag '{{{{{fragment}'",
                name=fragment.strip() or None,
                offset=start,
                line=line,
                column=column,
            )

        body = text[start + len(OPEN_DELIMITER):end].strip()
        kind = "var"
        if body[:1] == "#":
            kind, body = "open", body[1:].strip()
        elif body[:1] == "/":
            kind, body = "close", body[1:].strip()

        if not _NAME_RE.fullmatch(body):
            raw = text[start:end + len(CLOSE_DELIMITER)]
            raise ParseError(
                f"Invalid tag name in '{raw}'",
                name=body or None,
                offset=start,
                line=line,
                column=column,
            )

        tokens.append(_Token(kind, body, start, line, column))
        pos = end + len(CLOSE_DELIMITER)

    return tokens


def _is_standalone(tokens: list[_Token], index: int) -> bool:
    """Check whether the tag at index is alone on its source line."""
    if index == 0:
        line_start = True
    else:
        prev = tokens[index - 1]
        line_start = prev.kind == "text" and (
            bool(_LEADING_INDENT_RE.search(prev.value))
            or (index == 1 and _BLANK_RE.fullmatch(prev.value) is not None)
        )
    if not line_start:
        return False

    if index == len(tokens) - 1:
        return True
    nxt = tokens[index + 1]
    return nxt.kind == "text" and (
        _TRAILING_EOL_RE.match(nxt.value) is not None
        or (index + 1 == len(tokens) - 1 and _BLANK_RE.fullmatch(nxt.value) is not None)
    )


def _trim_standalone_tags(tokens: list[_Token]) -> list[_Token]:
    """Drop the indentation and line ending around standalone section tags.

    Standalone status is decided on the untrimmed text, then all cuts are
    applied at once, so two adjacent standalone tags can share a text run.
    """
    cut_head: dict[int, int] = {}
    cut_tail: dict[int, int] = {}

    for index, token in enumerate(tokens):
        if token.kind not in ("open", "close") or not _is_standalone(tokens, index):
            continue
        if index > 0:
            prev = tokens[index - 1].value
            cut_tail[index - 1] = len(prev) - (prev.rfind("\n") + 1)
        if index < len(tokens) - 1:
            nxt = tokens[index + 1].value
            match = _TRAILING_EOL_RE.match(nxt)
            cut_head[index + 1] = match.end() if match else len(nxt)

    trimmed: list[_Token] = []
    for index, token in enumerate(tokens):
        if token.kind == "text" and (index in cut_head or index in cut_tail):
            head = cut_head.get(index, 0)
            tail = len(token.value) - cut_tail.get(index, 0)
            value = token.value[head:tail] if head < tail else ""
            if not value:
                continue
            token = _Token("text", value, token.offset + head, token.line, token.column)
        trimmed.append(token)
    return trimmed


def parse(text: str, trim_blocks: bool = False) -> Template:
    """Parse template text into an immutable Template.

    Args:
        text: Template source text
        trim_blocks: Remove lines holding only a section tag

    Returns:
        Parsed Template

    Raises:
        ParseError: On unterminated tags, invalid names, or unbalanced sections
    """
    tokens = _tokenize(text)
    if trim_blocks:
        tokens = _trim_standalone_tags(tokens)

    # Each frame: (open token or None for the root, children collected so far)
    stack: list[tuple[_Token | None, list[Node]]] = [(None, [])]

    for token in tokens:
        children = stack[-1][1]
        if token.kind == "text":
            children.append(TextNode(token.value))
        elif token.kind == "var":
            children.append(VariableNode(token.value, token.line, token.column))
        elif token.kind == "open":
            stack.append((token, []))
        else:
            opener = stack[-1][0]
            if opener is None:
                raise ParseError(
                    f"Unmatched closing tag '{{{{/{token.value}}}}}'",
                    name=token.value,
                    offset=token.offset,
                    line=token.line,
                    column=token.column,
                )
            if opener.value != token.value:
                raise ParseError(
                    f"Mismatched closing tag '{{{{/{token.value}}}}}' "
                    f"for section '{opener.value}' opened at line {opener.line}",
                    name=opener.value,
                    offset=token.offset,
                    line=token.line,
                    column=token.column,
                )
            stack.pop()
            stack[-1][1].append(
                SectionNode(opener.value, tuple(children), opener.line, opener.column)
            )

    # Only the root frame has no opening token
    opener = stack[-1][0]
    if opener is not None:
        raise ParseError(
            f"Unterminated section '{opener.value}'",
            name=opener.value,
            offset=opener.offset,
            line=opener.line,
            column=opener.column,
        )

    nodes = tuple(stack[0][1])
    logger.debug("Parsed template: %d characters, %d top-level nodes", len(text), len(nodes))
    return Template(source=text, nodes=nodes)
