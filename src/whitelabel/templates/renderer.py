"""Template renderer for white-label build files (deterministic output).

Renders parsed templates against a data context. Rendering is a pure
function of (template, context): the same input always produces
byte-identical output, and neither argument is modified.
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from whitelabel.templates.parser import parse
from whitelabel.templates.template import Template

logger = logging.getLogger(__name__)

# Shared by every TemplateRenderer; cached Templates are immutable
PARSE_CACHE_SIZE = 64


@lru_cache(maxsize=PARSE_CACHE_SIZE)
def _parse_cached(template_text: str, trim_blocks: bool) -> Template:
    return parse(template_text, trim_blocks=trim_blocks)


def render(
    template_text: str,
    context: Mapping[str, Any],
    strict: bool = True,
    trim_blocks: bool = False,
) -> str:
    """Parse and render template text in one step.

    Args:
        template_text: Template source
        context: Mapping of names to scalars or sequences of mappings
        strict: Raise MissingVariableError for unresolved names
        trim_blocks: Remove lines holding only a section tag

    Returns:
        Rendered text

    Example:
        >>> render("Hello {{name}}!", {"name": "World"})
        'Hello World!'
    """
    return parse(template_text, trim_blocks=trim_blocks).render(context, strict=strict)


class TemplateRenderer:
    """Renders templates with a fixed set of options.

    Parsed templates are kept in a bounded cache keyed by source text, so
    rendering the same template for many customers parses it once.

    Usage:
        renderer = TemplateRenderer(strict=True)
        text = renderer.render(template_text, context)
    """

    def __init__(self, strict: bool = True, trim_blocks: bool = False) -> None:
        """Initialize the renderer.

        Args:
            strict: Fail on names missing from the context
            trim_blocks: Remove lines holding only a section tag
        """
        self.strict = strict
        self.trim_blocks = trim_blocks

    def compile(self, template_text: str) -> Template:
        """Parse template text, reusing a recent parse of the same text."""
        return _parse_cached(template_text, self.trim_blocks)

    def render(self, template_text: str, context: Mapping[str, Any]) -> str:
        """Render template text against a context.

        Raises:
            ParseError: If the template is malformed
            MissingVariableError: In strict mode, for unresolved names
            TypeMismatchError: If a value has the wrong kind
        """
        rendered = self.compile(template_text).render(context, strict=self.strict)
        logger.debug("Rendered template (%d characters)", len(rendered))
        return rendered

    def render_file(self, template_path: Path, context: Mapping[str, Any]) -> str:
        """Read a template file (UTF-8) and render it."""
        return self.render(template_path.read_text(encoding="utf-8"), context)

    def render_to_file(
        self,
        template_text: str,
        context: Mapping[str, Any],
        output_path: Path,
    ) -> Path:
        """Render and write the result to output_path.

        The file is only written after rendering succeeds.

        Returns:
            Path to written file
        """
        content = self.render(template_text, context)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s", output_path)

        return output_path

    def preview(
        self,
        template_text: str,
        context: Mapping[str, Any],
        max_lines: int = 50,
    ) -> str:
        """Render and truncate the output for display.

        Args:
            template_text: Template source
            context: Render context
            max_lines: Maximum lines to include in preview

        Returns:
            Preview string with truncation indicator
        """
        full_content = self.render(template_text, context)
        lines = full_content.split("\n")

        if len(lines) <= max_lines:
            return full_content

        preview_lines = lines[:max_lines]
        preview_lines.append(f"\n... [{len(lines) - max_lines} more lines] ...")

        return "\n".join(preview_lines)
