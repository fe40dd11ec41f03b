"""Whitelabel template rendering (deterministic output).

Mustache-style templates with {{name}} variables and {{#name}}...{{/name}}
section blocks. Templates are parsed once into an immutable tree and can be
rendered any number of times against different contexts.
"""

from whitelabel.templates.errors import (
    MissingVariableError,
    ParseError,
    TemplateError,
    TypeMismatchError,
)
from whitelabel.templates.loader import (
    DEFAULT_BUILTIN,
    list_builtin_templates,
    load_builtin_template,
    load_template_text,
)
from whitelabel.templates.nodes import SectionNode, TextNode, VariableNode
from whitelabel.templates.parser import parse
from whitelabel.templates.renderer import TemplateRenderer, render
from whitelabel.templates.template import Template

__all__ = [
    "DEFAULT_BUILTIN",
    "MissingVariableError",
    "ParseError",
    "SectionNode",
    "Template",
    "TemplateError",
    "TemplateRenderer",
    "TextNode",
    "TypeMismatchError",
    "VariableNode",
    "list_builtin_templates",
    "load_builtin_template",
    "load_template_text",
    "parse",
    "render",
]
