"""Unit tests for the template parser."""

import pytest

from whitelabel.templates import (
    ParseError,
    SectionNode,
    TemplateError,
    TextNode,
    VariableNode,
    parse,
)


class TestParseStructure:
    """Tests for the node tree built by parse()."""

    def test_plain_text(self) -> None:
        """Test that text without directives becomes one text node."""
        template = parse("plugins { id(\"kotlin-android\") }")

        assert template.nodes == (TextNode('plugins { id("kotlin-android") }'),)

    def test_empty_template(self) -> None:
        """Test parsing an empty string."""
        template = parse("")

        assert template.nodes == ()
        assert template.source == ""

    def test_variable(self) -> None:
        """Test splitting text around a variable."""
        template = parse("Hello {{name}}!")

        assert template.nodes == (
            TextNode("Hello "),
            VariableNode("name", line=1, column=7),
            TextNode("!"),
        )

    def test_whitespace_inside_braces(self) -> None:
        """Test that {{ name }} and {{# items }} are accepted."""
        template = parse("{{ name }}{{# items }}{{ v }}{{/ items }}")

        assert template.variables() == ["name", "v"]
        assert template.sections() == ["items"]

    def test_section_children(self) -> None:
        """Test that section bodies become children in source order."""
        template = parse("{{#items}}<{{v}}>{{/items}}")

        assert len(template.nodes) == 1
        section = template.nodes[0]
        assert isinstance(section, SectionNode)
        assert section.name == "items"
        assert section.children == (
            TextNode("<"),
            VariableNode("v", line=1, column=12),
            TextNode(">"),
        )

    def test_nested_sections(self) -> None:
        """Test arbitrarily nested sections."""
        template = parse("{{#a}}{{#b}}{{#c}}{{x}}{{/c}}{{/b}}{{/a}}")

        a = template.nodes[0]
        b = a.children[0]
        c = b.children[0]
        assert (a.name, b.name, c.name) == ("a", "b", "c")
        assert c.children == (VariableNode("x", line=1, column=19),)

    def test_sibling_sections_keep_order(self) -> None:
        """Test that sibling sections stay in source order."""
        template = parse("{{#first}}1{{/first}}-{{#second}}2{{/second}}")

        assert [type(n).__name__ for n in template.nodes] == [
            "SectionNode",
            "TextNode",
            "SectionNode",
        ]
        assert template.sections() == ["first", "second"]

    def test_line_and_column_tracking(self) -> None:
        """Test positions of directives on later lines."""
        template = parse("android {\n    namespace = \"{{namespace}}\"\n}")

        variable = template.nodes[1]
        assert variable == VariableNode("namespace", line=2, column=18)

    def test_positions_of_many_tags(self) -> None:
        """Test positions for adjacent tags, blank lines and a tag spanning lines."""
        template = parse("{{a}}{{b}}\n\n  {{c}} {{d}}\n{{\ne}}{{f}}")

        variables = [n for n in template.nodes if isinstance(n, VariableNode)]
        assert [(v.name, v.line, v.column) for v in variables] == [
            ("a", 1, 1),
            ("b", 1, 6),
            ("c", 3, 3),
            ("d", 3, 9),
            ("e", 4, 1),
            ("f", 5, 4),
        ]

    def test_positions_in_long_template(self) -> None:
        """Test the last directive of a long template."""
        template = parse("{{x}}\n" * 5000)

        assert template.nodes[-2] == VariableNode("x", line=5000, column=1)

    def test_stray_closing_braces_are_text(self) -> None:
        """Test that '}}' outside a directive is literal text."""
        template = parse("map {{k}} }}")

        assert template.nodes[-1] == TextNode(" }}")

    def test_variables_deduplicated_in_order(self) -> None:
        """Test that variables() lists each name once, first appearance first."""
        template = parse("{{b}}{{a}}{{#s}}{{b}}{{c}}{{/s}}{{a}}")

        assert template.variables() == ["b", "a", "c"]

    def test_template_is_immutable(self) -> None:
        """Test that parsed templates cannot be modified."""
        template = parse("{{x}}")

        with pytest.raises(AttributeError):
            template.nodes = ()  # type: ignore[misc]


class TestParseErrors:
    """Tests for malformed templates."""

    def test_unterminated_section(self) -> None:
        """Test that {{#a}}x fails and names the section."""
        with pytest.raises(ParseError, match="Unterminated section 'a'") as exc_info:
            parse("{{#a}}x")

        assert exc_info.value.name == "a"
        assert exc_info.value.offset == 0
        assert exc_info.value.line == 1

    def test_unterminated_nested_section_reports_innermost(self) -> None:
        """Test that the innermost open section is reported."""
        with pytest.raises(ParseError) as exc_info:
            parse("{{#outer}}\n  {{#inner}}\n{{/outer}}")

        # {{/outer}} closes while inner is still open
        assert exc_info.value.name == "inner"
        assert exc_info.value.line == 3

    def test_unterminated_tag(self) -> None:
        """Test that '{{' without '}}' fails with its offset."""
        with pytest.raises(ParseError, match="Unterminated tag") as exc_info:
            parse("applicationId = {{namespace")

        assert exc_info.value.name == "namespace"
        assert exc_info.value.offset == 16
        assert exc_info.value.column == 17

    def test_mismatched_close(self) -> None:
        """Test that {{#a}}...{{/b}} fails."""
        with pytest.raises(ParseError, match="Mismatched closing tag") as exc_info:
            parse("{{#a}}body{{/b}}")

        assert exc_info.value.name == "a"
        assert "{{/b}}" in str(exc_info.value)

    def test_unmatched_close(self) -> None:
        """Test that a closing tag without an opener fails."""
        with pytest.raises(ParseError, match="Unmatched closing tag") as exc_info:
            parse("text {{/items}}")

        assert exc_info.value.name == "items"

    @pytest.mark.parametrize("source", ["{{}}", "{{#}}", "{{/}}", "{{a b}}", "{{1abc}}"])
    def test_invalid_tag_names(self, source: str) -> None:
        """Test that empty or invalid names are rejected."""
        with pytest.raises(ParseError, match="Invalid tag name"):
            parse(source)

    def test_error_message_includes_position(self) -> None:
        """Test that the message carries line and column."""
        with pytest.raises(ParseError) as exc_info:
            parse("line one\n  {{#a}}")

        assert "(line 2, column 3)" in str(exc_info.value)

    def test_parse_error_is_value_error(self) -> None:
        """Test the exception hierarchy."""
        with pytest.raises(ValueError):
            parse("{{#a}}")
        assert issubclass(ParseError, TemplateError)


class TestTrimBlocks:
    """Tests for removal of standalone section tag lines."""

    def test_standalone_tags_removed(self) -> None:
        """Test that lines holding only a section tag disappear."""
        template = parse("{{#items}}\n- {{v}}\n{{/items}}\n", trim_blocks=True)

        result = template.render({"items": [{"v": "a"}, {"v": "b"}]})

        assert result == "- a\n- b\n"

    def test_indented_standalone_tags_removed(self) -> None:
        """Test that indentation before a standalone tag is removed too."""
        source = "    {{#deps}}\n    {{n}}\n    {{/deps}}\n"
        template = parse(source, trim_blocks=True)

        assert template.render({"deps": [{"n": "x"}]}) == "    x\n"

    def test_without_trim_lines_are_kept(self) -> None:
        """Test that text around tags is untouched by default."""
        template = parse("{{#items}}\n- {{v}}\n{{/items}}\n")

        result = template.render({"items": [{"v": "a"}, {"v": "b"}]})

        assert result == "\n- a\n\n- b\n\n"

    def test_inline_tags_not_trimmed(self) -> None:
        """Test that tags sharing a line with other content are kept."""
        template = parse("a {{#s}}x{{/s}} b\n", trim_blocks=True)

        assert template.render({"s": [{}]}) == "a x b\n"

    def test_crlf_line_endings(self) -> None:
        """Test that CRLF after a standalone tag is removed."""
        template = parse("{{#s}}\r\nline\r\n{{/s}}\r\n", trim_blocks=True)

        assert template.render({"s": [{}]}) == "line\r\n"

    def test_variable_lines_not_trimmed(self) -> None:
        """Test that standalone variable lines keep their line."""
        template = parse("  {{name}}\n", trim_blocks=True)

        assert template.render({"name": "x"}) == "  x\n"
