"""Tests for the CSS/SCSS adapter."""
from __future__ import annotations

import pytest

from styleguard.adapters.css import parse_css, parse_scss
from styleguard.syntax import Node
from styleguard.types import ParseError


def _kinds(tree: Node) -> list[str]:
    return [node.kind for node in tree.walk()]


class TestStructure:
    def test_rule_with_declarations(self) -> None:
        source: str = ".card { color: red; margin: 0 }"
        tree: Node = parse_css(source)

        assert tree.kind == "stylesheet"
        rule: Node = tree.children[0]
        assert rule.kind == "rule"
        assert rule.get("selector") == ".card"
        block: Node | None = rule.child("block")
        assert block is not None
        assert source[block.span.start:block.span.end] == "{ color: red; margin: 0 }"

        color, margin = block.children
        assert color.get("property") == "color"
        assert color.get("value") == "red"
        assert source[color.span.start:color.span.end] == "color: red;"
        assert margin.get("value") == "0"
        assert source[margin.span.start:margin.span.end] == "margin: 0"

    def test_value_child_spans_value_text(self) -> None:
        source: str = "a { border: none !important; }"
        declaration: Node = parse_css(source).children[0].children[1].children[0]

        value: Node | None = declaration.child("value")
        assert value is not None
        assert source[value.span.start:value.span.end] == "none !important"
        assert declaration.get("important") is True

    def test_property_name_is_lowercased(self) -> None:
        declaration: Node = parse_css("a { COLOR: red; }").children[0].children[1].children[0]
        assert declaration.get("property") == "color"

    def test_selector_list_splits_on_top_level_commas(self) -> None:
        tree: Node = parse_css('a[data-x="1,2"], :is(.b, .c), #d { }')
        selectors: Node = tree.children[0].children[0]

        assert selectors.kind == "selector-list"
        assert [s.get("text") for s in selectors.children] == [
            'a[data-x="1,2"]',
            ":is(.b, .c)",
            "#d",
        ]

    def test_simple_selectors(self) -> None:
        tree: Node = parse_css(".nav__item.is-active #main { }")
        found: list[tuple[str, str]] = [
            (node.kind, node.get("name"))
            for node in tree.walk()
            if node.kind in ("id-selector", "class-selector")
        ]
        assert found == [
            ("class-selector", "nav__item"),
            ("class-selector", "is-active"),
            ("id-selector", "main"),
        ]

    def test_hex_colours_are_not_id_selectors(self) -> None:
        tree: Node = parse_css("a { color: #fff; }")
        assert "id-selector" not in _kinds(tree)

    def test_at_rules(self) -> None:
        tree: Node = parse_scss(
            "@import 'base';\n"
            "@media (min-width: 10px) { .a { color: red; } }\n"
        )
        imported, media = tree.children

        assert imported.kind == "at-rule"
        assert imported.get("name") == "import"
        assert imported.get("prelude") == "'base'"
        assert imported.get("has_block") is False
        assert media.get("name") == "media"
        assert media.get("prelude") == "(min-width: 10px)"
        assert media.get("has_block") is True

    def test_include_records_mixin_name(self) -> None:
        tree: Node = parse_scss(".a { @include button-theme($primary); }")
        include: Node = tree.children[0].children[1].children[0]

        assert include.get("name") == "include"
        assert include.get("mixin") == "button-theme"

    def test_nested_rules(self) -> None:
        tree: Node = parse_scss(".a { .b { &:hover { color: red; } } }")
        rules: list[str] = [n.get("selector") for n in tree.walk() if n.kind == "rule"]
        assert rules == [".a", ".b", "&:hover"]


class TestScssSyntax:
    def test_line_comments(self) -> None:
        tree: Node = parse_scss("// header { not a rule }\n.a { color: red; } // trailing\n")
        assert [n.get("selector") for n in tree.walk() if n.kind == "rule"] == [".a"]

    def test_interpolated_class_name(self) -> None:
        tree: Node = parse_scss(".icon-#{$name} { color: red; }")
        classes: list[Node] = [n for n in tree.walk() if n.kind == "class-selector"]

        assert len(classes) == 1
        assert classes[0].get("name") == "icon-"
        assert classes[0].get("interpolated") is True

    def test_interpolation_with_braces_in_property(self) -> None:
        tree: Node = parse_scss(".a { margin-#{$side}: 0; }")
        declaration: Node = tree.children[0].children[1].children[0]
        assert declaration.get("property") == "margin-#{$side}"

    def test_urls_with_semicolons_in_strings(self) -> None:
        tree: Node = parse_css('a { background: url("x;y.png"); }')
        declaration: Node = tree.children[0].children[1].children[0]
        assert declaration.get("value") == 'url("x;y.png")'


class TestLossless:
    @pytest.mark.parametrize(
        "source",
        [
            "",
            "/* only a comment */\n",
            ".a{color:red}\n\n\n.b {  }\n",
            "@charset 'utf-8';\n.a { color: red; ; }\n",
        ],
    )
    def test_stylesheet_spans_whole_text(self, source: str) -> None:
        tree: Node = parse_css(source)
        assert tree.span.start == 0
        assert tree.span.end == len(source)

    def test_children_are_ordered_and_disjoint(self) -> None:
        tree: Node = parse_scss(".a { color: red; .b { x: y; } @include z; }\n.c { }\n")
        for node in tree.walk():
            for earlier, later in zip(node.children, node.children[1:]):
                assert earlier.span.end <= later.span.start
            for child in node.children:
                assert node.span.contains(child.span)


class TestParseErrors:
    @pytest.mark.parametrize(
        ("source", "message", "offset"),
        [
            (".a { color: red;", "Unclosed block", 3),
            (".a { }\n}", "Unexpected '}'", 7),
            ('.a { content: "oops; }', "Unterminated string", 14),
            (".a { } /* never closed", "Unterminated comment", 7),
            (".a { color red; }", "Expected ':' in declaration", 5),
            ("@ { }", "Expected at-rule name after '@'", 0),
        ],
    )
    def test_errors_carry_offset(self, source: str, message: str, offset: int) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_css(source)
        assert exc_info.value.message == message
        assert exc_info.value.offset == offset

    def test_double_slash_is_not_a_comment_in_css(self) -> None:
        tree: Node = parse_css("// not a comment\n.a { }")
        assert tree.children[0].get("selector") == "// not a comment\n.a"

    def test_unterminated_interpolation(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_scss(".a-#{$x { }")
        assert exc_info.value.message == "Unterminated interpolation"
