"""Tests for the libcst-backed Python adapter."""
from __future__ import annotations

import pytest

from styleguard.adapters.python import parse_python
from styleguard.syntax import Node
from styleguard.types import ParseError


def _first(tree: Node, kind: str) -> Node:
    for node in tree.walk():
        if node.kind == kind:
            return node
    raise AssertionError(f"no {kind} node")


class TestConversion:
    def test_module_spans_whole_source(self) -> None:
        source: str = "import os\n\nx = 1\n"
        tree: Node = parse_python(source)

        assert tree.kind == "Module"
        assert tree.span.start == 0
        assert tree.span.end == len(source)
        assert [c.kind for c in tree.children] == ["SimpleStatementLine", "SimpleStatementLine"]

    def test_statement_span_excludes_leading_comments(self) -> None:
        source: str = "# header\nimport os\n"
        statement: Node = parse_python(source).children[0]
        assert source[statement.span.start:statement.span.end] == "import os"

    def test_trivia_is_dropped(self) -> None:
        tree: Node = parse_python("f(a, b)  # call\n")
        kinds: set[str] = {node.kind for node in tree.walk()}
        assert "Comma" not in kinds
        assert "Comment" not in kinds
        assert "Newline" not in kinds
        assert "Call" in kinds

    def test_name_spans_match_text(self) -> None:
        source: str = "def get_user(user_id):\n    return user_id\n"
        tree: Node = parse_python(source)
        for node in tree.walk():
            if node.kind == "Name":
                assert source[node.span.start:node.span.end] == node.get("value")


class TestAttributes:
    def test_import(self) -> None:
        node: Node = _first(parse_python("import os.path, json\n"), "Import")
        assert node.get("names") == ("os.path", "json")

    def test_import_from(self) -> None:
        node: Node = _first(parse_python("from ..models import Book as B\n"), "ImportFrom")
        assert node.get("module") == "models"
        assert node.get("level") == 2
        assert node.get("names") == ("Book",)

        alias: Node = _first(node, "ImportAlias")
        assert alias.get("name") == "Book"
        assert alias.get("asname") == "B"

    def test_import_star(self) -> None:
        node: Node = _first(parse_python("from os import *\n"), "ImportFrom")
        assert node.get("names") == ("*",)

    def test_class_def(self) -> None:
        node: Node = _first(
            parse_python("class Book(models.Model, Mixin):\n    pass\n"), "ClassDef",
        )
        assert node.get("name") == "Book"
        assert node.get("bases") == ("models.Model", "Mixin")

    def test_function_def(self) -> None:
        node: Node = _first(parse_python("async def fetch(url):\n    pass\n"), "FunctionDef")
        assert node.get("name") == "fetch"
        assert node.get("is_async") is True
        assert _first(node, "Param").get("name") == "url"

    def test_call(self) -> None:
        node: Node = _first(
            parse_python("author = models.ForeignKey(User, related_name='books')\n"), "Call",
        )
        assert node.get("func") == "models.ForeignKey"
        assert node.get("keywords") == ("related_name",)

    def test_simple_string(self) -> None:
        node: Node = _first(parse_python('x = rb"data"\n'), "SimpleString")
        assert node.get("value") == 'rb"data"'
        assert node.get("prefix") == "rb"
        assert node.get("quote") == '"'


class TestParseErrors:
    def test_syntax_error_raises(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_python("def broken(\n")
        assert exc_info.value.message
        assert 0 <= exc_info.value.offset <= len("def broken(\n")

    def test_error_offset_points_at_bad_line(self) -> None:
        source: str = "x = 1\ny = = 2\n"
        with pytest.raises(ParseError) as exc_info:
            parse_python(source)
        assert exc_info.value.offset >= len("x = 1\n")
