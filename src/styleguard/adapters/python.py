"""Python adapter: libcst concrete syntax tree to styleguard nodes."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import CodeRange, MetadataWrapper, PositionProvider

from styleguard.syntax import Node, SourceText, make_node
from styleguard.types import ParseError

# Whitespace, comments and punctuation carry no structure worth matching.
_TRIVIA: Final[tuple[type[cst.CSTNode], ...]] = (
    cst.BaseParenthesizableWhitespace,
    cst.EmptyLine,
    cst.Newline,
    cst.TrailingWhitespace,
    cst.Comment,
    cst.Comma,
    cst.Dot,
    cst.Colon,
    cst.Semicolon,
    cst.AssignEqual,
    cst.LeftParen,
    cst.RightParen,
    cst.LeftSquareBracket,
    cst.RightSquareBracket,
    cst.LeftCurlyBrace,
    cst.RightCurlyBrace,
    cst.BaseBinaryOp,
    cst.BaseBooleanOp,
    cst.BaseCompOp,
    cst.BaseUnaryOp,
    cst.BaseAugOp,
)


def parse_python(source: str) -> Node:
    """Parse Python source into a node tree.

    Raises:
        ParseError: If libcst rejects the source.
    """
    text: SourceText = SourceText(source)
    try:
        module: cst.Module = cst.parse_module(source)
    except cst.ParserSyntaxError as e:
        line: int = min(max(e.raw_line, 1), text.line_count)
        column: int = max(e.raw_column, 0)
        offset: int = min(text.offset(line, 0) + column, len(source))
        raise ParseError(e.message, offset=offset) from e

    wrapper: MetadataWrapper = MetadataWrapper(module)
    positions: Mapping[cst.CSTNode, CodeRange] = wrapper.resolve(PositionProvider)
    converter: _Converter = _Converter(text=text, positions=positions)
    return make_node(
        "Module",
        0,
        len(source),
        converter.convert_children(wrapper.module),
    )


class _Converter:
    def __init__(
        self,
        *,
        text: SourceText,
        positions: Mapping[cst.CSTNode, CodeRange],
    ) -> None:
        self._text: SourceText = text
        self._positions: Mapping[cst.CSTNode, CodeRange] = positions

    def convert_children(self, node: cst.CSTNode) -> list[Node]:
        converted: list[Node] = []
        for child in node.children:
            converted.extend(self.convert(child))
        return converted

    def convert(self, node: cst.CSTNode) -> list[Node]:
        """Convert a CST node; nodes without a position splice their children."""
        if isinstance(node, _TRIVIA):
            return []
        children: list[Node] = self.convert_children(node)
        code_range: CodeRange | None = self._positions.get(node)
        if code_range is None:
            return children
        start: int = self._text.offset(code_range.start.line, code_range.start.column)
        end: int = self._text.offset(code_range.end.line, code_range.end.column)
        return [
            make_node(
                type(node).__name__,
                start,
                max(start, end),
                children,
                **_attributes(node),
            )
        ]


def _dotted(node: cst.CSTNode | None) -> str | None:
    if node is None:
        return None
    return get_full_name_for_node(node)


def _attributes(node: cst.CSTNode) -> dict[str, Any]:
    """Derived attributes rules match on."""
    if isinstance(node, cst.Name):
        return {"value": node.value}
    if isinstance(node, cst.Attribute):
        return {"dotted": _dotted(node)}
    if isinstance(node, cst.Import):
        return {"names": tuple(_dotted(alias.name) or "" for alias in node.names)}
    if isinstance(node, cst.ImportFrom):
        names: tuple[str, ...]
        if isinstance(node.names, cst.ImportStar):
            names = ("*",)
        else:
            names = tuple(_dotted(alias.name) or "" for alias in node.names)
        return {
            "module": _dotted(node.module) or "",
            "level": len(node.relative),
            "names": names,
        }
    if isinstance(node, cst.ImportAlias):
        asname: str | None = None
        if node.asname is not None and isinstance(node.asname.name, cst.Name):
            asname = node.asname.name.value
        return {"name": _dotted(node.name), "asname": asname}
    if isinstance(node, cst.ClassDef):
        return {
            "name": node.name.value,
            "bases": tuple(_dotted(arg.value) or "" for arg in node.bases),
        }
    if isinstance(node, cst.FunctionDef):
        return {"name": node.name.value, "is_async": node.asynchronous is not None}
    if isinstance(node, cst.Param):
        return {"name": node.name.value}
    if isinstance(node, cst.Call):
        return {
            "func": _dotted(node.func),
            "keywords": tuple(
                arg.keyword.value for arg in node.args if arg.keyword is not None
            ),
        }
    if isinstance(node, cst.Arg):
        return {"keyword": node.keyword.value if node.keyword is not None else None}
    if isinstance(node, cst.SimpleString):
        return {
            "value": node.value,
            "prefix": node.prefix,
            "quote": node.quote,
        }
    return {}
