"""Lossless CSS and SCSS block parser.

Produces a :class:`~styleguard.syntax.Node` tree whose spans index the
original text, so fixes can be expressed as plain text edits. Only the block
structure, selectors and declarations are parsed; values are kept verbatim.

Node kinds: ``stylesheet``, ``rule``, ``selector-list``, ``selector``,
``id-selector``, ``class-selector``, ``block``, ``declaration``, ``property``,
``value`` and ``at-rule``.
"""
from __future__ import annotations

from styleguard.syntax import Node, make_node
from styleguard.types import ParseError

_WHITESPACE: frozenset[str] = frozenset(" \t\r\n\f")


def parse_css(source: str) -> Node:
    """Parse plain CSS."""
    return _Parser(source, scss=False).parse()


def parse_scss(source: str) -> Node:
    """Parse SCSS (``//`` comments, ``#{}`` interpolation, nesting)."""
    return _Parser(source, scss=True).parse()


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char in "-_\\" or ord(char) > 127


class _Parser:
    def __init__(self, source: str, *, scss: bool) -> None:
        self._src: str = source
        self._len: int = len(source)
        self._scss: bool = scss

    def parse(self) -> Node:
        children: list[Node]
        children, _ = self._statements(0, open_brace=None)
        return make_node("stylesheet", 0, self._len, children)

    # -- statements -------------------------------------------------------

    def _statements(self, pos: int, *, open_brace: int | None) -> tuple[list[Node], int]:
        """Parse statements until the closing brace (nested) or end of input.

        Returns the statements and the offset of the closing ``}`` (or the
        end of input at top level).
        """
        children: list[Node] = []
        while True:
            pos = self._skip_trivia(pos)
            if pos >= self._len:
                if open_brace is not None:
                    raise ParseError("Unclosed block", offset=open_brace)
                return children, pos
            char: str = self._src[pos]
            if char == "}":
                if open_brace is None:
                    raise ParseError("Unexpected '}'", offset=pos)
                return children, pos
            if char == ";":
                pos += 1
                continue
            node: Node
            node, pos = self._statement(pos)
            children.append(node)

    def _statement(self, start: int) -> tuple[Node, int]:
        stop_at: int
        stop: str
        stop_at, stop = self._scan(start)

        if stop == "{":
            prelude_end: int = self._rstrip(start, stop_at)
            block: Node = self._block(stop_at)
            end: int = block.span.end
            if self._src[start] == "@":
                return self._at_rule(start, prelude_end, end, block=block), end
            return self._rule(start, prelude_end, end, block=block), end

        body_end: int = self._rstrip(start, stop_at)
        node_end: int = stop_at + 1 if stop == ";" else body_end
        resume: int = stop_at + 1 if stop == ";" else stop_at
        if self._src[start] == "@":
            return self._at_rule(start, body_end, node_end, block=None), resume
        return self._declaration(start, body_end, node_end), resume

    def _block(self, open_brace: int) -> Node:
        children: list[Node]
        close: int
        children, close = self._statements(open_brace + 1, open_brace=open_brace)
        return make_node("block", open_brace, close + 1, children)

    def _rule(self, start: int, prelude_end: int, end: int, *, block: Node) -> Node:
        selectors: Node = self._selector_list(start, prelude_end)
        return make_node(
            "rule",
            start,
            end,
            (selectors, block),
            selector=self._src[start:prelude_end],
        )

    def _at_rule(
        self,
        start: int,
        prelude_end: int,
        end: int,
        *,
        block: Node | None,
    ) -> Node:
        name_end: int = start + 1
        while name_end < prelude_end and _is_ident_char(self._src[name_end]):
            name_end += 1
        name: str = self._src[start + 1:name_end].lower()
        if not name:
            raise ParseError("Expected at-rule name after '@'", offset=start)

        prelude_start: int = name_end
        while prelude_start < prelude_end and self._src[prelude_start] in _WHITESPACE:
            prelude_start += 1
        prelude: str = self._src[prelude_start:prelude_end]

        mixin: str | None = None
        if name == "include":
            mixin_end: int = prelude_start
            while mixin_end < prelude_end and _is_ident_char(self._src[mixin_end]):
                mixin_end += 1
            mixin = self._src[prelude_start:mixin_end] or None

        children: tuple[Node, ...] = (block,) if block is not None else ()
        return make_node(
            "at-rule",
            start,
            end,
            children,
            name=name,
            prelude=prelude,
            mixin=mixin,
            has_block=block is not None,
        )

    def _declaration(self, start: int, body_end: int, end: int) -> Node:
        colon: int | None = self._find_colon(start, body_end)
        if colon is None:
            raise ParseError("Expected ':' in declaration", offset=start)

        property_end: int = self._rstrip(start, colon)
        value_start: int = colon + 1
        while value_start < body_end and self._src[value_start] in _WHITESPACE:
            value_start += 1

        prop: str = self._src[start:property_end]
        value: str = self._src[value_start:body_end]
        return make_node(
            "declaration",
            start,
            end,
            (
                make_node("property", start, property_end, name=prop),
                make_node("value", value_start, body_end, text=value),
            ),
            property=prop.lower(),
            value=value,
            important="!important" in value.lower(),
        )

    # -- selectors --------------------------------------------------------

    def _selector_list(self, start: int, end: int) -> Node:
        selectors: list[Node] = []
        segment_start: int = start
        depth: int = 0
        pos: int = start
        while pos < end:
            char: str = self._src[pos]
            if char in "\"'":
                pos = self._skip_string(pos)
                continue
            if char == "#" and self._peek(pos + 1) == "{":
                pos = self._skip_interpolation(pos)
                continue
            if char in "([":
                depth += 1
            elif char in ")]":
                depth = max(0, depth - 1)
            elif char == "," and depth == 0:
                self._add_selector(selectors, segment_start, pos)
                segment_start = pos + 1
            pos += 1
        self._add_selector(selectors, segment_start, end)
        return make_node("selector-list", start, end, selectors)

    def _add_selector(self, selectors: list[Node], start: int, end: int) -> None:
        while start < end and self._src[start] in _WHITESPACE:
            start += 1
        end = self._rstrip(start, end)
        if start == end:
            return
        selectors.append(
            make_node(
                "selector",
                start,
                end,
                self._simple_selectors(start, end),
                text=self._src[start:end],
            )
        )

    def _simple_selectors(self, start: int, end: int) -> list[Node]:
        found: list[Node] = []
        pos: int = start
        while pos < end:
            char: str = self._src[pos]
            if char in "\"'":
                pos = self._skip_string(pos)
            elif char == "[":
                close: int = self._src.find("]", pos, end)
                pos = end if close == -1 else close + 1
            elif char == "#" and self._peek(pos + 1) == "{":
                pos = self._skip_interpolation(pos)
            elif char in "#." and self._starts_ident(pos + 1, end):
                name_end: int = pos + 1
                while name_end < end and _is_ident_char(self._src[name_end]):
                    name_end += 1
                found.append(
                    make_node(
                        "id-selector" if char == "#" else "class-selector",
                        pos,
                        name_end,
                        name=self._src[pos + 1:name_end],
                        interpolated=self._src.startswith("#{", name_end),
                    )
                )
                pos = name_end
            else:
                pos += 1
        return found

    def _starts_ident(self, pos: int, end: int) -> bool:
        if pos >= end:
            return False
        char: str = self._src[pos]
        if char.isalpha() or char in "_\\" or ord(char) > 127:
            return True
        if char == "-" and pos + 1 < end:
            following: str = self._src[pos + 1]
            return following.isalpha() or following in "-_"
        return False

    # -- scanning helpers ---------------------------------------------------

    def _scan(self, pos: int) -> tuple[int, str]:
        """Find the first top-level ``;``, ``{`` or ``}`` from ``pos``."""
        depth: int = 0
        while pos < self._len:
            char: str = self._src[pos]
            if char in "\"'":
                pos = self._skip_string(pos)
                continue
            if char == "/" and self._peek(pos + 1) == "*":
                pos = self._skip_block_comment(pos)
                continue
            if char == "/" and self._peek(pos + 1) == "/" and self._scss and depth == 0:
                pos = self._skip_line(pos)
                continue
            if char == "#" and self._peek(pos + 1) == "{":
                pos = self._skip_interpolation(pos)
                continue
            if char in "([":
                depth += 1
            elif char in ")]":
                depth = max(0, depth - 1)
            elif depth == 0 and char in ";{}":
                return pos, char
            pos += 1
        return self._len, ""

    def _find_colon(self, start: int, end: int) -> int | None:
        pos: int = start
        while pos < end:
            char: str = self._src[pos]
            if char == "#" and self._peek(pos + 1) == "{":
                pos = self._skip_interpolation(pos)
                continue
            if char == ":":
                return pos
            pos += 1
        return None

    def _skip_trivia(self, pos: int) -> int:
        while pos < self._len:
            char: str = self._src[pos]
            if char in _WHITESPACE:
                pos += 1
            elif char == "/" and self._peek(pos + 1) == "*":
                pos = self._skip_block_comment(pos)
            elif char == "/" and self._peek(pos + 1) == "/" and self._scss:
                pos = self._skip_line(pos)
            else:
                break
        return pos

    def _skip_string(self, pos: int) -> int:
        quote: str = self._src[pos]
        cursor: int = pos + 1
        while cursor < self._len:
            char: str = self._src[cursor]
            if char == "\\":
                cursor += 2
                continue
            if char == quote:
                return cursor + 1
            if char == "\n":
                break
            cursor += 1
        raise ParseError("Unterminated string", offset=pos)

    def _skip_block_comment(self, pos: int) -> int:
        close: int = self._src.find("*/", pos + 2)
        if close == -1:
            raise ParseError("Unterminated comment", offset=pos)
        return close + 2

    def _skip_line(self, pos: int) -> int:
        newline: int = self._src.find("\n", pos)
        return self._len if newline == -1 else newline

    def _skip_interpolation(self, pos: int) -> int:
        depth: int = 0
        cursor: int = pos + 1
        while cursor < self._len:
            char: str = self._src[cursor]
            if char in "\"'":
                cursor = self._skip_string(cursor)
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return cursor + 1
            cursor += 1
        raise ParseError("Unterminated interpolation", offset=pos)

    def _rstrip(self, start: int, end: int) -> int:
        while end > start and self._src[end - 1] in _WHITESPACE:
            end -= 1
        return end

    def _peek(self, pos: int) -> str:
        return self._src[pos] if pos < self._len else ""
