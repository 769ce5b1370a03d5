"""Language-neutral syntax tree shared by every adapter and rule."""
from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open character range ``[start, end)`` into a source text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: Span) -> bool:
        """True if the spans share a character, or are the same insertion point."""
        if self.start == self.end or other.start == other.end:
            return self.start == other.start or (
                self.start < other.end and other.start < self.end
            )
        return self.start < other.end and other.start < self.end

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source code location. All values are 1-based."""

    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None


@dataclass(frozen=True, slots=True, eq=False)
class Node:
    """An immutable tree node produced by a language adapter.

    Nodes compare by identity; two parses of the same text give distinct nodes.
    """

    kind: str
    span: Span
    children: tuple[Node, ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def child(self, kind: str) -> Node | None:
        """Return the first direct child of the given kind."""
        for node in self.children:
            if node.kind == kind:
                return node
        return None

    def children_of(self, kind: str) -> list[Node]:
        return [node for node in self.children if node.kind == kind]

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants in document order."""
        stack: list[Node] = [self]
        while stack:
            node: Node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def make_node(
    kind: str,
    start: int,
    end: int,
    children: tuple[Node, ...] | list[Node] = (),
    **attributes: Any,
) -> Node:
    """Build a node with a frozen attribute mapping."""
    return Node(
        kind=kind,
        span=Span(start, end),
        children=tuple(children),
        attributes=MappingProxyType(dict(attributes)),
    )


class SourceText:
    """Decoded source text with offset to line/column conversion.

    Text is kept exactly as read. A line ends at a line feed, and a carriage
    return right before it belongs to the break. ``newline`` is the break the
    first line uses; fixes insert it so edited files keep their line endings.
    """

    __slots__ = ("text", "newline", "_line_starts")

    def __init__(self, text: str) -> None:
        self.text: str = text
        first_break: int = text.find("\n")
        self.newline: str = "\r\n" if first_break > 0 and text[first_break - 1] == "\r" else "\n"
        starts: list[int] = [0]
        for index, char in enumerate(text):
            if char == "\n":
                starts.append(index + 1)
        self._line_starts: tuple[int, ...] = tuple(starts)

    def __len__(self) -> int:
        return len(self.text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def slice(self, span: Span) -> str:
        return self.text[span.start:span.end]

    def line_of(self, offset: int) -> int:
        """1-based line number containing ``offset``."""
        return bisect_right(self._line_starts, offset)

    def line_start(self, line: int) -> int:
        """Offset of the first character of a 1-based line."""
        return self._line_starts[line - 1]

    def line_end(self, line: int, *, keepends: bool = False) -> int:
        """Offset just past the last character of a 1-based line."""
        if line < len(self._line_starts):
            next_start: int = self._line_starts[line]
            if keepends:
                return next_start
            if next_start > 1 and self.text[next_start - 2] == "\r":
                return next_start - 2
            return next_start - 1
        return len(self.text)

    def line_text(self, line: int) -> str:
        return self.text[self.line_start(line):self.line_end(line)]

    def offset(self, line: int, column: int) -> int:
        """Offset of a 1-based line and 0-based column."""
        return self._line_starts[line - 1] + column

    def location(self, offset: int) -> SourceLocation:
        """1-based location of an offset."""
        line: int = self.line_of(offset)
        return SourceLocation(line=line, column=offset - self._line_starts[line - 1] + 1)

    def span_location(self, span: Span) -> SourceLocation:
        start: SourceLocation = self.location(span.start)
        end: SourceLocation = self.location(span.end)
        return SourceLocation(
            line=start.line,
            column=start.column,
            end_line=end.line,
            end_column=end.column,
        )

    def indentation(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        line_text: str = self.line_text(self.line_of(offset))
        return line_text[:len(line_text) - len(line_text.lstrip(" \t"))]
