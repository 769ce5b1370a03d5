"""Block structure rules: css.property-order, css.nesting-depth, css.no-extend."""
from __future__ import annotations

from typing import Final

from styleguard.constants import STYLE_LANGUAGES, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node, Span
from styleguard.types import NestingDepthOptions

_PROPERTY_ORDER: Final[RuleInfo] = RuleInfo(
    id="css.property-order",
    name="Property Order",
    category="ordering",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"declaration", "at-rule", "rule"}),
    default_severity=Severity.ERROR,
    fixable=True,
    description=(
        "Inside a rule block, list plain property declarations first,\n"
        "then @include calls, then nested selectors and blocks."
    ),
    bad_example=".a { @include foo(); color: red; .child {} }",
    good_example=".a { color: red; @include foo(); .child {} }",
    fix_description="Reorders the block's children, keeping their order within each group.",
)

_NESTING_DEPTH: Final[RuleInfo] = RuleInfo(
    id="css.nesting-depth",
    name="Nesting Depth",
    category="structure",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"rule"}),
    default_severity=Severity.ERROR,
    fixable=False,
    description=(
        "Do not nest selectors more than three levels deep. @media and\n"
        "other conditional wrappers do not count as a level."
    ),
    bad_example=".a { .b { .c { .d { } } } }",
    good_example=".a { .b { .c { } } }\n.c__d { }",
    config_options=(
        '[tool.styleguard.rules."css.nesting-depth"]\n'
        "options = { max_depth = 3, count_conditional_wrappers = false }"
    ),
)

_NO_EXTEND: Final[RuleInfo] = RuleInfo(
    id="css.no-extend",
    name="No @extend",
    category="structure",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"at-rule"}),
    default_severity=Severity.ERROR,
    fixable=False,
    description=(
        "@extend rewrites selectors far from where it is written and\n"
        "bloats output. Use a mixin or a shared class instead."
    ),
    bad_example=".b { @extend .a; }",
    good_example=".b { @include a; }",
)

_DECLARATIONS: Final[int] = 0
_INCLUDES: Final[int] = 1
_NESTED: Final[int] = 2

_BUCKET_LABELS: Final[dict[int, str]] = {
    _DECLARATIONS: "property declarations",
    _INCLUDES: "@include calls",
    _NESTED: "nested blocks",
}


def _bucket(node: Node) -> int | None:
    """Ordering group of a block child, or None if it takes no part."""
    if node.kind == "declaration":
        return _DECLARATIONS
    if node.kind == "rule":
        return _NESTED
    if node.kind == "at-rule":
        if node.get("name") == "include":
            return _INCLUDES
        if node.get("has_block"):
            return _NESTED
    return None


def _describe(node: Node) -> str:
    if node.kind == "declaration":
        return f"Declaration '{node.get('property')}'"
    if node.kind == "rule":
        return f"Nested block '{node.get('selector')}'"
    return f"@{node.get('name')}"


class PropertyOrderRule:
    """Flag block children that appear after a later ordering group."""

    @property
    def info(self) -> RuleInfo:
        return _PROPERTY_ORDER

    def matches(self, node: Node) -> bool:
        return _bucket(node) is not None

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        if context.parent.kind != "block":
            return []
        bucket: int | None = _bucket(node)
        if bucket is None:
            return []
        state = context.state()
        highest: int = state.get("highest", _DECLARATIONS)
        if bucket < highest:
            return [
                context.violation(
                    span=node.span,
                    message=(
                        f"{_describe(node)} should come before "
                        f"{_BUCKET_LABELS[highest]}"
                    ),
                )
            ]
        state["highest"] = bucket
        return []

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        block: Node = context.parent
        movable: list[Node] = [c for c in block.children if _bucket(c) is not None]
        if len(movable) < 2:
            return None
        ordered: list[Node] = sorted(movable, key=lambda c: _bucket(c) or 0)

        pieces: list[str] = []
        for index, child in enumerate(ordered):
            if index > 0:
                gap_start: int = movable[index - 1].span.end
                pieces.append(context.source[gap_start:movable[index].span.start])
            pieces.append(_statement_text(child, context.source))

        span: Span = Span(movable[0].span.start, movable[-1].span.end)
        replacement: str = "".join(pieces)
        if replacement == context.source[span.start:span.end]:
            return None
        return Edit(span=span, replacement=replacement, rule_id=self.info.id)


def _statement_text(node: Node, source: str) -> str:
    """Text of a block child, terminated so it can sit anywhere in the block."""
    text: str = source[node.span.start:node.span.end]
    blockless: bool = node.kind == "declaration" or (
        node.kind == "at-rule" and not node.get("has_block")
    )
    if blockless and not text.endswith(";"):
        text += ";"
    return text


class NestingDepthRule:
    """Flag selector blocks nested deeper than the configured limit."""

    @property
    def info(self) -> RuleInfo:
        return _NESTING_DEPTH

    def matches(self, node: Node) -> bool:
        return node.kind == "rule"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        options: NestingDepthOptions = context.options
        depth: int = context.scope.selector_depth + 1
        if options.count_conditional_wrappers:
            depth += context.scope.wrapper_depth
        if depth <= options.max_depth:
            return []
        selectors: Node | None = node.child("selector-list")
        span: Span = selectors.span if selectors is not None else node.span
        return [
            context.violation(
                span=span,
                message=(
                    f"Selector '{node.get('selector')}' is nested {depth} levels deep "
                    f"(maximum {options.max_depth})"
                ),
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None


class NoExtendRule:
    """Flag every @extend directive."""

    @property
    def info(self) -> RuleInfo:
        return _NO_EXTEND

    def matches(self, node: Node) -> bool:
        return node.kind == "at-rule" and node.get("name") == "extend"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        return [
            context.violation(
                span=node.span,
                message=f"@extend {node.get('prelude')} is not allowed; use a mixin",
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None
