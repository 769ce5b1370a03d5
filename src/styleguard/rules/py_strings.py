"""python.quote-style: one delimiter for single-line string literals."""
from __future__ import annotations

from typing import Final

from styleguard.constants import Language, QuoteStyle, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node
from styleguard.types import QuoteStyleOptions

_QUOTE_STYLE: Final[RuleInfo] = RuleInfo(
    id="python.quote-style",
    name="Quote Style",
    category="formatting",
    languages=frozenset({Language.PYTHON}),
    kinds=frozenset({"SimpleString"}),
    default_severity=Severity.WARNING,
    fixable=True,
    description=(
        "Single-line strings use the preferred quote character, unless\n"
        "the text contains that character. Triple-quoted strings and\n"
        "docstrings are left alone."
    ),
    bad_example='name = "value"',
    good_example="name = 'value'",
    fix_description="Swaps the delimiters when no escaping is needed.",
    config_options=(
        '[tool.styleguard.rules."python.quote-style"]\n'
        'options = { preferred = "single" }'
    ),
)

_QUOTE_CHARS: Final[dict[QuoteStyle, str]] = {
    QuoteStyle.SINGLE: "'",
    QuoteStyle.DOUBLE: '"',
}


class QuoteStyleRule:
    """Flag single-line strings delimited by the non-preferred quote."""

    @property
    def info(self) -> RuleInfo:
        return _QUOTE_STYLE

    def matches(self, node: Node) -> bool:
        return node.kind == "SimpleString" and len(node.get("quote", "")) == 1

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        if _is_docstring(node, context.ancestors) or self._swapped(node, context.options) is None:
            return []
        options: QuoteStyleOptions = context.options
        return [
            context.violation(
                span=node.span,
                message=f"String literal should use {options.preferred.value} quotes",
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        if _is_docstring(node, context.ancestors):
            return None
        swapped: str | None = self._swapped(node, context.options)
        if swapped is None:
            return None
        return Edit(span=node.span, replacement=swapped, rule_id=self.info.id)

    def _swapped(self, node: Node, options: QuoteStyleOptions) -> str | None:
        """The literal with preferred delimiters, or None if it is fine as is."""
        preferred: str = _QUOTE_CHARS[options.preferred]
        quote: str = node.get("quote", "")
        if quote == preferred:
            return None
        value: str = node.get("value", "")
        prefix: str = node.get("prefix", "")
        body: str = value[len(prefix) + 1:-1]
        if preferred in body:
            return None
        return f"{prefix}{preferred}{body}{preferred}"


def _is_docstring(node: Node, ancestors: tuple[Node, ...]) -> bool:
    """True for a string that is the first statement of a module, class or function."""
    if len(ancestors) < 3:
        return False
    expr: Node = ancestors[-1]
    statement: Node = ancestors[-2]
    body: Node = ancestors[-3]
    if expr.kind != "Expr" or expr.children != (node,):
        return False
    if statement.kind != "SimpleStatementLine" or statement.children != (expr,):
        return False
    if not body.children or body.children[0] is not statement:
        return False
    if body.kind == "Module":
        return True
    return (
        body.kind == "IndentedBlock"
        and len(ancestors) >= 4
        and ancestors[-4].kind in ("ClassDef", "FunctionDef")
    )
