"""Selector rules: css.no-id-selector, css.selector-per-line, css.bem-class-name."""
from __future__ import annotations

import re
from typing import Final

from styleguard.constants import STYLE_LANGUAGES, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node, Span

_NO_ID_SELECTOR: Final[RuleInfo] = RuleInfo(
    id="css.no-id-selector",
    name="No ID Selectors",
    category="selectors",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"id-selector"}),
    default_severity=Severity.ERROR,
    fixable=False,
    description=(
        "Style with classes, never with ids. Id selectors cannot be\n"
        "reused and their specificity overrides every class rule."
    ),
    bad_example="#lol-no { color: red; }",
    good_example=".lol-yes { color: red; }",
)

_SELECTOR_PER_LINE: Final[RuleInfo] = RuleInfo(
    id="css.selector-per-line",
    name="One Selector Per Line",
    category="formatting",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"selector-list"}),
    default_severity=Severity.WARNING,
    fixable=True,
    description=(
        "When a rule declaration has several selectors, each selector\n"
        "goes on its own line."
    ),
    bad_example=".one, .two { color: red; }",
    good_example=".one,\n.two { color: red; }",
    fix_description="Breaks the line after each comma, keeping the rule's indentation.",
)

_BEM_CLASS_NAME: Final[RuleInfo] = RuleInfo(
    id="css.bem-class-name",
    name="BEM Class Names",
    category="naming",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"class-selector"}),
    default_severity=Severity.WARNING,
    fixable=False,
    description=(
        "Class names follow BEM: lowercase hyphenated words for the block,\n"
        "__element and --modifier suffixes."
    ),
    bad_example=".navBar_Item { }",
    good_example=".nav-bar__item--active { }",
)

_WORDS: Final[str] = r"[a-z0-9]+(?:-[a-z0-9]+)*"
_BEM_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*(?:__{_WORDS})?(?:--{_WORDS})?$"
)


class NoIdSelectorRule:
    """Flag every id selector."""

    @property
    def info(self) -> RuleInfo:
        return _NO_ID_SELECTOR

    def matches(self, node: Node) -> bool:
        return node.kind == "id-selector"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        return [
            context.violation(
                span=node.span,
                message=f"ID selector '#{node.get('name')}' is not allowed; use a class",
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None


class SelectorPerLineRule:
    """Flag selectors in a list that share a line with the previous one."""

    @property
    def info(self) -> RuleInfo:
        return _SELECTOR_PER_LINE

    def matches(self, node: Node) -> bool:
        return node.kind == "selector-list" and len(node.children) > 1

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        violations: list[Violation] = []
        for previous, selector in zip(node.children, node.children[1:]):
            gap: str = context.source[previous.span.end:selector.span.start]
            if "\n" not in gap:
                violations.append(
                    context.violation(
                        span=selector.span,
                        message=(
                            f"Selector '{selector.get('text')}' should start on its own line"
                        ),
                    )
                )
        return violations

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        for previous, selector in zip(node.children, node.children[1:]):
            if selector.span != violation.span:
                continue
            gap: str = context.source[previous.span.end:selector.span.start]
            comma: int = gap.find(",")
            if comma == -1 or gap[comma + 1:].strip():
                return None
            start: int = previous.span.end + comma + 1
            return Edit(
                span=Span(start, selector.span.start),
                replacement=context.text.newline + context.text.indentation(node.span.start),
                rule_id=self.info.id,
            )
        return None


class BemClassNameRule:
    """Flag class selectors that are not BEM-shaped."""

    @property
    def info(self) -> RuleInfo:
        return _BEM_CLASS_NAME

    def matches(self, node: Node) -> bool:
        return node.kind == "class-selector" and not node.get("interpolated")

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        name: str = node.get("name", "")
        if _BEM_PATTERN.match(name):
            return []
        return [
            context.violation(
                span=node.span,
                message=(
                    f"Class '.{name}' does not follow block__element--modifier naming"
                ),
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None
