"""Value rules: css.border-none, css.zero-unit."""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Final

from styleguard.constants import STYLE_LANGUAGES, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node, Span
from styleguard.types import BorderNoneOptions, ZeroUnitOptions

_BORDER_NONE: Final[RuleInfo] = RuleInfo(
    id="css.border-none",
    name="Border Zero",
    category="values",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"declaration"}),
    default_severity=Severity.ERROR,
    fixable=True,
    description="Remove borders with 'border: 0', not 'border: none'.",
    bad_example=".a { border: none; }",
    good_example=".a { border: 0; }",
    fix_description="Replaces 'none' with '0'.",
    config_options=(
        '[tool.styleguard.rules."css.border-none"]\n'
        'options = { properties = ["border"] }'
    ),
)

_ZERO_UNIT: Final[RuleInfo] = RuleInfo(
    id="css.zero-unit",
    name="Unitless Zero",
    category="values",
    languages=STYLE_LANGUAGES,
    kinds=frozenset({"declaration"}),
    default_severity=Severity.WARNING,
    fixable=True,
    description="Zero lengths are written without a unit.",
    bad_example=".a { margin: 0px; }",
    good_example=".a { margin: 0; }",
    fix_description="Drops the unit from zero lengths outside of functions.",
)

_NONE: Final[re.Pattern[str]] = re.compile(r"none\b", re.IGNORECASE)


@lru_cache(maxsize=8)
def _zero_pattern(units: tuple[str, ...]) -> re.Pattern[str]:
    alternatives: str = "|".join(re.escape(u) for u in sorted(units, key=len, reverse=True))
    return re.compile(
        rf"(?<![\w.#$-])0+(?:\.0+)?(?:{alternatives})(?![\w%-])",
        re.IGNORECASE,
    )


def _value_node(node: Node) -> Node | None:
    return node.child("value")


class BorderNoneRule:
    """Flag ``border: none``."""

    @property
    def info(self) -> RuleInfo:
        return _BORDER_NONE

    def matches(self, node: Node) -> bool:
        return node.kind == "declaration"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        options: BorderNoneOptions = context.options
        if node.get("property") not in options.properties:
            return []
        value: Node | None = _value_node(node)
        if value is None or not _is_none(value.get("text", "")):
            return []
        return [
            context.violation(
                span=value.span,
                message=f"Use '{node.get('property')}: 0' instead of 'none'",
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        value: Node | None = _value_node(node)
        if value is None or not _is_none(value.get("text", "")):
            return None
        return Edit(
            span=Span(value.span.start, value.span.start + len("none")),
            replacement="0",
            rule_id=self.info.id,
        )


def _is_none(text: str) -> bool:
    bare: str = re.sub(r"\s*!important\s*$", "", text, flags=re.IGNORECASE).strip()
    return bare.lower() == "none" and _NONE.match(text) is not None


class ZeroUnitRule:
    """Flag zero lengths written with a unit."""

    @property
    def info(self) -> RuleInfo:
        return _ZERO_UNIT

    def matches(self, node: Node) -> bool:
        return node.kind == "declaration"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        return [
            context.violation(
                span=span,
                message=f"Zero value '{context.source[span.start:span.end]}' "
                "should not carry a unit",
            )
            for span in self._zero_spans(node, context)
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        if violation.span not in self._zero_spans(node, context):
            return None
        return Edit(span=violation.span, replacement="0", rule_id=self.info.id)

    def _zero_spans(self, node: Node, context: CheckContext) -> list[Span]:
        options: ZeroUnitOptions = context.options
        value: Node | None = _value_node(node)
        if value is None or not options.units:
            return []
        text: str = value.get("text", "")
        spans: list[Span] = []
        for match in _zero_pattern(options.units).finditer(text):
            before: str = text[:match.start()]
            # Functions such as calc() need the unit; quoted text is not a length.
            if before.count("(") > before.count(")"):
                continue
            if before.count('"') % 2 or before.count("'") % 2:
                continue
            spans.append(
                Span(value.span.start + match.start(), value.span.start + match.end())
            )
        return spans
