"""Traversal scope and the per-check context handed to rules."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from styleguard.diagnostics import Violation
from styleguard.syntax import Node, SourceLocation, SourceText, Span

if TYPE_CHECKING:
    from styleguard.rules.base import RuleInfo

# At-rules that wrap selector blocks conditionally rather than nesting them.
CONDITIONAL_AT_RULES: frozenset[str] = frozenset({
    "media", "supports", "container", "layer", "document", "at-root",
})


@dataclass(eq=False, slots=True)
class Scope:
    """State for the children of one node, discarded when they are done.

    ``selector_depth`` counts enclosing selector blocks, ``wrapper_depth``
    counts enclosing conditional at-rules, and ``state`` holds per-rule
    running values shared by siblings (keyed by rule id).
    """

    node: Node
    parent: Scope | None = None
    selector_depth: int = 0
    wrapper_depth: int = 0
    state: dict[str, dict[str, Any]] = field(default_factory=dict)

    def enter(self, node: Node) -> Scope:
        """Scope for the children of ``node``."""
        selector_depth: int = self.selector_depth
        wrapper_depth: int = self.wrapper_depth
        if node.kind == "rule":
            selector_depth += 1
        elif node.kind == "at-rule" and node.get("name") in CONDITIONAL_AT_RULES:
            wrapper_depth += 1
        return Scope(
            node=node,
            parent=self,
            selector_depth=selector_depth,
            wrapper_depth=wrapper_depth,
        )

    @property
    def ancestors(self) -> tuple[Node, ...]:
        """Enclosing nodes, outermost first."""
        chain: list[Node] = []
        scope: Scope | None = self
        while scope is not None:
            chain.append(scope.node)
            scope = scope.parent
        return tuple(reversed(chain))


@dataclass(frozen=True, slots=True)
class CheckContext:
    """Everything a rule may look at besides the node itself."""

    file: Path
    text: SourceText
    scope: Scope
    rule: RuleInfo
    options: Any

    @property
    def source(self) -> str:
        return self.text.text

    @property
    def parent(self) -> Node:
        return self.scope.node

    @property
    def ancestors(self) -> tuple[Node, ...]:
        return self.scope.ancestors

    def state(self) -> dict[str, Any]:
        """Running state this rule shares with the node's siblings."""
        return self.scope.state.setdefault(self.rule.id, {})

    def violation(
        self,
        *,
        span: Span,
        message: str,
        fixable: bool | None = None,
    ) -> Violation:
        location: SourceLocation = self.text.span_location(span)
        return Violation(
            rule_id=self.rule.id,
            file=self.file,
            span=span,
            location=location,
            message=message,
            severity=self.rule.default_severity,
            fixable=self.rule.fixable if fixable is None else fixable,
            source_line=self.text.line_text(location.line),
        )
