"""Rule protocol and metadata for styleguard rules."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from styleguard.constants import Language, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.syntax import Node


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Static description of a rule, also used by ``styleguard explain``."""

    id: str
    name: str
    category: str
    languages: frozenset[Language]
    kinds: frozenset[str]
    default_severity: Severity
    fixable: bool
    description: str
    bad_example: str
    good_example: str
    fix_description: str = ""
    config_options: str = ""


@runtime_checkable
class Rule(Protocol):
    """Structural interface for conformance rules.

    Rules hold no state between calls; anything that must carry across
    siblings goes through ``context.state()``.
    """

    @property
    def info(self) -> RuleInfo: ...

    def matches(self, node: Node) -> bool: ...

    def check(self, node: Node, context: CheckContext) -> list[Violation]: ...

    def fix(
        self,
        violation: Violation,
        node: Node,
        context: CheckContext,
    ) -> Edit | None: ...
