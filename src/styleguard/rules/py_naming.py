"""python.naming-convention: snake_case bindings, PascalCase classes."""
from __future__ import annotations

import re
from typing import Final

from styleguard.constants import Language, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node
from styleguard.types import NamingConventionOptions

_NAMING_CONVENTION: Final[RuleInfo] = RuleInfo(
    id="python.naming-convention",
    name="Naming Convention",
    category="naming",
    languages=frozenset({Language.PYTHON}),
    kinds=frozenset({"FunctionDef", "ClassDef", "Param", "AssignTarget", "AnnAssign"}),
    default_severity=Severity.ERROR,
    fixable=False,
    description=(
        "Functions, parameters, variables and model fields use\n"
        "snake_case; classes use PascalCase. Module and class level\n"
        "constants may be UPPER_CASE."
    ),
    bad_example="def getUser(userId): ...",
    good_example="def get_user(user_id): ...",
    config_options=(
        '[tool.styleguard.rules."python.naming-convention"]\n'
        'options = { allow_upper_constants = true, ignore_names = ["setUp"] }'
    ),
)

_SNAKE_CASE: Final[re.Pattern[str]] = re.compile(r"^_*[a-z][a-z0-9_]*$|^_+$")
_UPPER_CASE: Final[re.Pattern[str]] = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_PASCAL_CASE: Final[re.Pattern[str]] = re.compile(r"^_*[A-Z][a-zA-Z0-9]*$")

_TARGET_CONTAINERS: Final[frozenset[str]] = frozenset({
    "Tuple", "List", "Element", "StarredElement",
})


def _bound_names(target: Node) -> list[Node]:
    """Name nodes bound by an assignment target, unpacking tuples and lists."""
    if target.kind == "Name":
        return [target]
    if target.kind in _TARGET_CONTAINERS:
        return [name for child in target.children for name in _bound_names(child)]
    return []


class NamingConventionRule:
    """Flag identifiers that break the case conventions."""

    @property
    def info(self) -> RuleInfo:
        return _NAMING_CONVENTION

    def matches(self, node: Node) -> bool:
        return node.kind in self.info.kinds

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        options: NamingConventionOptions = context.options
        violations: list[Violation] = []

        if node.kind == "ClassDef":
            name_node: Node | None = node.child("Name")
            if name_node is not None and not self._ignored(name_node, options):
                if not _PASCAL_CASE.match(name_node.get("value", "")):
                    violations.append(self._report(context, name_node, "Class", "PascalCase"))
            return violations

        if node.kind in ("FunctionDef", "Param"):
            name_node = node.child("Name")
            kind: str = "Function" if node.kind == "FunctionDef" else "Parameter"
            if name_node is not None and not self._ignored(name_node, options):
                if not _SNAKE_CASE.match(name_node.get("value", "")):
                    violations.append(self._report(context, name_node, kind, "snake_case"))
            return violations

        if not node.children:
            return violations
        in_function: bool = any(a.kind == "FunctionDef" for a in context.ancestors)
        allow_upper: bool = options.allow_upper_constants and not in_function
        for name_node in _bound_names(node.children[0]):
            value: str = name_node.get("value", "")
            if self._ignored(name_node, options) or _SNAKE_CASE.match(value):
                continue
            if allow_upper and _UPPER_CASE.match(value):
                continue
            violations.append(self._report(context, name_node, "Variable", "snake_case"))
        return violations

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None

    def _ignored(self, name_node: Node, options: NamingConventionOptions) -> bool:
        return name_node.get("value") in options.ignore_names

    def _report(self, context: CheckContext, name_node: Node, what: str, style: str) -> Violation:
        return context.violation(
            span=name_node.span,
            message=f"{what} name '{name_node.get('value')}' should be {style}",
        )
