"""python.import-grouping: ordered, alphabetised, blank-separated import groups."""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Final

from styleguard.constants import Language, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node, SourceText, Span
from styleguard.types import ImportGroupingOptions

_STDLIB_MODULES: Final[frozenset[str]] = frozenset(sys.stdlib_module_names)
_CODING_RE: Final[re.Pattern[str]] = re.compile(r"^[ \t\f]*#.*?coding[:=][ \t]*[-\w.]+")

FUTURE: Final[int] = 0
STDLIB: Final[int] = 1
THIRD_PARTY: Final[int] = 2
FRAMEWORK: Final[int] = 3
LOCAL: Final[int] = 4
GUARDED: Final[int] = 5

GROUP_LABELS: Final[dict[int, str]] = {
    FUTURE: "__future__",
    STDLIB: "standard library",
    THIRD_PARTY: "third-party",
    FRAMEWORK: "framework",
    LOCAL: "local",
    GUARDED: "try/except",
}

_IMPORT_GROUPING: Final[RuleInfo] = RuleInfo(
    id="python.import-grouping",
    name="Import Grouping",
    category="imports",
    languages=frozenset({Language.PYTHON}),
    kinds=frozenset({"Module"}),
    default_severity=Severity.ERROR,
    fixable=True,
    description=(
        "Module imports come in six groups separated by a blank line:\n"
        "__future__, standard library, third-party, framework (Django),\n"
        "local/relative, then try/except-guarded imports. Each group is\n"
        "sorted by full module path."
    ),
    bad_example="from django.http import Http404\nimport json",
    good_example="import json\n\nfrom django.http import Http404",
    fix_description="Rewrites the import block in group order, keeping attached comments.",
    config_options=(
        '[tool.styleguard.rules."python.import-grouping"]\n'
        'options = { framework_packages = ["django"], local_packages = ["myproject"] }'
    ),
)


@dataclass(frozen=True, slots=True)
class _Entry:
    """One statement of the module's leading import block."""

    node: Node
    group: int
    path: str
    key: tuple[str, int, str]
    first_line: int
    last_line: int
    chunk_start: int


def _is_import_line(node: Node) -> bool:
    return (
        node.kind == "SimpleStatementLine"
        and bool(node.children)
        and all(c.kind in ("Import", "ImportFrom") for c in node.children)
    )


def _guarded_imports(node: Node) -> list[Node] | None:
    """Import nodes of a try statement whose body only imports, else None."""
    if node.kind != "Try":
        return None
    body: Node | None = node.child("IndentedBlock")
    if body is None or not body.children:
        return None
    if not all(_is_import_line(stmt) for stmt in body.children):
        return None
    return [imp for stmt in body.children for imp in stmt.children]


def _is_docstring(node: Node) -> bool:
    if node.kind != "SimpleStatementLine" or len(node.children) != 1:
        return False
    expr: Node = node.children[0]
    return expr.kind == "Expr" and any(
        c.kind in ("SimpleString", "ConcatenatedString") for c in expr.children
    )


def _import_path(node: Node) -> str:
    if node.kind == "ImportFrom":
        return "." * node.get("level", 0) + node.get("module", "")
    names: tuple[str, ...] = node.get("names", ())
    return names[0] if names else ""


def _classify(node: Node, options: ImportGroupingOptions) -> int:
    if node.kind == "ImportFrom":
        if node.get("level", 0) > 0:
            return LOCAL
        if node.get("module") == "__future__":
            return FUTURE
    top: str = _import_path(node).split(".")[0]
    if top in options.local_packages:
        return LOCAL
    if top in options.framework_packages:
        return FRAMEWORK
    if top in _STDLIB_MODULES:
        return STDLIB
    return THIRD_PARTY


def _sort_key(node: Node) -> tuple[str, int, str]:
    """Case-insensitive path, plain ``import`` first, uppercase first on ties."""
    path: str = _import_path(node)
    return (path.casefold(), 0 if node.kind == "Import" else 1, path)


def collect_import_block(
    module: Node,
    text: SourceText,
    options: ImportGroupingOptions,
) -> list[_Entry]:
    """Leading import statements of a module, in source order."""
    statements: list[Node] = list(module.children)
    if statements and _is_docstring(statements[0]):
        statements = statements[1:]

    entries: list[_Entry] = []
    for stmt in statements:
        imports: list[Node] | None
        group: int
        if _is_import_line(stmt):
            imports = list(stmt.children)
            group = _classify(imports[0], options)
        else:
            imports = _guarded_imports(stmt)
            if imports is None:
                break
            group = GUARDED

        first_line: int = text.line_of(stmt.span.start)
        last_line: int = text.line_of(max(stmt.span.start, stmt.span.end - 1))
        previous_last: int = entries[-1].last_line if entries else 0
        entries.append(
            _Entry(
                node=stmt,
                group=group,
                path=_import_path(imports[0]),
                key=_sort_key(imports[0]),
                first_line=first_line,
                last_line=last_line,
                chunk_start=_comment_start(
                    text,
                    first_line,
                    previous_last,
                    contiguous=not entries,
                ),
            )
        )
    return entries


def _comment_start(text: SourceText, first_line: int, floor: int, *, contiguous: bool) -> int:
    """First line of the comments a statement carries above it.

    Between two imports every comment line belongs to the next import; above
    the first import only an unbroken run of comment lines does.
    """
    start: int = first_line
    line: int = first_line - 1
    while line > floor:
        stripped: str = text.line_text(line).strip()
        if _is_file_header(text, line):
            break
        if stripped.startswith("#"):
            start = line
        elif stripped or contiguous:
            break
        line -= 1
    return start


def _is_file_header(text: SourceText, line: int) -> bool:
    """Shebang or encoding declaration, which must stay at the top of the file."""
    line_text: str = text.line_text(line)
    if line == 1 and line_text.startswith("#!"):
        return True
    return line <= 2 and _CODING_RE.match(line_text) is not None


def _has_blank_line(text: SourceText, after: int, before: int) -> bool:
    return any(not text.line_text(line).strip() for line in range(after + 1, before))


class ImportGroupingRule:
    """Flag import statements out of group order or out of alphabetical order."""

    @property
    def info(self) -> RuleInfo:
        return _IMPORT_GROUPING

    def matches(self, node: Node) -> bool:
        return node.kind == "Module"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        options: ImportGroupingOptions = context.options
        entries: list[_Entry] = collect_import_block(node, context.text, options)

        violations: list[Violation] = []
        highest: _Entry | None = None
        previous: _Entry | None = None
        for entry in entries:
            if highest is not None and (entry.group, entry.key) < (highest.group, highest.key):
                violations.append(
                    context.violation(span=entry.node.span, message=_order_message(entry, highest))
                )
            else:
                if (
                    previous is not None
                    and previous.group != entry.group
                    and not _has_blank_line(context.text, previous.last_line, entry.first_line)
                ):
                    violations.append(
                        context.violation(
                            span=entry.node.span,
                            message=(
                                f"Missing blank line between {GROUP_LABELS[previous.group]} "
                                f"and {GROUP_LABELS[entry.group]} imports"
                            ),
                        )
                    )
                highest = entry
            previous = entry
        return violations

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        text: SourceText = context.text
        entries: list[_Entry] = collect_import_block(node, text, context.options)
        if len(entries) < 2:
            return None
        for earlier, later in zip(entries, entries[1:]):
            if later.first_line <= earlier.last_line:
                # Two statements share a line; whole-line chunks cannot separate them.
                return None

        start: int = text.line_start(entries[0].chunk_start)
        end: int = text.line_end(entries[-1].last_line, keepends=True)
        original: str = text.text[start:end]

        groups: list[str] = []
        current_group: int | None = None
        for entry in sorted(entries, key=lambda e: (e.group, e.key)):
            chunk: str = _chunk_text(text, entry)
            if entry.group != current_group:
                groups.append(chunk)
                current_group = entry.group
            else:
                groups[-1] += chunk
        replacement: str = text.newline.join(groups)
        if not original.endswith("\n"):
            replacement = replacement[:-len(text.newline)]

        if replacement == original:
            return None
        return Edit(span=Span(start, end), replacement=replacement, rule_id=self.info.id)


def _chunk_text(text: SourceText, entry: _Entry) -> str:
    lines: list[str] = [
        text.line_text(line) + text.newline
        for line in range(entry.chunk_start, entry.first_line)
        if text.line_text(line).strip()
    ]
    lines.extend(
        text.line_text(line) + text.newline
        for line in range(entry.first_line, entry.last_line + 1)
    )
    return "".join(lines)


def _order_message(entry: _Entry, highest: _Entry) -> str:
    if entry.group < highest.group:
        return (
            f"{GROUP_LABELS[entry.group].capitalize()} import '{entry.path}' should come "
            f"before {GROUP_LABELS[highest.group]} imports"
        )
    return (
        f"Import '{entry.path}' is not alphabetized within "
        f"{GROUP_LABELS[entry.group]} imports (should come before '{highest.path}')"
    )
