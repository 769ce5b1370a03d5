"""Django model layout rules: python.model-meta-position, python.related-name-required."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from styleguard.constants import Language, Severity
from styleguard.context import CheckContext
from styleguard.diagnostics import Edit, Violation
from styleguard.rules.base import RuleInfo
from styleguard.syntax import Node, SourceText, Span
from styleguard.types import ModelMetaOptions, RelatedNameOptions

_MODEL_META_POSITION: Final[RuleInfo] = RuleInfo(
    id="python.model-meta-position",
    name="Model Meta Position",
    category="django",
    languages=frozenset({Language.PYTHON}),
    kinds=frozenset({"ClassDef"}),
    default_severity=Severity.WARNING,
    fixable=True,
    description=(
        "The inner Meta class comes right after the last field\n"
        "declaration, separated from it by exactly one blank line."
    ),
    bad_example="class A(models.Model):\n    class Meta: ...\n    name = models.CharField()",
    good_example="class A(models.Model):\n    name = models.CharField()\n\n    class Meta: ...",
    fix_description="Moves Meta below the last field and normalises the blank line.",
    config_options=(
        '[tool.styleguard.rules."python.model-meta-position"]\n'
        'options = { meta_class_names = ["Meta"] }'
    ),
)

_RELATED_NAME_REQUIRED: Final[RuleInfo] = RuleInfo(
    id="python.related-name-required",
    name="Related Name Required",
    category="django",
    languages=frozenset({Language.PYTHON}),
    kinds=frozenset({"Call"}),
    default_severity=Severity.ERROR,
    fixable=False,
    description=(
        "Relation fields always spell out the reverse accessor with\n"
        "related_name instead of relying on the generated <model>_set."
    ),
    bad_example="author = models.ForeignKey(User, on_delete=models.CASCADE)",
    good_example=(
        "author = models.ForeignKey(User, on_delete=models.CASCADE, "
        "related_name='books')"
    ),
    config_options=(
        '[tool.styleguard.rules."python.related-name-required"]\n'
        'options = { field_types = ["ForeignKey", "ManyToManyField", "OneToOneField"] }'
    ),
)


@dataclass(frozen=True, slots=True)
class _Layout:
    """Line numbers of the last field and the Meta class inside a class body."""

    meta: Node
    meta_index: int
    field_index: int
    field_last_line: int
    meta_first_line: int
    meta_last_line: int
    meta_chunk_start: int


def _is_field(stmt: Node) -> bool:
    return stmt.kind == "SimpleStatementLine" and bool(stmt.children) and (
        stmt.children[0].kind in ("Assign", "AnnAssign")
    )


def _first_line(node: Node, text: SourceText) -> int:
    starts: list[int] = [node.span.start]
    starts.extend(d.span.start for d in node.children_of("Decorator"))
    return text.line_of(min(starts))


def _last_line(node: Node, text: SourceText) -> int:
    return text.line_of(max(node.span.start, node.span.end - 1))


def _layout(node: Node, text: SourceText, options: ModelMetaOptions) -> _Layout | None:
    body: Node | None = node.child("IndentedBlock")
    if body is None:
        return None
    statements: tuple[Node, ...] = body.children

    meta_index: int | None = None
    field_index: int | None = None
    for index, stmt in enumerate(statements):
        if stmt.kind == "ClassDef" and stmt.get("name") in options.meta_class_names:
            if meta_index is None:
                meta_index = index
        elif _is_field(stmt):
            field_index = index
    if meta_index is None or field_index is None:
        return None

    meta: Node = statements[meta_index]
    meta_first: int = _first_line(meta, text)
    chunk_start: int = meta_first
    while chunk_start > 1 and text.line_text(chunk_start - 1).strip().startswith("#"):
        chunk_start -= 1
    return _Layout(
        meta=meta,
        meta_index=meta_index,
        field_index=field_index,
        field_last_line=_last_line(statements[field_index], text),
        meta_first_line=meta_first,
        meta_last_line=_last_line(meta, text),
        meta_chunk_start=chunk_start,
    )


def _strip_blank_lines(block: str, newline: str) -> str:
    lines: list[str] = block.splitlines(keepends=True)
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    result: str = "".join(lines)
    if result and not result.endswith("\n"):
        result += newline
    return result


class ModelMetaPositionRule:
    """Flag a Meta class that does not directly follow the last field."""

    @property
    def info(self) -> RuleInfo:
        return _MODEL_META_POSITION

    def matches(self, node: Node) -> bool:
        return node.kind == "ClassDef"

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        layout: _Layout | None = _layout(node, context.text, context.options)
        if layout is None:
            return []
        name: str = layout.meta.get("name", "Meta")
        message: str | None = None
        if layout.meta_index != layout.field_index + 1:
            message = f"{name} should come right after the last field declaration"
        elif not self._single_blank_separator(layout, context.text):
            message = f"{name} should be separated from the last field by one blank line"
        if message is None:
            return []
        name_node: Node | None = layout.meta.child("Name")
        span: Span = name_node.span if name_node is not None else layout.meta.span
        return [context.violation(span=span, message=message)]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        text: SourceText = context.text
        layout: _Layout | None = _layout(node, text, context.options)
        if layout is None:
            return None
        meta_start: int = text.line_start(layout.meta_chunk_start)
        meta_end: int = text.line_end(layout.meta_last_line, keepends=True)
        meta_text: str = text.text[meta_start:meta_end]
        if not meta_text.endswith("\n"):
            meta_text += text.newline
        field_end: int = text.line_end(layout.field_last_line, keepends=True)

        if layout.meta_index < layout.field_index:
            following: str = _strip_blank_lines(text.text[meta_end:field_end], text.newline)
            return Edit(
                span=Span(meta_start, field_end),
                replacement=following + text.newline + meta_text,
                rule_id=self.info.id,
            )

        if layout.meta_index > layout.field_index + 1:
            between: str = _strip_blank_lines(text.text[field_end:meta_start], text.newline)
            return Edit(
                span=Span(field_end, meta_end),
                replacement=text.newline + meta_text + text.newline + between,
                rule_id=self.info.id,
            )

        if layout.meta_chunk_start <= layout.field_last_line:
            return None
        gap: Span = Span(field_end, meta_start)
        if text.slice(gap).strip():
            return None
        return Edit(span=gap, replacement=text.newline, rule_id=self.info.id)

    def _single_blank_separator(self, layout: _Layout, text: SourceText) -> bool:
        gap: range = range(layout.field_last_line + 1, layout.meta_chunk_start)
        return len(gap) == 1 and not text.line_text(gap[0]).strip()


class RelatedNameRequiredRule:
    """Flag relation fields declared without ``related_name``."""

    @property
    def info(self) -> RuleInfo:
        return _RELATED_NAME_REQUIRED

    def matches(self, node: Node) -> bool:
        return node.kind == "Call" and bool(node.get("func"))

    def check(self, node: Node, context: CheckContext) -> list[Violation]:
        options: RelatedNameOptions = context.options
        func: str = node.get("func") or ""
        field_type: str = func.rsplit(".", 1)[-1]
        if field_type not in options.field_types:
            return []
        if "related_name" in node.get("keywords", ()):
            return []
        return [
            context.violation(
                span=node.span,
                message=f"{field_type} must declare related_name",
            )
        ]

    def fix(self, violation: Violation, node: Node, context: CheckContext) -> Edit | None:
        return None
