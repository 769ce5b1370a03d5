"""Matcher/traversal engine: one pre-order walk per file, rules dispatched by kind."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from styleguard.constants import PARSE_ERROR_ID, RULE_CRASH_ID, Language, Severity
from styleguard.context import CheckContext, Scope
from styleguard.diagnostics import FileReport, Violation, aggregate
from styleguard.parser import ParseErrorInfo, ParseResult
from styleguard.rules.base import Rule
from styleguard.syntax import Node, SourceLocation, SourceText, Span, make_node
from styleguard.types import RuleCrashError, StyleGuardConfig

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Finding:
    """A violation together with what produced it, so it can be fixed later."""

    rule: Rule
    node: Node
    context: CheckContext
    violation: Violation


def match_tree(
    *,
    parse_result: ParseResult,
    rules: list[Rule],
    config: StyleGuardConfig,
) -> list[Finding]:
    """Walk the tree in document order and collect every rule's findings."""
    tree: Node | None = parse_result.tree
    if tree is None:
        return []

    dispatch: dict[str, list[Rule]] = _dispatch_table(rules, parse_result.language)
    document: Scope = Scope(node=make_node("document", 0, len(parse_result.text)))
    findings: list[Finding] = []

    stack: list[tuple[Node, Scope]] = [(tree, document)]
    while stack:
        node: Node
        scope: Scope
        node, scope = stack.pop()
        for rule in dispatch.get(node.kind, ()):
            findings.extend(
                _run_check(
                    rule=rule,
                    node=node,
                    scope=scope,
                    parse_result=parse_result,
                    config=config,
                )
            )
        if node.children:
            child_scope: Scope = scope.enter(node)
            stack.extend((child, child_scope) for child in reversed(node.children))

    logger.debug("%s: %d findings", parse_result.file, len(findings))
    return findings


def check_parsed(
    *,
    parse_result: ParseResult,
    rules: list[Rule],
    config: StyleGuardConfig,
) -> tuple[FileReport, list[Finding]]:
    """Match and aggregate one parsed file."""
    if parse_result.parse_error is not None:
        return parse_error_report(parse_result=parse_result), []
    findings: list[Finding] = match_tree(parse_result=parse_result, rules=rules, config=config)
    report: FileReport = aggregate(
        file=parse_result.file,
        violations=[f.violation for f in findings],
        config=config,
    )
    return report, findings


def parse_error_report(*, parse_result: ParseResult) -> FileReport:
    """Report holding the single synthetic violation for an unparsable file."""
    error: ParseErrorInfo | None = parse_result.parse_error
    if error is None:
        raise ValueError("parse_result must have a parse_error")
    span: Span = Span(error.offset, error.offset)
    return FileReport(
        file=parse_result.file,
        violations=(
            Violation(
                rule_id=PARSE_ERROR_ID,
                file=parse_result.file,
                span=span,
                location=error.location,
                message=error.message,
                severity=Severity.ERROR,
                fixable=False,
                source_line=error.source_line,
            ),
        ),
    )


def failure_report(*, file: Path, message: str) -> FileReport:
    """Report for a file whose processing failed outside any single rule."""
    return FileReport(
        file=file,
        violations=(
            Violation(
                rule_id=RULE_CRASH_ID,
                file=file,
                span=Span(0, 0),
                location=SourceLocation(line=1, column=1),
                message=message,
                severity=Severity.ERROR,
                fixable=False,
            ),
        ),
    )


def _dispatch_table(rules: list[Rule], language: Language) -> dict[str, list[Rule]]:
    table: dict[str, list[Rule]] = defaultdict(list)
    for rule in rules:
        if language not in rule.info.languages:
            continue
        for kind in sorted(rule.info.kinds):
            table[kind].append(rule)
    return table


def _run_check(
    *,
    rule: Rule,
    node: Node,
    scope: Scope,
    parse_result: ParseResult,
    config: StyleGuardConfig,
) -> list[Finding]:
    context: CheckContext = CheckContext(
        file=parse_result.file,
        text=parse_result.text,
        scope=scope,
        rule=rule.info,
        options=config.options_for(rule.info.id),
    )
    try:
        if not rule.matches(node):
            return []
        violations: list[Violation] = list(rule.check(node, context))
    except Exception as e:
        error: RuleCrashError = RuleCrashError(rule.info.id, node_kind=node.kind, cause=e)
        logger.warning("%s: %s", parse_result.file, error)
        logger.debug("Traceback for %s", rule.info.id, exc_info=True)
        return [_crash_finding(rule, node, context, str(error))]

    findings: list[Finding] = []
    for violation in violations:
        if violation.span.end > len(parse_result.text):
            message: str = (
                f"{rule.info.id} reported span [{violation.span.start}, "
                f"{violation.span.end}) outside the file"
            )
            logger.warning("%s: %s", parse_result.file, message)
            findings.append(_crash_finding(rule, node, context, message))
            continue
        findings.append(Finding(rule=rule, node=node, context=context, violation=violation))
    return findings


def _crash_finding(rule: Rule, node: Node, context: CheckContext, message: str) -> Finding:
    text: SourceText = context.text
    span: Span = Span(min(node.span.start, len(text)), min(node.span.end, len(text)))
    location = text.span_location(span)
    return Finding(
        rule=rule,
        node=node,
        context=context,
        violation=Violation(
            rule_id=RULE_CRASH_ID,
            file=context.file,
            span=span,
            location=location,
            message=message,
            severity=Severity.ERROR,
            fixable=False,
            source_line=text.line_text(location.line),
        ),
    )
