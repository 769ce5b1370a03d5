"""Edit selection, application and the bounded fix loop."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from styleguard.constants import Language
from styleguard.diagnostics import Edit, FileReport
from styleguard.engine import Finding, check_parsed
from styleguard.parser import ParseResult, parse_source
from styleguard.rules.base import Rule
from styleguard.syntax import SourceText, Span
from styleguard.types import EditConflictError, RuleCrashError, StyleGuardConfig

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FixOutcome:
    """Result of fixing one source text.

    ``report`` always describes ``source`` as parsed from scratch.
    """

    source: str
    report: FileReport
    iterations: int
    edits_applied: int
    converged: bool


def _edit_order(edit: Edit) -> tuple[int, int, str]:
    return (edit.span.start, edit.span.end, edit.rule_id)


def select_edits(edits: Iterable[Edit]) -> list[Edit]:
    """Pick a non-overlapping subset, earliest first.

    Ties are broken by end offset, then rule id, so the choice does not
    depend on the order fixers ran in.
    """
    selected: list[Edit] = []
    for edit in sorted(edits, key=_edit_order):
        if any(edit.span.overlaps(kept.span) for kept in selected):
            logger.debug(
                "Skipping %s edit at [%d, %d): overlaps a selected edit",
                edit.rule_id, edit.span.start, edit.span.end,
            )
            continue
        selected.append(edit)
    return selected


def apply_edits(source: str, edits: Iterable[Edit]) -> str:
    """Apply non-overlapping edits to ``source``.

    Raises:
        EditConflictError: If two edits overlap.
        ValueError: If an edit reaches past the end of the source.
    """
    ordered: list[Edit] = sorted(edits, key=_edit_order)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.span.overlaps(current.span):
            raise EditConflictError(
                f"{previous.rule_id or 'edit'} at [{previous.span.start}, "
                f"{previous.span.end}) overlaps {current.rule_id or 'edit'} at "
                f"[{current.span.start}, {current.span.end})"
            )

    result: str = source
    for edit in reversed(ordered):
        if edit.span.end > len(source):
            raise ValueError(
                f"edit span [{edit.span.start}, {edit.span.end}) is outside the source"
            )
        result = result[:edit.span.start] + edit.replacement + result[edit.span.end:]
    return result


def fix_source(
    *,
    file: Path,
    source: str,
    language: Language,
    rules: list[Rule],
    config: StyleGuardConfig,
) -> FixOutcome:
    """Fix ``source`` until no selectable edits remain or the iteration bound is hit.

    Every candidate is re-parsed; one that no longer parses is discarded and
    the last good source is kept.
    """
    current: str = source
    parse_result: ParseResult = parse_source(file=file, source=current, language=language)
    report: FileReport
    findings: list[Finding]
    report, findings = check_parsed(parse_result=parse_result, rules=rules, config=config)

    iterations: int = 0
    edits_applied: int = 0
    converged: bool = False
    while True:
        selected: list[Edit] = select_edits(
            _fix_edits(file=file, findings=findings, report=report, text=parse_result.text)
        )
        if not selected:
            converged = True
            break
        if iterations >= config.max_fix_iterations:
            logger.warning(
                "%s: fixes did not settle after %d iterations", file, iterations,
            )
            break

        candidate: str = apply_edits(current, selected)
        iterations += 1
        reparsed: ParseResult = parse_source(file=file, source=candidate, language=language)
        if reparsed.parse_error is not None:
            logger.warning(
                "%s: discarding fixes that break parsing (%s)",
                file, reparsed.parse_error.message,
            )
            break

        current = candidate
        parse_result = reparsed
        edits_applied += len(selected)
        report, findings = check_parsed(parse_result=parse_result, rules=rules, config=config)
        logger.debug(
            "%s: fix iteration %d applied %d edits, %d diagnostics remain",
            file, iterations, len(selected), len(report),
        )

    return FixOutcome(
        source=current,
        report=report,
        iterations=iterations,
        edits_applied=edits_applied,
        converged=converged,
    )


def _fix_edits(
    *,
    file: Path,
    findings: list[Finding],
    report: FileReport,
    text: SourceText,
) -> list[Edit]:
    """Ask each rule to fix the fixable violations that survived aggregation."""
    wanted: set[tuple[str, Span]] = {v.key for v in report if v.fixable}
    seen: set[tuple[str, Span]] = set()
    edits: list[Edit] = []

    for finding in findings:
        key: tuple[str, Span] = finding.violation.key
        if key not in wanted or key in seen:
            continue
        seen.add(key)
        try:
            edit: Edit | None = finding.rule.fix(
                finding.violation, finding.node, finding.context,
            )
        except Exception as e:
            error: RuleCrashError = RuleCrashError(
                finding.rule.info.id, node_kind=finding.node.kind, cause=e,
            )
            logger.warning("%s: %s", file, error)
            logger.debug("Traceback for %s fix", finding.rule.info.id, exc_info=True)
            continue
        if edit is None:
            continue
        if edit.span.end > len(text) or text.slice(edit.span) == edit.replacement:
            continue
        edits.append(edit)
    return edits
