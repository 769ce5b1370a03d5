"""Violation data model and per-file aggregation for styleguard."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path

from styleguard.constants import INTERNAL_IDS, Severity
from styleguard.syntax import SourceLocation, Span
from styleguard.types import StyleGuardConfig


@dataclass(frozen=True, slots=True)
class Violation:
    """A single reported instance of a rule's condition."""

    rule_id: str
    file: Path
    span: Span
    location: SourceLocation
    message: str
    severity: Severity
    fixable: bool = False
    source_line: str | None = None

    @property
    def key(self) -> tuple[str, Span]:
        """Identity used for deduplication."""
        return (self.rule_id, self.span)


@dataclass(frozen=True, slots=True)
class Edit:
    """A textual replacement over a span, produced by a fixer."""

    span: Span
    replacement: str
    rule_id: str = ""


def _report_order(violation: Violation) -> tuple[int, str, int, str]:
    return (
        violation.span.start,
        violation.rule_id,
        violation.span.end,
        violation.message,
    )


@dataclass(frozen=True, slots=True)
class FileReport:
    """Ordered violations for one file."""

    file: Path
    violations: tuple[Violation, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(v.severity == Severity.ERROR for v in self.violations)

    def __len__(self) -> int:
        return len(self.violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)


def aggregate(
    *,
    file: Path,
    violations: Iterable[Violation],
    config: StyleGuardConfig,
) -> FileReport:
    """Dedupe, filter by config, apply severity overrides and sort.

    The first violation seen for a ``(rule_id, span)`` pair wins, so the
    result only depends on traversal order, never on scheduling.
    """
    seen: set[tuple[str, Span]] = set()
    kept: list[Violation] = []
    for violation in violations:
        if violation.key in seen:
            continue
        seen.add(violation.key)
        if violation.rule_id in INTERNAL_IDS:
            kept.append(violation)
            continue
        if not config.is_rule_enabled(violation.rule_id):
            continue
        severity: Severity = config.get_severity(violation.rule_id)
        if severity != violation.severity:
            violation = replace(violation, severity=severity)
        kept.append(violation)

    return FileReport(file=file, violations=tuple(sorted(kept, key=_report_order)))


@dataclass(slots=True)
class DiagnosticCollection:
    """Mutable collection of violations across files with counting."""

    _violations: list[Violation] = field(default_factory=list)

    def add(self, *, violation: Violation) -> None:
        """Add a single violation."""
        self._violations.append(violation)

    def add_all(self, *, violations: Iterable[Violation]) -> None:
        """Add multiple violations."""
        self._violations.extend(violations)

    @property
    def has_errors(self) -> bool:
        """Return True if any violation has ERROR severity."""
        return any(v.severity == Severity.ERROR for v in self._violations)

    @property
    def error_count(self) -> int:
        """Count of ERROR severity violations."""
        return sum(1 for v in self._violations if v.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of WARNING severity violations."""
        return sum(1 for v in self._violations if v.severity == Severity.WARNING)

    def __len__(self) -> int:
        return len(self._violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self._violations)
