"""Output formatters for styleguard reports."""
from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Protocol

from styleguard.constants import OutputFormat
from styleguard.diagnostics import DiagnosticCollection, FileReport, Violation


class Formatter(Protocol):
    def format(self, *, reports: Sequence[FileReport]) -> str: ...


class TextFormatter:
    def format(self, *, reports: Sequence[FileReport]) -> str:
        lines: list[str] = []

        for report in sorted(reports, key=lambda r: str(r.file)):
            for violation in report:
                lines.append(
                    f"{violation.file}:{violation.location.line}:"
                    f"{violation.location.column} [{violation.severity.value}] "
                    f"{violation.rule_id} {violation.message}"
                )

        return "\n".join(lines)


class JsonFormatter:
    def format(self, *, reports: Sequence[FileReport]) -> str:
        files: list[dict[str, Any]] = [
            {
                "path": str(report.file),
                "violations": [_violation_json(v) for v in report],
            }
            for report in sorted(reports, key=lambda r: str(r.file))
        ]
        return json.dumps({"files": files}, indent=2)


def _violation_json(violation: Violation) -> dict[str, Any]:
    return {
        "ruleId": violation.rule_id,
        "range": {
            "start": violation.span.start,
            "end": violation.span.end,
            "line": violation.location.line,
            "column": violation.location.column,
        },
        "severity": violation.severity.value,
        "message": violation.message,
        "fixable": violation.fixable,
    }


def get_formatter(*, output_format: OutputFormat) -> Formatter:
    if output_format == OutputFormat.JSON:
        return JsonFormatter()
    return TextFormatter()


def format_summary(*, diagnostics: DiagnosticCollection) -> str:
    error_count: int = diagnostics.error_count
    warning_count: int = diagnostics.warning_count

    parts: list[str] = []
    if error_count > 0:
        parts.append(f"{error_count} error{'s' if error_count != 1 else ''}")
    if warning_count > 0:
        parts.append(f"{warning_count} warning{'s' if warning_count != 1 else ''}")

    if not parts:
        return "No issues found."

    return f"Found {', '.join(parts)}."
