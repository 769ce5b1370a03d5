"""Rule documentation rendering for the styleguard explain command."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from styleguard.rules.base import RuleInfo


def format_rule_detail(*, info: RuleInfo, severity: str) -> str:
    """Format a single rule's full documentation."""
    languages: str = ", ".join(sorted(lang.value for lang in info.languages))
    lines: list[str] = [
        f"{info.id}: {info.name}",
        f"Category: {info.category} | Languages: {languages}"
        f" | Severity: {severity} | Autofix: {'Yes' if info.fixable else 'No'}",
        "",
    ]
    lines.extend(f"  {line}" for line in info.description.splitlines())

    lines.append("")
    for label, example in (("Bad: ", info.bad_example), ("Good:", info.good_example)):
        example_lines: list[str] = example.splitlines()
        lines.append(f"  {label} {example_lines[0]}")
        lines.extend(f"         {line}" for line in example_lines[1:])

    if info.fix_description:
        lines.extend(["", f"  Fix: {info.fix_description}"])

    if info.config_options:
        option_lines: list[str] = info.config_options.splitlines()
        lines.extend(["", f"  Config: {option_lines[0]}"])
        lines.extend(f"          {line}" for line in option_lines[1:])

    return "\n".join(lines)


def format_rule_table(*, rules: Sequence[RuleInfo], severities: Mapping[str, str]) -> str:
    """Format all rules as a summary table."""
    lines: list[str] = [
        f"{'RULE':<30} {'SEVERITY':<10} {'NAME':<28} {'FIX':<4}",
        "-" * 75,
    ]
    for info in sorted(rules, key=lambda i: i.id):
        severity: str = severities.get(info.id, "off")
        fix_marker: str = "Yes" if info.fixable else "-"
        lines.append(f"{info.id:<30} {severity:<10} {info.name:<28} {fix_marker:<4}")
    return "\n".join(lines)
