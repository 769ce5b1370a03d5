"""Tests for the styleguard explain command."""
from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from styleguard.cli import cli
from styleguard.constants import RULE_IDS
from styleguard.explain import format_rule_detail, format_rule_table
from styleguard.rules.base import Rule
from styleguard.rules.registry import all_rules, get_rule


class TestExplainSingleRule:
    """Test explain for a single rule."""

    def test_explain_nesting_depth(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["explain", "css.nesting-depth"])

        assert result.exit_code == 0
        assert "css.nesting-depth: Nesting Depth" in result.output
        assert "Category: structure" in result.output
        assert "Languages: css, scss" in result.output
        assert "Severity: error" in result.output
        assert "Autofix: No" in result.output
        assert "Bad:" in result.output
        assert "Good:" in result.output
        assert "max_depth" in result.output

    def test_explain_fixable_rule_shows_fix(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["explain", "css.zero-unit"])

        assert result.exit_code == 0
        assert "Autofix: Yes" in result.output
        assert "Fix:" in result.output

    def test_explain_uppercase_id(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["explain", "PYTHON.QUOTE-STYLE"])

        assert result.exit_code == 0
        assert "python.quote-style: Quote Style" in result.output

    def test_explain_reflects_configured_severity(self, temp_pyproject: Path) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(temp_pyproject), "explain", "css.bem-class-name"],
        )

        assert result.exit_code == 0
        assert "Severity: off" in result.output

    def test_explain_unknown_rule_exits_2(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["explain", "css.fake"])

        assert result.exit_code == 2
        assert "Unknown rule id" in result.output


class TestExplainAll:
    """Test explain --all listing."""

    def test_all_lists_all_rules(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["explain", "--all"])

        assert result.exit_code == 0
        for rule_id in RULE_IDS:
            assert rule_id in result.output

    def test_all_shows_table_header(self) -> None:
        output: str = format_rule_table(
            rules=[rule.info for rule in all_rules()], severities={},
        )
        header: str = output.splitlines()[0]
        for column in ("RULE", "SEVERITY", "NAME", "FIX"):
            assert column in header

    def test_missing_severity_shown_as_off(self) -> None:
        output: str = format_rule_table(
            rules=[get_rule("css.no-extend").info], severities={},
        )
        assert output.splitlines()[2].split()[:2] == ["css.no-extend", "off"]


class TestRuleDetail:
    """Test single-rule rendering."""

    def test_multiline_examples_are_indented(self) -> None:
        output: str = format_rule_detail(
            info=get_rule("python.model-meta-position").info, severity="warning",
        )
        lines: list[str] = output.splitlines()
        bad_index: int = next(i for i, line in enumerate(lines) if line.startswith("  Bad: "))
        assert lines[bad_index + 1].startswith("         ")


class TestRuleMetadataCoverage:
    """Test that every registered rule documents itself."""

    @pytest.mark.parametrize("rule", all_rules(), ids=lambda rule: rule.info.id)
    def test_rule_has_documentation(self, rule: Rule) -> None:
        assert rule.info.name
        assert rule.info.description
        assert rule.info.bad_example
        assert rule.info.good_example
        if rule.info.fixable:
            assert rule.info.fix_description
