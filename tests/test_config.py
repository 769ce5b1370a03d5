"""Tests for styleguard configuration system."""
from __future__ import annotations

import os
from pathlib import Path

import pytest

from styleguard.config import ConfigLoader, load_config
from styleguard.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDES,
    DEFAULT_SEVERITIES,
    OutputFormat,
    QuoteStyle,
    Severity,
)
from styleguard.types import (
    ConfigError,
    ImportGroupingOptions,
    NestingDepthOptions,
    StyleGuardConfig,
)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_has_expected_values(self) -> None:
        config: StyleGuardConfig = StyleGuardConfig()

        assert config.include == DEFAULT_INCLUDES
        assert config.exclude == DEFAULT_EXCLUDES
        assert config.output_format == OutputFormat.TEXT
        assert config.jobs is None
        assert config.max_fix_iterations == 10
        assert config.config_path is None
        assert config.selected is None

    def test_default_severities_are_correct(self) -> None:
        config: StyleGuardConfig = StyleGuardConfig()

        assert {rid: config.get_severity(rid) for rid in config.rules} == DEFAULT_SEVERITIES
        assert config.get_severity("css.no-id-selector") == Severity.ERROR
        assert config.get_severity("css.zero-unit") == Severity.WARNING

    def test_every_rule_enabled_by_default(self) -> None:
        config: StyleGuardConfig = StyleGuardConfig()

        assert all(config.is_rule_enabled(rid) for rid in DEFAULT_SEVERITIES)
        assert config.is_rule_enabled("css.unknown") is False

    def test_default_rule_options(self) -> None:
        config: StyleGuardConfig = StyleGuardConfig()

        nesting: NestingDepthOptions = config.options_for("css.nesting-depth")
        assert nesting.max_depth == 3
        assert nesting.count_conditional_wrappers is False
        imports: ImportGroupingOptions = config.options_for("python.import-grouping")
        assert imports.framework_packages == ("django",)
        assert config.options_for("python.quote-style").preferred == QuoteStyle.SINGLE


class TestRuleSelection:
    """Test --rules style selection."""

    def test_selection_limits_enabled_rules(self) -> None:
        config: StyleGuardConfig = StyleGuardConfig().with_selection(("css.zero-unit",))

        assert config.is_rule_enabled("css.zero-unit")
        assert not config.is_rule_enabled("css.no-id-selector")

    def test_unknown_rule_rejected(self) -> None:
        with pytest.raises(ConfigError, match="css.nope"):
            StyleGuardConfig().with_selection(("css.zero-unit", "css.nope"))


class TestConfigLoading:
    """Test configuration loading from files."""

    def test_load_from_pyproject(self, temp_pyproject: Path) -> None:
        config: StyleGuardConfig = ConfigLoader.load(temp_pyproject)

        assert config.config_path == temp_pyproject
        assert config.include == ("src/**/*.scss", "src/**/*.py")
        assert config.exclude == ("**/migrations/**",)
        assert config.output_format == OutputFormat.JSON
        assert config.jobs == 2
        assert config.max_fix_iterations == 5

    def test_rule_settings_from_pyproject(self, temp_pyproject: Path) -> None:
        config: StyleGuardConfig = ConfigLoader.load(temp_pyproject)

        assert config.get_severity("css.zero-unit") == Severity.ERROR
        assert not config.is_rule_enabled("css.bem-class-name")
        assert config.get_severity("css.nesting-depth") == Severity.WARNING
        assert config.options_for("css.nesting-depth") == NestingDepthOptions(
            max_depth=4, count_conditional_wrappers=True,
        )
        assert config.options_for("python.import-grouping") == ImportGroupingOptions(
            framework_packages=("django", "rest_framework"), local_packages=("shop",),
        )
        assert not config.is_rule_enabled("python.quote-style")
        assert config.options_for("python.quote-style").preferred == QuoteStyle.DOUBLE

    def test_untouched_rules_keep_defaults(self, temp_pyproject: Path) -> None:
        config: StyleGuardConfig = ConfigLoader.load(temp_pyproject)

        assert config.get_severity("css.no-id-selector") == Severity.ERROR
        assert config.is_rule_enabled("python.naming-convention")

    def test_load_standalone_file(self, standalone_config: Path) -> None:
        config: StyleGuardConfig = ConfigLoader.load(standalone_config)

        assert config.include == ("**/*.css",)
        assert config.get_severity("css.no-id-selector") == Severity.WARNING

    def test_empty_pyproject_uses_defaults(self, empty_pyproject: Path) -> None:
        config: StyleGuardConfig = ConfigLoader.load(empty_pyproject)

        assert config.include == DEFAULT_INCLUDES
        assert config.config_path == empty_pyproject

    def test_invalid_toml_raises_error(self, invalid_toml: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid TOML") as exc_info:
            ConfigLoader.load(invalid_toml)
        assert exc_info.value.path == invalid_toml

    def test_missing_file_raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config file"):
            ConfigLoader.load(tmp_path / "missing.toml")

    def test_load_config_convenience(self, temp_pyproject: Path) -> None:
        assert load_config(temp_pyproject).jobs == 2


class TestConfigValidation:
    """Test that every problem in a file is reported together."""

    def test_all_errors_collected(self, invalid_rules_pyproject: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(invalid_rules_pyproject)

        message: str = str(exc_info.value)
        assert message.startswith("Configuration errors:")
        assert "jobs must be a positive integer" in message
        assert "Unknown rule id: css.no-such-rule" in message
        assert "rules.css.nesting-depth.severity must be one of" in message
        assert "rules.css.nesting-depth.options.max_depth must be an integer" in message
        assert "unknown option 'wrappers'" in message
        assert "framework_packages and local_packages both list ['django']" in message

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ('output_format = "xml"', "output_format must be one of"),
            ("max_fix_iterations = 0", "max_fix_iterations must be a positive integer"),
            ("include = \"**/*.css\"", "include must be a list of strings"),
            ("colour = true", "Unknown keys: colour"),
            ('rules = { "css.zero-unit" = 3 }', "must be a table or a severity string"),
            ('rules = { "css.zero-unit" = { enabled = "yes" } }', "enabled must be a boolean"),
            ('rules = { "css.zero-unit" = { level = "error" } }', "unknown key 'level'"),
            (
                'rules = { "python.quote-style" = { options = { preferred = "backtick" } } }',
                "preferred must be one of",
            ),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, expected: str) -> None:
        path: Path = tmp_path / "styleguard.toml"
        path.write_text(body + "\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(path)
        assert expected in str(exc_info.value)

    def test_shorthand_off_disables_rule(self, tmp_path: Path) -> None:
        path: Path = tmp_path / "styleguard.toml"
        path.write_text('[rules]\n"css.no-extend" = "off"\n')

        assert not ConfigLoader.load(path).is_rule_enabled("css.no-extend")


class TestConfigDiscovery:
    """Test upward config file search."""

    def test_finds_pyproject_in_parent(self, temp_pyproject: Path) -> None:
        nested: Path = temp_pyproject.parent / "src" / "app"
        nested.mkdir(parents=True)

        assert ConfigLoader.find_config_file(nested) == temp_pyproject.resolve()

    def test_styleguard_toml_wins(self, temp_pyproject: Path) -> None:
        standalone: Path = temp_pyproject.parent / "styleguard.toml"
        standalone.write_text("")

        assert ConfigLoader.find_config_file(temp_pyproject.parent) == standalone.resolve()

    def test_load_searches_from_cwd(self, temp_pyproject: Path) -> None:
        original: str = os.getcwd()
        os.chdir(temp_pyproject.parent)
        try:
            config: StyleGuardConfig = ConfigLoader.load()
        finally:
            os.chdir(original)

        assert config.jobs == 2
