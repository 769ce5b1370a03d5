"""Configuration loading and validation for styleguard."""
from __future__ import annotations

import dataclasses
import logging
import tomllib
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final

from styleguard.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDES,
    DEFAULT_MAX_FIX_ITERATIONS,
    RULE_IDS,
    OutputFormat,
    Severity,
)
from styleguard.types import (
    RULE_OPTION_TYPES,
    ConfigError,
    RuleSettings,
    StyleGuardConfig,
    default_rule_settings,
)

logger: logging.Logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: Final[tuple[str, ...]] = ("styleguard.toml", "pyproject.toml")

_TOP_LEVEL_KEYS: Final[frozenset[str]] = frozenset({
    "include", "exclude", "output_format", "jobs", "max_fix_iterations", "rules",
})
_RULE_KEYS: Final[frozenset[str]] = frozenset({"enabled", "severity", "options"})


class ConfigLoader:
    """Loads and validates styleguard configuration."""

    @staticmethod
    def find_config_file(start_path: Path | None = None) -> Path | None:
        """
        Find a config file by walking up from start_path.

        In each directory ``styleguard.toml`` wins over ``pyproject.toml``.

        Args:
            start_path: Directory to start searching from. Defaults to cwd.

        Returns:
            Path to the config file if found, None otherwise.
        """
        if start_path is None:
            start_path = Path.cwd()

        start_path = start_path.resolve()

        for directory in [start_path, *start_path.parents]:
            for name in CONFIG_FILE_NAMES:
                config_path: Path = directory / name
                if config_path.is_file():
                    return config_path

        return None

    @staticmethod
    def load(path: Path | None = None) -> StyleGuardConfig:
        """
        Load configuration from a TOML file.

        ``pyproject.toml`` is read from its ``[tool.styleguard]`` table; any
        other file holds the same keys at top level.

        Args:
            path: Explicit config path. If None, searches upward.

        Returns:
            Validated StyleGuardConfig instance.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if path is None:
            path = ConfigLoader.find_config_file()

        if path is None:
            logger.debug("No config file found, using defaults")
            return StyleGuardConfig()

        try:
            with open(path, "rb") as f:
                data: dict[str, Any] = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML: {e}", path=path) from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}", path=path) from e

        logger.debug("Loading config from %s", path)
        tool_config: Any = (
            data.get("tool", {}).get("styleguard", {})
            if path.name == "pyproject.toml"
            else data
        )
        if not isinstance(tool_config, dict):
            raise ConfigError("[tool.styleguard] must be a table", path=path)

        return ConfigLoader._parse_config(tool_config, config_path=path)

    @staticmethod
    def _parse_config(
        data: dict[str, Any],
        *,
        config_path: Path | None = None,
    ) -> StyleGuardConfig:
        """Parse and validate configuration dictionary."""
        errors: list[str] = []

        unknown: list[str] = sorted(set(data) - _TOP_LEVEL_KEYS)
        if unknown:
            errors.append(f"Unknown keys: {', '.join(unknown)}")

        include: tuple[str, ...] = ConfigLoader._parse_patterns(
            data, "include", DEFAULT_INCLUDES, errors,
        )
        exclude: tuple[str, ...] = ConfigLoader._parse_patterns(
            data, "exclude", DEFAULT_EXCLUDES, errors,
        )

        output_format: OutputFormat = OutputFormat.TEXT
        if "output_format" in data:
            try:
                output_format = OutputFormat(data["output_format"])
            except ValueError:
                valid: list[str] = [f.value for f in OutputFormat]
                errors.append(f"output_format must be one of {valid}")

        jobs: int | None = data.get("jobs")
        if jobs is not None and (not _is_int(jobs) or jobs < 1):
            errors.append("jobs must be a positive integer")
            jobs = None

        max_fix_iterations: int = data.get("max_fix_iterations", DEFAULT_MAX_FIX_ITERATIONS)
        if not _is_int(max_fix_iterations) or max_fix_iterations < 1:
            errors.append("max_fix_iterations must be a positive integer")
            max_fix_iterations = DEFAULT_MAX_FIX_ITERATIONS

        rules: dict[str, RuleSettings] = ConfigLoader._parse_rules(
            data.get("rules", {}), errors,
        )

        if errors:
            error_msg: str = "Configuration errors:\n" + "\n".join(
                f"  - {e}" for e in errors
            )
            raise ConfigError(error_msg, path=config_path)

        return StyleGuardConfig(
            config_path=config_path,
            include=include,
            exclude=exclude,
            output_format=output_format,
            jobs=jobs,
            max_fix_iterations=max_fix_iterations,
            rules=MappingProxyType(rules),
        )

    @staticmethod
    def _parse_patterns(
        data: dict[str, Any],
        key: str,
        default: tuple[str, ...],
        errors: list[str],
    ) -> tuple[str, ...]:
        raw: Any = data.get(key, default)
        if isinstance(raw, tuple):
            return raw
        if not isinstance(raw, list) or not all(isinstance(p, str) for p in raw):
            errors.append(f"{key} must be a list of strings")
            return default
        return tuple(raw)

    @staticmethod
    def _parse_rules(data: Any, errors: list[str]) -> dict[str, RuleSettings]:
        """Parse per-rule tables on top of the defaults."""
        rules: dict[str, RuleSettings] = default_rule_settings()
        if not isinstance(data, dict):
            errors.append("rules must be a table")
            return rules

        for rule_id, value in data.items():
            if rule_id not in RULE_IDS:
                errors.append(f"Unknown rule id: {rule_id}")
                continue
            current: RuleSettings = rules[rule_id]

            # Shorthand: rules."css.zero-unit" = "error" | "warning" | "off"
            if isinstance(value, str):
                if value == "off":
                    rules[rule_id] = dataclasses.replace(current, enabled=False)
                    continue
                severity: Severity | None = _parse_severity(
                    value, f"rules.{rule_id}", errors,
                )
                if severity is not None:
                    rules[rule_id] = dataclasses.replace(current, severity=severity)
                continue

            if not isinstance(value, dict):
                errors.append(f"rules.{rule_id} must be a table or a severity string")
                continue

            for key in sorted(set(value) - _RULE_KEYS):
                errors.append(f"rules.{rule_id}: unknown key '{key}'")

            enabled: Any = value.get("enabled", current.enabled)
            if not isinstance(enabled, bool):
                errors.append(f"rules.{rule_id}.enabled must be a boolean")
                enabled = current.enabled

            severity = current.severity
            if "severity" in value:
                severity = _parse_severity(
                    value["severity"], f"rules.{rule_id}.severity", errors,
                ) or current.severity

            options: Any = ConfigLoader._parse_options(
                rule_id, value.get("options", {}), errors,
            )
            rules[rule_id] = RuleSettings(enabled=enabled, severity=severity, options=options)

        return rules

    @staticmethod
    def _parse_options(rule_id: str, data: Any, errors: list[str]) -> Any:
        """Build the rule's options dataclass, coercing TOML values by field default."""
        options_type: type[Any] = RULE_OPTION_TYPES[rule_id]
        defaults: Any = options_type()
        where: str = f"rules.{rule_id}.options"
        if not isinstance(data, dict):
            errors.append(f"{where} must be a table")
            return defaults

        known: dict[str, Any] = {
            f.name: getattr(defaults, f.name) for f in dataclasses.fields(options_type)
        }
        values: dict[str, Any] = {}
        for name, raw in data.items():
            if name not in known:
                errors.append(f"{where}: unknown option '{name}'")
                continue
            default: Any = known[name]
            if isinstance(default, bool):
                if not isinstance(raw, bool):
                    errors.append(f"{where}.{name} must be a boolean")
                    continue
                values[name] = raw
            elif isinstance(default, int):
                if not _is_int(raw):
                    errors.append(f"{where}.{name} must be an integer")
                    continue
                values[name] = raw
            elif isinstance(default, tuple):
                if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
                    errors.append(f"{where}.{name} must be a list of strings")
                    continue
                values[name] = tuple(raw)
            elif isinstance(default, Enum):
                try:
                    values[name] = type(default)(raw)
                except ValueError:
                    valid: list[str] = [m.value for m in type(default)]
                    errors.append(f"{where}.{name} must be one of {valid}")
                    continue

        options: Any = options_type(**values)
        errors.extend(f"{where}: {problem}" for problem in options.validate())
        return options


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_severity(value: Any, where: str, errors: list[str]) -> Severity | None:
    try:
        return Severity(str(value).lower())
    except ValueError:
        valid: list[str] = [s.value for s in Severity]
        errors.append(f"{where} must be one of {valid}")
        return None


def load_config(path: Path | None = None) -> StyleGuardConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Optional explicit path to a config file.

    Returns:
        Validated configuration.
    """
    return ConfigLoader.load(path)
