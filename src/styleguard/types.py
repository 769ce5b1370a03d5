"""Common types, rule options and exceptions for styleguard."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final

from styleguard.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDES,
    DEFAULT_MAX_FIX_ITERATIONS,
    DEFAULT_SEVERITIES,
    RULE_IDS,
    OutputFormat,
    QuoteStyle,
    Severity,
)


@dataclass(frozen=True, slots=True)
class NoOptions:
    """Options for rules that take none."""

    def validate(self) -> list[str]:
        return []


@dataclass(frozen=True, slots=True)
class NestingDepthOptions:
    """Options for css.nesting-depth."""

    max_depth: int = 3
    count_conditional_wrappers: bool = False

    def validate(self) -> list[str]:
        if self.max_depth < 1:
            return ["max_depth must be at least 1"]
        return []


@dataclass(frozen=True, slots=True)
class BorderNoneOptions:
    """Options for css.border-none."""

    properties: tuple[str, ...] = ("border",)

    def validate(self) -> list[str]:
        if not self.properties:
            return ["properties must name at least one property"]
        return []


@dataclass(frozen=True, slots=True)
class ZeroUnitOptions:
    """Options for css.zero-unit."""

    units: tuple[str, ...] = (
        "px", "em", "rem", "ex", "ch", "vw", "vh", "vmin", "vmax",
        "cm", "mm", "in", "pt", "pc",
    )

    def validate(self) -> list[str]:
        return []


@dataclass(frozen=True, slots=True)
class ImportGroupingOptions:
    """Options for python.import-grouping."""

    framework_packages: tuple[str, ...] = ("django",)
    local_packages: tuple[str, ...] = ()

    def validate(self) -> list[str]:
        overlap: set[str] = set(self.framework_packages) & set(self.local_packages)
        if overlap:
            return [
                "framework_packages and local_packages both list "
                f"{sorted(overlap)}"
            ]
        return []


@dataclass(frozen=True, slots=True)
class NamingConventionOptions:
    """Options for python.naming-convention."""

    allow_upper_constants: bool = True
    ignore_names: tuple[str, ...] = (
        "setUp", "tearDown", "setUpClass", "tearDownClass", "setUpTestData",
        "asyncSetUp", "asyncTearDown",
    )

    def validate(self) -> list[str]:
        return []


@dataclass(frozen=True, slots=True)
class ModelMetaOptions:
    """Options for python.model-meta-position."""

    meta_class_names: tuple[str, ...] = ("Meta",)

    def validate(self) -> list[str]:
        if not self.meta_class_names:
            return ["meta_class_names must name at least one class"]
        return []


@dataclass(frozen=True, slots=True)
class RelatedNameOptions:
    """Options for python.related-name-required."""

    field_types: tuple[str, ...] = ("ForeignKey", "ManyToManyField", "OneToOneField")

    def validate(self) -> list[str]:
        return []


@dataclass(frozen=True, slots=True)
class QuoteStyleOptions:
    """Options for python.quote-style."""

    preferred: QuoteStyle = QuoteStyle.SINGLE

    def validate(self) -> list[str]:
        return []


RULE_OPTION_TYPES: Final[dict[str, type[Any]]] = {
    "css.no-id-selector": NoOptions,
    "css.selector-per-line": NoOptions,
    "css.property-order": NoOptions,
    "css.nesting-depth": NestingDepthOptions,
    "css.no-extend": NoOptions,
    "css.border-none": BorderNoneOptions,
    "css.zero-unit": ZeroUnitOptions,
    "css.bem-class-name": NoOptions,
    "python.import-grouping": ImportGroupingOptions,
    "python.naming-convention": NamingConventionOptions,
    "python.model-meta-position": ModelMetaOptions,
    "python.related-name-required": RelatedNameOptions,
    "python.quote-style": QuoteStyleOptions,
}


@dataclass(frozen=True, slots=True)
class RuleSettings:
    """Resolved settings for a single rule."""

    enabled: bool
    severity: Severity
    options: Any


def default_rule_settings() -> dict[str, RuleSettings]:
    """Build the settings every rule has when no config file is given."""
    return {
        rule_id: RuleSettings(
            enabled=True,
            severity=DEFAULT_SEVERITIES[rule_id],
            options=RULE_OPTION_TYPES[rule_id](),
        )
        for rule_id in sorted(RULE_IDS)
    }


@dataclass(frozen=True, slots=True)
class StyleGuardConfig:
    """Complete styleguard configuration."""

    config_path: Path | None = None
    include: tuple[str, ...] = DEFAULT_INCLUDES
    exclude: tuple[str, ...] = DEFAULT_EXCLUDES
    output_format: OutputFormat = OutputFormat.TEXT
    jobs: int | None = None
    max_fix_iterations: int = DEFAULT_MAX_FIX_ITERATIONS
    rules: MappingProxyType[str, RuleSettings] = field(
        default_factory=lambda: MappingProxyType(default_rule_settings())
    )
    selected: frozenset[str] | None = None

    def get_severity(self, rule_id: str) -> Severity:
        """Get the effective severity for a rule id."""
        return self.rules[rule_id].severity

    def options_for(self, rule_id: str) -> Any:
        """Get the validated options struct for a rule id."""
        return self.rules[rule_id].options

    def is_rule_enabled(self, rule_id: str) -> bool:
        """Check if a rule is enabled and, when --rules was given, selected."""
        settings: RuleSettings | None = self.rules.get(rule_id)
        if settings is None or not settings.enabled:
            return False
        return self.selected is None or rule_id in self.selected

    def with_selection(self, rule_ids: tuple[str, ...]) -> StyleGuardConfig:
        """Restrict the run to the given rule ids."""
        unknown: list[str] = sorted(r for r in rule_ids if r not in RULE_IDS)
        if unknown:
            raise ConfigError(f"Unknown rule ids: {', '.join(unknown)}")
        return replace(self, selected=frozenset(rule_ids))


class ConfigError(Exception):
    """Error during configuration loading or validation."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path: Path | None = path
        super().__init__(message)


class ParseError(Exception):
    """Raised by a language adapter when source cannot be parsed."""

    def __init__(self, message: str, *, offset: int) -> None:
        self.message: str = message
        self.offset: int = offset
        super().__init__(message)


class RuleCrashError(Exception):
    """A rule's check or fix raised unexpectedly."""

    def __init__(self, rule_id: str, *, node_kind: str, cause: Exception) -> None:
        self.rule_id: str = rule_id
        self.node_kind: str = node_kind
        self.cause: Exception = cause
        super().__init__(
            f"{rule_id} crashed on {node_kind}: {type(cause).__name__}: {cause}"
        )


class EditConflictError(Exception):
    """Two edits handed to apply_edits overlap."""
