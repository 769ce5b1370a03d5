"""Rule registry for styleguard."""
from __future__ import annotations

from styleguard.constants import Language
from styleguard.rules.base import Rule
from styleguard.rules.css_blocks import NestingDepthRule, NoExtendRule, PropertyOrderRule
from styleguard.rules.css_selectors import (
    BemClassNameRule,
    NoIdSelectorRule,
    SelectorPerLineRule,
)
from styleguard.rules.css_values import BorderNoneRule, ZeroUnitRule
from styleguard.rules.py_imports import ImportGroupingRule
from styleguard.rules.py_models import ModelMetaPositionRule, RelatedNameRequiredRule
from styleguard.rules.py_naming import NamingConventionRule
from styleguard.rules.py_strings import QuoteStyleRule
from styleguard.types import StyleGuardConfig


def get_enabled_rules(
    *,
    config: StyleGuardConfig,
    language: Language | None = None,
) -> list[Rule]:
    """Return rule instances enabled in the config, optionally for one language."""
    return [
        rule
        for rule in all_rules()
        if config.is_rule_enabled(rule.info.id)
        and (language is None or language in rule.info.languages)
    ]


def get_rule(rule_id: str) -> Rule:
    """Look up a rule by id.

    Raises:
        KeyError: If no rule has that id.
    """
    for rule in all_rules():
        if rule.info.id == rule_id:
            return rule
    raise KeyError(rule_id)


def all_rules() -> list[Rule]:
    """Return all registered rule instances, ordered by id."""
    rules: list[Rule] = [
        BemClassNameRule(),
        BorderNoneRule(),
        NestingDepthRule(),
        NoExtendRule(),
        NoIdSelectorRule(),
        PropertyOrderRule(),
        SelectorPerLineRule(),
        ZeroUnitRule(),
        ImportGroupingRule(),
        ModelMetaPositionRule(),
        NamingConventionRule(),
        QuoteStyleRule(),
        RelatedNameRequiredRule(),
    ]
    return sorted(rules, key=lambda rule: rule.info.id)
