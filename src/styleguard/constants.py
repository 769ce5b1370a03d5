"""Constants and enums for styleguard configuration."""
from __future__ import annotations

from enum import Enum
from typing import Final

__version__: Final[str] = "0.1.0"


class Severity(Enum):
    """Violation severity levels."""

    ERROR = "error"
    WARNING = "warning"


class OutputFormat(Enum):
    """Output format options."""

    TEXT = "text"
    JSON = "json"


class Language(Enum):
    """Source languages the engine can parse."""

    CSS = "css"
    SCSS = "scss"
    PYTHON = "python"


class QuoteStyle(Enum):
    """Preferred string delimiter for python.quote-style."""

    SINGLE = "single"
    DOUBLE = "double"


LANGUAGE_BY_SUFFIX: Final[dict[str, Language]] = {
    ".css": Language.CSS,
    ".scss": Language.SCSS,
    ".py": Language.PYTHON,
}

STYLE_LANGUAGES: Final[frozenset[Language]] = frozenset({Language.CSS, Language.SCSS})

RULE_IDS: Final[frozenset[str]] = frozenset({
    "css.no-id-selector",           # Style classes, never ids
    "css.selector-per-line",        # One selector per line in a list
    "css.property-order",           # Declarations, @include, nested blocks
    "css.nesting-depth",            # At most three levels of selector nesting
    "css.no-extend",                # Prefer mixins over @extend
    "css.border-none",              # border: 0, not border: none
    "css.zero-unit",                # No units on zero lengths
    "css.bem-class-name",           # block__element--modifier class names
    "python.import-grouping",       # Six ordered, alphabetised import groups
    "python.naming-convention",     # snake_case / PascalCase
    "python.model-meta-position",   # Meta right after the last field
    "python.related-name-required", # Relation fields name their reverse accessor
    "python.quote-style",           # Consistent string delimiters
})

DEFAULT_SEVERITIES: Final[dict[str, Severity]] = {
    "css.no-id-selector": Severity.ERROR,
    "css.selector-per-line": Severity.WARNING,
    "css.property-order": Severity.ERROR,
    "css.nesting-depth": Severity.ERROR,
    "css.no-extend": Severity.ERROR,
    "css.border-none": Severity.ERROR,
    "css.zero-unit": Severity.WARNING,
    "css.bem-class-name": Severity.WARNING,
    "python.import-grouping": Severity.ERROR,
    "python.naming-convention": Severity.ERROR,
    "python.model-meta-position": Severity.WARNING,
    "python.related-name-required": Severity.ERROR,
    "python.quote-style": Severity.WARNING,
}

PARSE_ERROR_ID: Final[str] = "internal.parse-error"
RULE_CRASH_ID: Final[str] = "internal.rule-crash"

INTERNAL_IDS: Final[frozenset[str]] = frozenset({PARSE_ERROR_ID, RULE_CRASH_ID})

DEFAULT_MAX_FIX_ITERATIONS: Final[int] = 10

DEFAULT_INCLUDES: Final[tuple[str, ...]] = (
    "**/*.css",
    "**/*.scss",
    "**/*.py",
)

DEFAULT_EXCLUDES: Final[tuple[str, ...]] = (
    "**/__pycache__/**",
    "**/.*",
    "**/.git/**",
    "**/.venv/**",
    "**/venv/**",
    "**/env/**",
    "**/node_modules/**",
    "build/**",
    "dist/**",
    "*.egg-info/**",
)
