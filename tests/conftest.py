"""Pytest fixtures for styleguard tests."""
from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def temp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.styleguard]
include = ["src/**/*.scss", "src/**/*.py"]
exclude = ["**/migrations/**"]
output_format = "json"
jobs = 2
max_fix_iterations = 5

[tool.styleguard.rules]
"css.zero-unit" = "error"
"css.bem-class-name" = "off"

[tool.styleguard.rules."css.nesting-depth"]
severity = "warning"
options = { max_depth = 4, count_conditional_wrappers = true }

[tool.styleguard.rules."python.import-grouping"]
options = { framework_packages = ["django", "rest_framework"], local_packages = ["shop"] }

[tool.styleguard.rules."python.quote-style"]
enabled = false
options = { preferred = "double" }
"""
    )
    return config_path


@pytest.fixture
def standalone_config(tmp_path: Path) -> Path:
    """Create a styleguard.toml with keys at top level."""
    config_path: Path = tmp_path / "styleguard.toml"
    config_path.write_text(
        """
include = ["**/*.css"]

[rules."css.no-id-selector"]
severity = "warning"
"""
    )
    return config_path


@pytest.fixture
def empty_pyproject(tmp_path: Path) -> Path:
    """Create a pyproject.toml without [tool.styleguard] section."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[project]
name = "test-project"
version = "0.1.0"
"""
    )
    return config_path


@pytest.fixture
def invalid_toml(tmp_path: Path) -> Path:
    """Create an invalid TOML file."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text("invalid [ toml content")
    return config_path


@pytest.fixture
def invalid_rules_pyproject(tmp_path: Path) -> Path:
    """Create a pyproject.toml with several independent mistakes."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.styleguard]
jobs = 0

[tool.styleguard.rules."css.no-such-rule"]
enabled = true

[tool.styleguard.rules."css.nesting-depth"]
severity = "fatal"
options = { max_depth = "three", wrappers = true }

[tool.styleguard.rules."python.import-grouping"]
options = { framework_packages = ["django"], local_packages = ["django"] }
"""
    )
    return config_path
