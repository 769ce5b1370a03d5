"""Command-line interface for styleguard using Click."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict, replace
from enum import Enum
from pathlib import Path
from typing import Any, Final

import click

from styleguard.config import load_config
from styleguard.constants import OutputFormat, __version__
from styleguard.explain import format_rule_detail, format_rule_table
from styleguard.rules.base import Rule
from styleguard.rules.registry import all_rules, get_rule
from styleguard.runner import RunResult, format_diff, format_results, lint_paths
from styleguard.types import ConfigError, RuleSettings, StyleGuardConfig

# Config errors, unknown rule ids and all-unparsable runs.
EXIT_INTERNAL: Final[int] = 2


def _options_dict(options: Any) -> dict[str, Any]:
    data: dict[str, Any] = asdict(options)
    for key, value in data.items():
        if isinstance(value, tuple):
            data[key] = list(value)
        elif isinstance(value, Enum):
            data[key] = value.value
    return data


def _severity_label(settings: RuleSettings) -> str:
    return settings.severity.value if settings.enabled else "off"


def format_config_text(*, config: StyleGuardConfig) -> str:
    """Format configuration as human-readable text."""
    lines: list[str] = [
        "styleguard Configuration",
        "=" * 40,
        "",
        f"Config file: {config.config_path or '(defaults)'}",
        "",
        "File Discovery:",
        f"  Include: {', '.join(config.include)}",
        f"  Exclude: {', '.join(config.exclude[:5])}{'...' if len(config.exclude) > 5 else ''}",
        "",
        "Execution:",
        f"  Format: {config.output_format.value}",
        f"  Jobs: {config.jobs or 'auto'}",
        f"  Max fix iterations: {config.max_fix_iterations}",
        "",
        "Rules:",
    ]

    for rule_id, settings in sorted(config.rules.items()):
        lines.append(f"  {rule_id}: {_severity_label(settings).upper()}")
        for name, value in _options_dict(settings.options).items():
            lines.append(f"      {name} = {value}")

    return "\n".join(lines)


def format_config_json(*, config: StyleGuardConfig) -> str:
    """Format configuration as JSON."""
    data: dict[str, Any] = {
        "config_path": str(config.config_path) if config.config_path else None,
        "include": list(config.include),
        "exclude": list(config.exclude),
        "output_format": config.output_format.value,
        "jobs": config.jobs,
        "max_fix_iterations": config.max_fix_iterations,
        "rules": {
            rule_id: {
                "enabled": settings.enabled,
                "severity": settings.severity.value,
                "options": _options_dict(settings.options),
            }
            for rule_id, settings in sorted(config.rules.items())
        },
    }
    return json.dumps(data, indent=2)


class ConfigType(click.ParamType):
    """Custom Click parameter type for config path."""

    name: str = "path"

    def convert(
        self,
        value: str | Path | None,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> Path | None:
        if value is None:
            return None
        return Path(value)


CONFIG_TYPE: Final[ConfigType] = ConfigType()


def _load_config(ctx: click.Context, override: Path | None = None) -> StyleGuardConfig:
    """Load the config named on the command line, exiting 2 if it is invalid."""
    path: Path | None = override or ctx.obj.get("config_path")
    try:
        return load_config(path=path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        if e.path:
            click.echo(f"  in: {e.path}", err=True)
        raise click.exceptions.Exit(EXIT_INTERNAL) from e


@click.group()
@click.version_option(version=__version__, prog_name="styleguard")
@click.option(
    "--config",
    "config_path",
    type=CONFIG_TYPE,
    default=None,
    help="Path to a TOML config file (default: search upward from current directory)",
)
@click.option("--verbose", is_flag=True, help="Show progress and timing")
@click.option("--debug", is_flag=True, help="Show detailed trace")
@click.pass_context
def cli(
    ctx: click.Context,
    *,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
) -> None:
    """styleguard - conformance checks for CSS/SCSS and Python/Django code."""
    level: int = (
        logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    )
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--validate", is_flag=True, help="Only validate configuration, don't print")
@click.option("--json", "as_json", is_flag=True, help="Output configuration as JSON")
@click.pass_context
def config(ctx: click.Context, *, validate: bool, as_json: bool) -> None:
    """Show or validate configuration."""
    cfg: StyleGuardConfig = _load_config(ctx)

    if validate:
        click.echo(f"Configuration valid: {cfg.config_path or '(defaults)'}")
        return

    if as_json:
        click.echo(format_config_json(config=cfg))
    else:
        click.echo(format_config_text(config=cfg))


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--fix", "apply_fixes", is_flag=True, help="Apply autofixes in place")
@click.option("--diff", "show_diff", is_flag=True, help="Print unified diff of fixes")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (overrides config)",
)
@click.option(
    "--config",
    "config_path",
    type=CONFIG_TYPE,
    default=None,
    help="Config file for this run (overrides the global option)",
)
@click.option("--rules", "rule_ids", default=None, help="Comma-separated rule ids to run")
@click.option("--jobs", type=click.IntRange(min=1), default=None, help="Worker threads")
@click.pass_context
def lint(
    ctx: click.Context,
    paths: tuple[Path, ...],
    *,
    apply_fixes: bool,
    show_diff: bool,
    output_format: str | None,
    config_path: Path | None,
    rule_ids: str | None,
    jobs: int | None,
) -> None:
    """Check CSS, SCSS and Python files against the style guide."""
    cfg: StyleGuardConfig = _load_config(ctx, config_path)

    # Apply CLI overrides
    overrides: dict[str, Any] = {}
    if output_format is not None:
        overrides["output_format"] = OutputFormat(output_format)
    if jobs is not None:
        overrides["jobs"] = jobs
    if overrides:
        cfg = replace(cfg, **overrides)

    if rule_ids is not None:
        selection: tuple[str, ...] = tuple(
            r.strip() for r in rule_ids.split(",") if r.strip()
        )
        try:
            cfg = cfg.with_selection(selection)
        except ConfigError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(EXIT_INTERNAL)

    if not paths:
        paths = (Path("."),)

    result: RunResult = lint_paths(
        paths=paths,
        config=cfg,
        fix=apply_fixes or show_diff,
        write=apply_fixes,
    )

    if show_diff:
        for file_result in result.files:
            if file_result.changed and file_result.original is not None:
                click.echo(
                    format_diff(
                        path=file_result.file,
                        old=file_result.original,
                        new=file_result.fixed or "",
                    ),
                    nl=False,
                )

    output: str = format_results(result=result, config=cfg)
    if output:
        click.echo(output)

    if apply_fixes and cfg.output_format == OutputFormat.TEXT:
        suffix: str = "s" if result.files_changed != 1 else ""
        click.echo(f"Fixed {result.files_changed} file{suffix}.")

    ctx.exit(result.exit_code)


@cli.command()
@click.argument("rule_id", required=False, default=None)
@click.option("--all", "show_all", is_flag=True, help="List all rules with summaries")
@click.pass_context
def explain(ctx: click.Context, rule_id: str | None, *, show_all: bool) -> None:
    """Show rule documentation and examples."""
    cfg: StyleGuardConfig = _load_config(ctx)
    severities: dict[str, str] = {
        rid: _severity_label(settings) for rid, settings in cfg.rules.items()
    }

    if show_all:
        click.echo(format_rule_table(
            rules=[rule.info for rule in all_rules()],
            severities=severities,
        ))
        return

    if rule_id is None:
        click.echo("Usage: styleguard explain <RULE_ID> or styleguard explain --all")
        ctx.exit(EXIT_INTERNAL)
        return

    try:
        rule: Rule = get_rule(rule_id.lower())
    except KeyError:
        click.echo(f"Error: Unknown rule id '{rule_id}'.", err=True)
        ctx.exit(EXIT_INTERNAL)
        return

    click.echo(format_rule_detail(
        info=rule.info,
        severity=severities.get(rule.info.id, "off"),
    ))


def main() -> None:
    """Main entry point for styleguard CLI."""
    cli()


if __name__ == "__main__":
    main()
